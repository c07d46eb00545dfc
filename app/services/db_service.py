from supabase import create_async_client, AsyncClient
from postgrest.exceptions import APIError
import httpx
from supabase_auth.errors import AuthRetryableError
from app.core.config import settings
from app.core.exceptions import BackendUnavailableError, NotAuthenticatedError, SlotTakenError
from app.models.db_models import BookingStatus, Requester
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger("app")

# PostgreSQL exclusion_violation, raised by bookings_no_overlap
EXCLUSION_VIOLATION = "23P01"

class DBService:
    _instance = None
    _client: AsyncClient = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(DBService, cls).__new__(cls)
            # Async client is created lazily on first use
        return cls._instance

    async def get_client(self) -> AsyncClient:
        if not self._client:
            if not (settings.SUPABASE_URL and settings.SUPABASE_KEY):
                logger.error("❌ Supabase credentials missing")
                raise BackendUnavailableError("Booking store is not configured.")
            try:
                self._client = await create_async_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
                logger.info("✅ Supabase Async client initialized")
            except Exception as e:
                logger.error(f"❌ Failed to initialize Supabase Async: {e}")
                raise BackendUnavailableError("Booking store is unreachable.") from e
        return self._client

    async def _execute(self, query, operation: str) -> List[Dict[str, Any]]:
        """
        Runs a PostgREST query and returns its rows.
        Store and transport failures surface as BackendUnavailableError.
        """
        try:
            response = await query.execute()
        except APIError as e:
            logger.error(f"❌ DB Error ({operation}): {e.code} {e.message}")
            raise BackendUnavailableError(
                "The booking store returned an unexpected error.",
                details={"operation": operation, "code": e.code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ DB unreachable ({operation}): {e}")
            raise BackendUnavailableError(
                "The booking store could not be reached.",
                details={"operation": operation},
            ) from e
        return response.data or []

    # --- Bookings ---

    async def get_active_bookings(self, facility_id: str, day: str) -> List[Dict[str, Any]]:
        """
        Returns all non-cancelled bookings for a facility on a date.
        Always a fresh read; nothing is cached between calls.
        """
        client = await self.get_client()
        query = client.table('bookings')\
            .select("id, user_id, start_time, end_time, status")\
            .eq('facility_id', facility_id)\
            .eq('date', day)\
            .neq('status', BookingStatus.CANCELLED.value)
        rows = await self._execute(query, "get_active_bookings")
        # Rows written with odd casing slip past the neq filter
        return [r for r in rows if (r.get('status') or '').lower() != BookingStatus.CANCELLED.value]

    async def insert_booking(self, booking_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserts a booking row and returns the persisted row.
        An exclusion-constraint violation means another request won the race.
        """
        client = await self.get_client()
        try:
            response = await client.table('bookings').insert(booking_data).execute()
        except APIError as e:
            if e.code == EXCLUSION_VIOLATION:
                logger.warning(f"⚠️ Overlap rejected by storage constraint: {booking_data.get('facility_id')} {booking_data.get('date')} {booking_data.get('start_time')}")
                raise SlotTakenError(
                    "This time slot has just been taken by another user.",
                    details={"source": "storage_constraint"},
                ) from e
            logger.error(f"❌ DB Error (insert_booking): {e.code} {e.message}")
            raise BackendUnavailableError(
                "The booking store returned an unexpected error.",
                details={"operation": "insert_booking", "code": e.code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ DB unreachable (insert_booking): {e}")
            raise BackendUnavailableError(
                "The booking store could not be reached.",
                details={"operation": "insert_booking"},
            ) from e

        if not response.data:
            raise BackendUnavailableError("The booking store did not return the inserted row.")
        logger.info(f"✅ Booking {response.data[0].get('id')} stored for user {booking_data.get('user_id')}")
        return response.data[0]

    async def update_booking_status(self, booking_id: str, status: str) -> Optional[Dict[str, Any]]:
        """
        Updates a booking's status and returns the updated row,
        or None when no row was touched (missing or blocked by RLS).
        """
        client = await self.get_client()
        query = client.table('bookings').update({'status': status}).eq('id', booking_id)
        rows = await self._execute(query, "update_booking_status")
        return rows[0] if rows else None

    async def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]:
        client = await self.get_client()
        rows = await self._execute(
            client.table('bookings').select("*").eq('id', booking_id).limit(1),
            "get_booking",
        )
        return rows[0] if rows else None

    async def list_bookings(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Bookings newest first, optionally only those of one user."""
        client = await self.get_client()
        query = client.table('bookings').select("*")
        if user_id:
            query = query.eq('user_id', user_id)
        return await self._execute(query.order('created_at', desc=True), "list_bookings")

    # --- Generic inserts / listings (events, RSVPs, contact messages) ---

    async def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        client = await self.get_client()
        rows = await self._execute(client.table(table).insert(row), f"insert:{table}")
        if not rows:
            raise BackendUnavailableError(f"The store did not return the inserted {table} row.")
        return rows[0]

    async def list_rows(self, table: str, order: str, desc: bool = True) -> List[Dict[str, Any]]:
        client = await self.get_client()
        return await self._execute(
            client.table(table).select("*").order(order, desc=desc),
            f"list:{table}",
        )

    async def get_row(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        client = await self.get_client()
        rows = await self._execute(
            client.table(table).select("*").eq('id', row_id).limit(1),
            f"get:{table}",
        )
        return rows[0] if rows else None

    # --- Auth ---

    async def get_profile_role(self, user_id: str) -> Optional[str]:
        client = await self.get_client()
        rows = await self._execute(
            client.table('profiles').select("role").eq('id', user_id).limit(1),
            "get_profile_role",
        )
        return rows[0].get('role') if rows else None

    async def get_requester(self, access_token: str) -> Requester:
        """
        Resolves a Supabase access token to the signed-in user.
        Auth state is only read here, never modified.
        """
        client = await self.get_client()
        try:
            response = await client.auth.get_user(access_token)
        except httpx.HTTPError as e:
            logger.error(f"❌ Auth provider unreachable: {e}")
            raise BackendUnavailableError("The auth provider could not be reached.") from e
        except AuthRetryableError as e:
            logger.error(f"❌ Auth provider unavailable: {e}")
            raise BackendUnavailableError("The auth provider is temporarily unavailable.") from e
        except Exception as e:
            logger.warning(f"⚠️ Rejected access token: {e}")
            raise NotAuthenticatedError("Invalid or expired session.") from e

        user = getattr(response, 'user', None)
        if not user:
            raise NotAuthenticatedError("Invalid or expired session.")

        metadata = getattr(user, 'user_metadata', None) or {}
        return Requester(
            id=str(user.id),
            email=(user.email or None),
            phone=(getattr(user, 'phone', None) or metadata.get('phone_number') or None),
        )

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

db_service = DBService()
