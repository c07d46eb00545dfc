from typing import List

from app.core.logger import logger
from app.models.api_models import ContactRequest
from app.models.db_models import ContactMessage
from app.services.db_service import db_service, utc_now_iso


class ContactService:
    def __init__(self, db=None):
        self.db = db or db_service

    async def submit(self, request: ContactRequest) -> ContactMessage:
        payload = {
            'name': request.name,
            'email': request.email,
            'phone': request.phone,
            'message': request.message,
            'created_at': utc_now_iso(),
        }
        row = await self.db.insert_row('contact_messages', payload)
        logger.info(f"✉️ Contact message from {request.email}")
        return ContactMessage.from_row(row)

    async def list_messages(self) -> List[ContactMessage]:
        rows = await self.db.list_rows('contact_messages', order='created_at')
        return [ContactMessage.from_row(r) for r in rows]
