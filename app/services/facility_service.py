from typing import Any, Dict, List, Optional

from app.core.config_loader import get_operating_hours, load_facility_catalog
from app.core.exceptions import NotFoundError
from app.models.db_models import Facility


class FacilityService:
    """Read-only access to the facility catalog."""

    def __init__(self, catalog: Optional[Dict[str, Any]] = None):
        self.catalog = catalog if catalog is not None else load_facility_catalog()
        self._facilities = [Facility(**f) for f in self.catalog.get("facilities", [])]

    def list_facilities(self) -> List[Facility]:
        return list(self._facilities)

    def get_by_slug(self, slug: str) -> Facility:
        for facility in self._facilities:
            if facility.slug == slug:
                return facility
        raise NotFoundError(f"Facility '{slug}' not found.")

    def get_by_id(self, facility_id: str) -> Facility:
        for facility in self._facilities:
            if facility.id == facility_id:
                return facility
        raise NotFoundError(f"Facility {facility_id} not found.")

    def operating_hours(self, facility: Facility) -> Dict[str, str]:
        return get_operating_hours(facility.model_dump())
