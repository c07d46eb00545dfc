import json
import os
import logging
from typing import Dict, Any, Optional

from app.core.config import settings

logger = logging.getLogger("app")

def load_facility_catalog(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the facility catalog from JSON file.
    Raises FileNotFoundError if the catalog is missing.
    Returns: Dict containing the catalog.
    """
    path = path or settings.FACILITIES_PATH
    if not os.path.exists(path):
        logger.critical(f"❌ Facility catalog '{path}' not found! The application cannot start.")
        raise FileNotFoundError(f"Facility catalog not found at {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            catalog = json.load(f)
            logger.info(f"✅ Catalog loaded for: {catalog.get('company_name', 'Unknown')} ({len(catalog.get('facilities', []))} facilities)")
            return catalog
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Failed to parse facility catalog JSON: {e}")
        raise ValueError(f"Invalid JSON in facility catalog: {e}")

def get_operating_hours(facility: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Helper to get operating hours for a facility entry.
    Returns: Dict {'start': 'HH:MM', 'end': 'HH:MM'}, falling back to the
    settings defaults for facilities without an override.
    """
    hours = (facility or {}).get("operating_hours") or {}
    return {
        "start": hours.get("start", settings.OPERATING_START),
        "end": hours.get("end", settings.OPERATING_END),
    }
