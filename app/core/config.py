from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parents[2]

class Settings(BaseSettings):
    PROJECT_NAME: str = "GRIT X Booking Backend"
    API_V1_STR: str = "/api"
    
    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"
    
    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    
    # Operating hours (facility-local clock, no timezone conversion)
    OPERATING_START: str = "08:00"
    OPERATING_END: str = "20:00"
    SLOT_MINUTES: int = 60
    DEFAULT_DURATION_MINUTES: int = 60
    
    # Catalog
    FACILITIES_PATH: str = str(BASE_DIR / "data" / "facilities.json")
    
    # Admin whitelist (grant-only, see AdminPolicy)
    ADMIN_EMAILS: List[str] = []

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
