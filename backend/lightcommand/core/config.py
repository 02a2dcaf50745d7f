from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Define the backend root directory (where this config file's parent/parent/parent is)
BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "LightCommand"
    PROJECT_VERSION: str = "1.0.0"

    # Database - shared by every worker process, so use an absolute path
    DATABASE_URL: str = f"sqlite:///{BACKEND_ROOT / 'lightcommand.db'}"

    # Queue processing
    BATCH_SIZE: int = 10  # commands claimed per cycle
    POLL_INTERVAL: float = 0.1  # seconds between cycles
    ERROR_BACKOFF: float = 5.0  # seconds to wait after a failed cycle
    ERROR_BACKOFF_JITTER: float = 1.0
    STALE_CLAIM_MINUTES: int = 5  # processing rows older than this are reclaimed

    # Vendor HTTP
    HTTP_TIMEOUT: float = 5.0

    # Philips Hue bridge (CLIP v2)
    HUE_BRIDGE_IP: Optional[str] = None
    HUE_API_KEY: Optional[str] = None  # Set via environment variable for security
    HUE_VERIFY_TLS: bool = False  # bridges on the LAN present a self-signed cert

    # Govee cloud API
    GOVEE_API_URL: str = "https://developer-api.govee.com"
    GOVEE_API_KEY: Optional[str] = None

    # Remote button mapping
    BUTTON_CONFIG_PATH: str = str(BACKEND_ROOT / "config" / "buttons.json")

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
