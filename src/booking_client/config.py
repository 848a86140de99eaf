from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Load .env into os.environ before Settings reads env vars
load_dotenv(_PROJECT_ROOT / ".env", override=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    api_base_url: str = "https://hotel-booking-api-r5dd.onrender.com"
    http_timeout_seconds: float = 30.0

    # Paths
    token_path: Path = Path.home() / ".config" / "booking-client" / "token"

    # Client-side sync behaviour
    cache_ttl_ms: int = 300_000
    search_debounce_seconds: float = 0.5
    search_min_query_length: int = 3
    location_debounce_seconds: float = 1.0
    listing_limit: int = 10
    nearby_distance_m: int = 5000

    payment_callback_url: str = "app://payment-callback"

    log_level: str = "WARNING"


settings = Settings()
