import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env next to this file
BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")

class Settings:
    REPLICATE_API_URL: str = os.getenv("REPLICATE_API_URL", "https://api.replicate.com/v1")
    REPLICATE_API_TOKEN: str | None = os.getenv("REPLICATE_API_TOKEN")

    POLL_INTERVAL: float = float(os.getenv("POLL_INTERVAL", "1.0"))  # seconds
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "300"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
