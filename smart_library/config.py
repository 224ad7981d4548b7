import os
import tempfile
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "5000"))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))

    # Store settings
    database_file: str = os.getenv(
        "LIBRARY_DB_FILE",
        os.path.join(tempfile.gettempdir(), "library.db"),
    )

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Smart Library System")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Client settings
    api_base_url: str = os.getenv("API_BASE_URL", "")
    client_timeout: float = float(os.getenv("CLIENT_TIMEOUT", "10"))
    # Terminal width at which the book list switches from cards to a table
    list_breakpoint: int = int(os.getenv("LIST_BREAKPOINT", "100"))

    def __post_init__(self) -> None:
        if not self.api_base_url:
            self.api_base_url = f"http://{self.api_host}:{self.api_port}"


settings = Settings()
