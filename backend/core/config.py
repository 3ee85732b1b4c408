"""
Service Configuration
Settings loaded from environment variables (and an optional .env file).

The coin catalogue is fixed: every poll requests exactly these coins.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Tuple

from pydantic_settings import BaseSettings


PROJECT_ROOT = Path(__file__).resolve().parents[2]

# coin id -> (display name, ticker symbol)
COINS: Dict[str, Tuple[str, str]] = {
    "bitcoin": ("Bitcoin", "BTC"),
    "ethereum": ("Ethereum", "ETH"),
    "dogecoin": ("Dogecoin", "DOGE"),
    "litecoin": ("Litecoin", "LTC"),
}


class Settings(BaseSettings):
    """Price alert service settings."""

    # --- Price provider ---
    crypto_api_base_url: str = "https://api.coingecko.com/api/v3"
    price_api_timeout: float = 10.0

    # --- HTTP server ---
    node_env: str = "development"
    port: int = 3000
    cors_origin: str = "http://localhost:3000"
    app_url: str = ""
    frontend_dir: str = str(PROJECT_ROOT / "frontend")

    # --- Email transport ---
    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: str = ""
    email_pass: str = ""
    email_use_tls: bool = True
    email_timeout: float = 15.0
    notification_email: str = ""

    # --- Monitoring ---
    alert_check_interval: int = 60000  # milliseconds
    monitor_enabled: bool = True
    alerts_file: str = "data/alerts.json"

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def recipient(self) -> str:
        return self.notification_email or self.email_user

    def allowed_origins(self) -> List[str]:
        if self.is_production:
            return [self.app_url] if self.app_url else ["*"]
        return [self.cors_origin]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
