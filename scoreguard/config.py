import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("uvicorn")

# Only ever used when ENVIRONMENT=development
DEV_SECRET = "dev-insecure-secret-change-me"

LOCAL_DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _split_csv(raw: str) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    secret: str
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: List[str] = field(default_factory=list)
    trust_proxy: bool = False
    sweep_interval_sec: float = 60.0

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def load_settings() -> Settings:
    environment = os.getenv("ENVIRONMENT", "production")
    is_development = environment == "development"

    secret = os.getenv("GAME_SECRET")
    if not secret:
        if not is_development:
            raise RuntimeError("Missing required environment variable: GAME_SECRET")
        logger.warning("GAME_SECRET not set - using insecure development secret")
        secret = DEV_SECRET

    origins = _split_csv(os.getenv("ALLOWED_ORIGINS"))
    if is_development:
        origins = LOCAL_DEV_ORIGINS + [o for o in origins if o not in LOCAL_DEV_ORIGINS]

    try:
        port = int(os.getenv("PORT", "3000"))
        sweep_interval_sec = float(os.getenv("SWEEP_INTERVAL_SEC", "60"))
    except ValueError as exc:
        raise RuntimeError("PORT and SWEEP_INTERVAL_SEC must be numeric") from exc

    return Settings(
        secret=secret,
        environment=environment,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        allowed_origins=origins,
        trust_proxy=_env_bool("TRUST_PROXY"),
        sweep_interval_sec=sweep_interval_sec,
    )
