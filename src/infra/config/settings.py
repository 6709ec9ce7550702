from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "DailyReward"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development
        "null"  # For file:// protocol
    ]

    # Reward Service Settings
    REWARD_SERVICE_URL: str = "http://localhost:54321/functions/v1/make-server"
    REWARD_SERVICE_API_KEY: Optional[str] = None  # Sent as Bearer token

    # HTTP Client Settings
    HTTP_DEFAULT_TIMEOUT: float = 15.0
    HTTP_MAX_CONNECTIONS: int = 10
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 5

    # Session Settings
    SESSION_BACKEND: str = "redis"  # redis or memory
    SESSION_KEY: str = "reward_client:user"

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # Claim Sequence Settings
    CLAIM_DURATION_MS: int = 5000
    CLAIM_TICK_MS: int = 50
    CLAIM_DISPLAY_DELAY_MS: int = 1000  # Success screen before commit

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
