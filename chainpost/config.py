from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # HTTP transport settings
    request_timeout_seconds: float = 30.0
    follow_redirects: bool = True
    verify_ssl: bool = True
    user_agent: str = "chainpost/1.0"

    # Streaming settings
    websocket_receive_timeout_seconds: float = 30.0
    subscription_timeout_seconds: float = 60.0
    subscription_ack_timeout_seconds: float = 5.0
    max_receive_size: int = 10 * 1024 * 1024  # 10MB per frame

    # History
    history_max_entries: int = 10

    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_prefix = "CHAINPOST_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
