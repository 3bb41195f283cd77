from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # QingLong panel (open API application credentials)
    qinglong_url: str = ""
    qinglong_client_id: str = ""
    qinglong_client_secret: str = ""

    # DingTalk robot (Stream mode)
    dingtalk_client_id: str = ""  # Optional: bot is skipped when missing
    dingtalk_client_secret: str = ""

    # HTTP
    http_timeout_seconds: float = 30.0

    # Environment
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
