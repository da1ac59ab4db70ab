from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"

    # Bot endpoints
    user_bot_port: int = 3979
    ta_bot_port: int = 3978
    user_bot_url: str = "http://localhost:3979"
    ta_bot_url: str = "http://localhost:3978"
    peer_timeout_seconds: float = 10.0

    # Chat transport: "outbox" keeps replies in memory, "connector" posts them to the activity serviceUrl
    chat_transport: str = "outbox"

    # Handover reports
    reports_dir: str = "handover-reports"

    # Optional S3-compatible copy of every report (leave bucket empty to disable)
    s3_endpoint_url: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_bucket_name: str = ""
    s3_region: str = ""
    s3_reports_prefix: str = "handover-reports"

    welcome_text: str = "Welcome to Aparate Handover Bot. Please type handover to initiate handover process."

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from .env (called on module reload by uvicorn --reload)."""
    global _settings
    _settings = None
    return get_settings()
