from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Brand Registry"
    debug: bool = False

    api_base_url: str = "http://localhost:8000/api"
    api_timeout_seconds: float = 30.0

    filter_debounce_ms: int = 500
    notification_ttl_seconds: float = 4.0
    create_redirect_delay_seconds: float = 2.0

    log_level: str = "INFO"
    log_level_http: str = "WARNING"

    streamlit_port: int = 8501


settings = Settings()
