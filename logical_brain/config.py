from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./logical_brain.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    allowed_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    # Engine tuning
    matching_short_token_length: int = 3
    metric_decimal_places: int = 2
    guard_context_window: int = 100
    max_parallel_agents: int = 4

    analysis_cache_enabled: bool = True
    synthesis_validation_enabled: bool = True
    seed_catalog_on_startup: bool = True


settings = Settings()
