from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Fieldkit"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings (related-entry lookups during preload)
    database_url: str = "sqlite+aiosqlite:///./fieldkit.db"

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = True

    # Fieldtype settings
    fieldtypes_config_file: str = "data/fieldtypes_config.json"
    index_max_length: int = 100

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
