from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # Base de datos
    db_url: str = Field("sqlite+aiosqlite:///./checkin.sqlite3", alias="DB_URL")

    # Enlaces de check-in embebidos en el QR
    checkin_base_url: str = Field("http://127.0.0.1:8000", alias="CHECKIN_BASE_URL")

    # Emisión de credenciales
    mint_max_attempts: int = Field(5, alias="MINT_MAX_ATTEMPTS")

    # Check-in
    default_operator_tag: str = Field("Unknown Worker", alias="DEFAULT_OPERATOR_TAG")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,  # permite defaults si no hay variable de entorno
    )


settings = Settings()
