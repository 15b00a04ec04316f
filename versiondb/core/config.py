from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    API_TOKEN: str
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    DATABASE_PATH: str = "db.sqlite"
    SQL_ECHO: bool = False

    UPSTREAM_BASE_URL: str = "https://minecraft.curseforge.com/api/game"
    UPSTREAM_TIMEOUT: float = 30.0
    REFRESH_TTL_SECONDS: float = 300.0

    STATIC_DIR: str = "static"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create a single instance of the settings to use everywhere
settings = Settings()
