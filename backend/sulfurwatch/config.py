from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    DATABASE_URL: str = "sqlite:///./sulfurwatch.db"
    LOG_LEVEL: str = "INFO"
    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    # Identity allowed to run admin mutations (register, set port state).
    # Empty disables every admin mutation.
    ADMIN_IDENTITY: str | None = "admin"
    # API authentication (if unset, all requests pass — local dev)
    SULFURWATCH_API_KEY: str | None = None
    # CORS origins (comma-separated string for env var support)
    CORS_ORIGINS: str = "http://localhost:5173"
    MAX_QUERY_LIMIT: int = 500
    # location -> port state label seed file
    PORT_STATES_CONFIG: str = "config/port_states.yaml"


settings = Settings()
