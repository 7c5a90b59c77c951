from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "TokenGate"
    DATABASE_URL: str = "sqlite:///./data/tokengate.db"

    # Token Config
    TOKEN_SECRET: str
    TOKEN_ISSUER: str
    TOKEN_ALGORITHM: str = "HS256"
    TOKEN_VALIDITY_HOURS: int = 24

    # Security
    PASSWORD_PEPPER: str = ""

    # Initial admin account, seeded on startup
    ADMIN_USERNAME: str
    ADMIN_PASSWORD: str

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(env_file=".env")

settings = Settings()
