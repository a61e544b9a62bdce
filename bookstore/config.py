import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Storage
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "json")
    JSON_DB_PATH: str = os.getenv("JSON_DB_PATH", "api.json")
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")

    # Auth
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))

    # Orders
    ORDER_STATUS_POLICY: str = os.getenv("ORDER_STATUS_POLICY", "open")

    # Server
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    @property
    def DATABASE_URL(self) -> str:
        """Async driver URL for the SQL backend"""
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql+asyncpg://")


settings = Settings()
