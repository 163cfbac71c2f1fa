# app/config.py
from pydantic_settings import BaseSettings
from typing import Optional, Set
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)

    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Bootstrap: comma-separated emails that register as super_admin
    SUPER_ADMIN_EMAILS: Optional[str] = None

    # Categories created for a user the first time they list categories
    DEFAULT_CATEGORIES: str = Field("Work,Personal,Health,Learning,Finance")

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./tal.db"
        # Ensure asyncpg is used
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def super_admin_emails(self) -> Set[str]:
        if not self.SUPER_ADMIN_EMAILS:
            return set()
        return {email.strip().lower() for email in self.SUPER_ADMIN_EMAILS.split(",") if email.strip()}

    @property
    def default_categories(self) -> list[str]:
        return [name.strip() for name in self.DEFAULT_CATEGORIES.split(",") if name.strip()]

settings = Settings()
