# app/config/settings.py
from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    # App Info
    app_name: str = "Parcel Carrier API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Storage: "database" (SQLAlchemy) or "memory"
    storage_backend: str = "database"
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./parcel_carrier.db")
    seed_demo_data: bool = False

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "change-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080

    # Roles allowed to accept somebody else's delivery
    accept_roles: str = "carrier,both"

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 10000))

    @property
    def accept_roles_list(self) -> List[str]:
        return [role.strip() for role in self.accept_roles.split(",") if role.strip()]

    @property
    def database_url_with_ssl(self) -> str:
        """SSL for hosted PostgreSQL connections"""
        if self.database_url and "render" in self.database_url:
            if "?sslmode=" not in self.database_url:
                return f"{self.database_url}?sslmode=require"
        return self.database_url

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = 'ignore'

settings = Settings()
