"""
Configuration loader for environment variables.
"""

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


class Config:
    """Application configuration from environment variables."""

    # Full SQLAlchemy URL (takes precedence over the PostgreSQL parts below)
    DATABASE_URL = os.getenv('DATABASE_URL')

    # PostgreSQL
    POSTGRES_HOST = os.getenv('POSTGRES_HOST', 'localhost')
    POSTGRES_PORT = os.getenv('POSTGRES_PORT', '5432')
    POSTGRES_DATABASE = os.getenv('POSTGRES_DATABASE', 'resourcepulse')
    POSTGRES_USER = os.getenv('POSTGRES_USER')
    POSTGRES_PASSWORD = os.getenv('POSTGRES_PASSWORD')

    # Application
    APP_ENV = os.getenv('APP_ENV', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    SQL_ECHO = os.getenv('SQL_ECHO', 'false').lower() in ('1', 'true', 'yes')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    @classmethod
    def get_database_url(cls):
        """Get SQLAlchemy connection URL."""
        if cls.DATABASE_URL:
            return cls.DATABASE_URL
        return (
            f"postgresql://{cls.POSTGRES_USER}:{cls.POSTGRES_PASSWORD}"
            f"@{cls.POSTGRES_HOST}:{cls.POSTGRES_PORT}/{cls.POSTGRES_DATABASE}"
        )

    @classmethod
    def is_production(cls) -> bool:
        """Error details are hidden from API responses in production."""
        return cls.APP_ENV.lower() == 'production'

    @classmethod
    def get_cors_origins(cls):
        """Allowed CORS origins as a list."""
        return [o.strip() for o in cls.CORS_ORIGINS.split(',') if o.strip()]
