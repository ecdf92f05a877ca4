"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Config:
    TESTING = _flag("TESTING")
    DEBUG = _flag("DEBUG")

    # Chat settings
    CHAT_DEFAULT_PAGE_SIZE: int = int(os.getenv("CHAT_DEFAULT_PAGE_SIZE", "20"))
    CHAT_MAX_PAGE_SIZE: int = int(os.getenv("CHAT_MAX_PAGE_SIZE", "100"))
    THREAD_MAX_PAGE_SIZE: int = int(os.getenv("THREAD_MAX_PAGE_SIZE", "50"))
    # Upper bound on repository pages walked when building an inbox
    INBOX_MAX_PAGES: int = int(os.getenv("INBOX_MAX_PAGES", "20"))

    # Realtime
    REALTIME_CHANNEL_PREFIX: str = os.getenv("REALTIME_CHANNEL_PREFIX", "chat")
    TYPING_INDICATOR_TTL_SECONDS: float = float(
        os.getenv("TYPING_INDICATOR_TTL_SECONDS", "3")
    )

    # Auth
    SERVICE_AUTH_SECRET = os.getenv("SERVICE_AUTH_SECRET", "")
    SERVICE_AUTH_ISSUER = os.getenv("SERVICE_AUTH_ISSUER", "marketplace")
    SERVICE_AUTH_AUDIENCE = os.getenv("SERVICE_AUTH_AUDIENCE", "marketplace-chat")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH") or None
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s",
    )

    # Redis settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")

    # Postgresql Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")


class DevelopmentConfig(Config):
    """Development configuration"""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    SERVICE_AUTH_SECRET = "testing-secret"


class ProductionConfig(Config):
    """Production configuration"""

    pass


# Configuration dictionary
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.getenv("APP_ENV", "development")
    return config.get(env, config["default"])
