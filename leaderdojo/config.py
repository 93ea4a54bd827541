"""
LeaderDojo
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name]())
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Default SQLite path for local dev when PostgreSQL is not running
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'leaderdojo_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


def _env_bool(name, default):
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL")

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Identity: trusted header set by the upstream auth proxy
    USER_ID_HEADER = os.getenv("USER_ID_HEADER", "X-User-Id")

    # AI gateway
    AI_PROVIDER = os.getenv("AI_PROVIDER", "openai")          # openai | local
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    AI_MODEL = os.getenv("AI_MODEL", "gpt-4.1-mini")
    AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE", "0.4"))
    AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    AI_PROMPTS_DIR = os.getenv("AI_PROMPTS_DIR")              # optional YAML overrides

    # Dashboard / prep thresholds
    WEEKLY_FOCUS_LIMIT = int(os.getenv("WEEKLY_FOCUS_LIMIT", "5"))
    IDLE_PROJECT_DAYS = int(os.getenv("IDLE_PROJECT_DAYS", "45"))
    IDLE_PROJECT_MIN_PRIORITY = int(os.getenv("IDLE_PROJECT_MIN_PRIORITY", "3"))
    PREP_ENTRY_LIMIT = int(os.getenv("PREP_ENTRY_LIMIT", "10"))

    # Concurrent independent reads (dashboard, prep, reflection stats)
    PARALLEL_READS = _env_bool("PARALLEL_READS", True)
    PARALLEL_READS_MAX_WORKERS = int(os.getenv("PARALLEL_READS_MAX_WORKERS", "4"))


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = (
        _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else _SQLITE_DEV
    )


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AI_PROVIDER = "local"
    AI_PROMPTS_DIR = None
    # In-memory SQLite is a single shared connection; worker threads would
    # interleave on it.
    PARALLEL_READS = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    # Railway/Heroku use postgres:// but SQLAlchemy 2.0 requires postgresql://
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else None
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
        "connect_args": {
            "options": "-c statement_timeout=30000",  # 30s query timeout
        },
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")
        if self.AI_PROVIDER == "openai" and not self.OPENAI_API_KEY:
            raise RuntimeError("OPENAI_API_KEY environment variable is required in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
