# utils/config.py
"""
Centralized Configuration Management

Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection

Missing database settings are logged at startup; they only become an
error when an engine is requested (see utils.db).
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass
from urllib.parse import quote_plus

from sqlalchemy.engine import make_url

# Initialize logger
logger = logging.getLogger(__name__)

DEFAULT_DB_DRIVER = "mysql+pymysql"


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


def _to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class DatabaseConfig:
    """Database configuration container"""
    host: str = ""
    port: int = 3306
    user: str = ""
    password: str = ""
    database: str = ""
    driver: str = DEFAULT_DB_DRIVER
    url: Optional[str] = None  # full DATABASE_URL, wins over the parts

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'driver': self.driver,
            'url': self.url,
        }

    def is_configured(self) -> bool:
        return bool(self.url or (self.host and self.user and self.database))

    def get_url(self, masked: bool = False) -> str:
        """SQLAlchemy URL from DATABASE_URL or the individual settings."""
        if self.url:
            return make_url(self.url).render_as_string(hide_password=masked)
        password = "***" if masked else quote_plus(str(self.password))
        return f"{self.driver}://{self.user}:{password}@{self.host}:{self.port}/{self.database}"


class Config:
    """
    Centralized configuration management

    Usage:
        from utils.config import config

        # Get database config
        db_config = config.get_db_config()

        # Get app settings
        goal = config.get_app_setting("DEFAULT_WEEKLY_GOAL", 50)

        # Check feature flags
        if config.is_feature_enabled("DEBUG_MODE"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 3306)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", ""),
            driver=db_secrets.get("driver", DEFAULT_DB_DRIVER),
            url=db_secrets.get("url") or st.secrets.get("DATABASE_URL"),
        )

        self._app_secrets = dict(st.secrets.get("APP", {}))

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "3306")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", os.getenv("DB_DATABASE", "")),
            driver=os.getenv("DB_DRIVER", DEFAULT_DB_DRIVER),
            url=os.getenv("DATABASE_URL") or None,
        )

        self._app_secrets = {}

        logger.info("💻 Running in LOCAL environment")

    def _setting(self, key: str, default: str) -> str:
        """App setting from secrets [APP] table, then environment."""
        if key in self._app_secrets:
            return str(self._app_secrets[key])
        return os.getenv(key, default)

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Business logic
            "DEFAULT_WEEKLY_GOAL": int(self._setting("DEFAULT_WEEKLY_GOAL", "50")),
            "LOCALE": self._setting("LOCALE", "es"),

            # Database pool
            "DB_POOL_SIZE": int(self._setting("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(self._setting("DB_POOL_RECYCLE", "3600")),

            # Cache
            "CACHE_TTL_SECONDS": int(self._setting("CACHE_TTL_SECONDS", "300")),

            # Feature flags
            "ENABLE_DEBUG_MODE": _to_bool(self._setting("ENABLE_DEBUG_MODE", "false")),
        }

    def _log_config_status(self):
        """Log configuration status"""
        if self._db_config.is_configured():
            logger.info(f"✅ Database: {self._db_config.get_url(masked=True)}")
        else:
            logger.warning(
                "⚠️ Missing database configuration (set DATABASE_URL or DB_HOST/DB_USER/DB_NAME)"
            )
        logger.info(f"✅ Default weekly goal: {self._app_config['DEFAULT_WEEKLY_GOAL']}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary"""
        return self._db_config.to_dict()

    def get_db_url(self) -> str:
        """
        Get SQLAlchemy connection URL

        Raises:
            ValueError: if the database is not configured
        """
        if not self._db_config.is_configured():
            raise ValueError("Missing required database configuration. Please check .env file.")
        return self._db_config.get_url()

    def get_masked_db_url(self) -> str:
        return self._db_config.get_url(masked=True)

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, False)

    # ==================== PROPERTIES ====================

    @property
    def db_config(self) -> Dict[str, Any]:
        return self.get_db_config()

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'IS_RUNNING_ON_CLOUD',
    'APP_CONFIG',
]
