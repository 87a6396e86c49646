import logging
import threading
from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from schema_testkit.errors import ConnectionAcquisitionError, DatabaseNotConfigured
from schema_testkit.settings import DatabaseSettings, SchemaSettings, load_settings

logger = logging.getLogger(__name__)


class DatabaseRegistry:
    """Creates and caches one SQLAlchemy engine per configuration key"""

    def __init__(self, settings: Optional[SchemaSettings] = None):
        self.settings = settings.model_copy(deep=True) if settings is not None else load_settings()
        self.engines: Dict[str, Engine] = {}
        self._lock = threading.Lock()

    def register(self, config_key: str, url: str, **options) -> DatabaseSettings:
        """Declare (or replace) the database behind a configuration key"""
        database = DatabaseSettings(url=url, **options)
        with self._lock:
            self.settings.databases[config_key] = database
            engine = self.engines.pop(config_key, None)
        if engine is not None:
            engine.dispose()
        logger.info(f"Registered database for config key {config_key!r}")
        return database

    def database_settings(self, config_key: str) -> DatabaseSettings:
        try:
            return self.settings.databases[config_key]
        except KeyError:
            raise DatabaseNotConfigured(config_key) from None

    def engine(self, config_key: str) -> Engine:
        """Return the engine for a configuration key, creating it on first use"""
        with self._lock:
            engine = self.engines.get(config_key)
            if engine is None:
                engine = self._create_engine(config_key, self.database_settings(config_key))
                self.engines[config_key] = engine
            return engine

    @staticmethod
    def _create_engine(config_key: str, database: DatabaseSettings) -> Engine:
        options = {
            "pool_pre_ping": database.pool_pre_ping,
            "echo": database.echo,
        }
        if database.pool_size is not None:
            options["pool_size"] = database.pool_size
        if database.connect_args:
            options["connect_args"] = database.connect_args

        try:
            engine = create_engine(database.url, **options)
        except (SQLAlchemyError, ImportError) as e:
            raise ConnectionAcquisitionError(
                f"Could not create engine for config key {config_key!r}: {e}"
            ) from e

        logger.info(f"Created {engine.dialect.name} engine for config key {config_key!r}")
        return engine

    def dispose(self):
        """Dispose every cached engine"""
        with self._lock:
            engines = list(self.engines.items())
            self.engines.clear()
        for config_key, engine in engines:
            logger.info(f"Disposing engine for config key {config_key!r}")
            engine.dispose()
