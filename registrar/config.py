"""
Configuration for the records store.

Settings are a pydantic model so values from a JSON config file or from the
environment are validated the same way. Named presets are exposed through the
``config`` dictionary.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from pydantic import BaseModel, Field, field_validator

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(name)s]'

ENV_PREFIX = "REGISTRAR_"


class StoreConfig(BaseModel):
    """Where the records live and how the platform logs."""
    data_dir: str = Field(default="data", min_length=1)
    backup_file: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def backup_path(self) -> str:
        """Backup location; defaults to ``backup.dat`` inside the data directory."""
        return self.backup_file or os.path.join(self.data_dir, "backup.dat")

    @classmethod
    def from_env(cls, base: Optional["StoreConfig"] = None) -> "StoreConfig":
        """Overlay ``REGISTRAR_*`` environment variables on ``base``."""
        values = (base or cls()).model_dump()
        for name in cls.model_fields:
            env_value = os.environ.get(ENV_PREFIX + name.upper())
            if env_value:
                values[name] = env_value
        return cls.model_validate(values)


config = {
    'development': StoreConfig(data_dir="data", log_level="DEBUG"),
    'testing': StoreConfig(data_dir=os.path.join("build", "test-data"), log_level="WARNING"),
    'default': StoreConfig(),
}


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Install console logging, plus a rotating file log when ``log_file`` is set."""
    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level.upper())

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10240000, backupCount=10)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
