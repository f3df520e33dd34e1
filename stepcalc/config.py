"""Runtime settings and logging setup.

Settings come from the environment (optionally a ``.env`` file) and can be
overridden on the command line.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LEVELS = {'CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG'}


class Settings(BaseModel):
    """Settings shared by the shell, the HTTP API and the CLI."""
    log_level: str = "WARNING"
    prompt: str = "Expression: "
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535, description="Port for the HTTP API")

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('host')
    @classmethod
    def host_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Host cannot be empty')
        return v.strip()

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from ``STEPCALC_*`` environment variables."""
        load_dotenv(dotenv_path)
        values = {}
        for field_name in cls.model_fields:
            raw = os.getenv(f"STEPCALC_{field_name.upper()}")
            if raw is not None:
                values[field_name] = raw
        return cls(**values)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
