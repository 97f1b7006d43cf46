"""
Configuration for the elvdoc command-line tool.

Settings are read from ELVDOC_* environment variables. The library
functions never consult them; only elvdoc.tools.cli does.

    ELVDOC_LOG_LEVEL      DEBUG, INFO, WARNING, ERROR (default INFO)
    ELVDOC_LOG_FORMAT     text or json (default text)
    ELVDOC_COMPRESSLEVEL  gzip level 1-9 for `elvdoc pack` (default 9)
    ELVDOC_SOURCE_MTIME   fixed entry timestamp for reproducible builds
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """elvdoc CLI configuration."""

    log_level: str = Field(default="INFO")
    log_format: Literal["text", "json"] = Field(default="text")

    compresslevel: int = Field(default=9, ge=1, le=9)
    source_mtime: Optional[int] = Field(
        default=None, description="Unix timestamp stamped on every entry (unset = now)"
    )

    model_config = {"env_prefix": "ELVDOC_"}


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
