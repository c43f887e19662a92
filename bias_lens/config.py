"""
Runtime settings, read from environment variables.

The CLI scripts call dotenv.load_dotenv() before load_settings(), so a
local .env file works the same as exported variables.  A missing API key
is not an error here: the client raises NotConfiguredError when it is
actually asked to analyze something.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

from .logger import get_module_logger

logger = get_module_logger("config")

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class Settings(BaseModel):
    """All tunables of the pipeline."""
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=1000, gt=0)
    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")

    min_content_length: int = Field(default=100, ge=0)
    min_paragraph_length: int = Field(default=20, ge=0)

    cache_max_age: float = Field(default=30 * 60, gt=0, description="Seconds")
    cache_capacity: int = Field(default=100, gt=0)


# Environment variable → Settings field
ENV_VARS = {
    "ANTHROPIC_API_KEY": "api_key",
    "BIAS_LENS_MODEL": "model",
    "BIAS_LENS_MAX_TOKENS": "max_tokens",
    "BIAS_LENS_TIMEOUT": "timeout",
    "BIAS_LENS_MIN_CONTENT_LENGTH": "min_content_length",
    "BIAS_LENS_CACHE_MAX_AGE": "cache_max_age",
    "BIAS_LENS_CACHE_CAPACITY": "cache_capacity",
}


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment.

    Explicit keyword overrides win over environment variables; pydantic
    coerces the string values and rejects invalid ones.
    """
    values = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    values.update({k: v for k, v in overrides.items() if v is not None})
    settings = Settings(**values)

    if not settings.api_key:
        logger.warning("No ANTHROPIC_API_KEY found. Analysis is unavailable until a key is configured.")
    return settings
