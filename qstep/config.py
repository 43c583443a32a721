"""Runtime settings read from ``QSTEP_*`` environment variables."""

import os
from functools import lru_cache
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "QSTEP_"


class Settings(BaseModel):
    # pause between gates in the async driver, in seconds
    step_delay: float = Field(default=0.3, ge=0.0)
    # dense vectors double in size per qubit
    max_qubits: int = Field(default=20, ge=1)
    # initial plus every intermediate state is kept for a run
    max_stored_amplitudes: int = Field(default=1 << 22, ge=1)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to :data:`os.environ`)."""
        if environ is None:
            environ = os.environ
        values = {}
        for field in cls.model_fields:
            key = ENV_PREFIX + field.upper()
            if key in environ:
                values[field] = environ[key]
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
