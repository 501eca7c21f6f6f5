"""
Tunables for the correction pipeline.

The pipeline never reads the environment itself; the server builds a
CorrectionConfig with ``from_env`` at startup and passes it in.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .cache import DEFAULT_TTL_SECONDS
from .fuzzy import DEFAULT_THRESHOLD

DEFAULT_MAX_RECORDS = 1000
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class CorrectionConfig:
    cache_ttl_seconds: float = DEFAULT_TTL_SECONDS
    fuzzy_threshold: float = DEFAULT_THRESHOLD
    max_records: int = DEFAULT_MAX_RECORDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        if self.max_records < 1:
            raise ValueError(f"max_records must be >= 1, got {self.max_records}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CorrectionConfig":
        """
        Build a config from DATASF_* environment variables, falling back to defaults.

        Recognized: DATASF_CACHE_TTL_SECONDS, DATASF_FUZZY_THRESHOLD,
        DATASF_MAX_RECORDS, DATASF_TIMEOUT_SECONDS.
        """
        env = os.environ if environ is None else environ
        return cls(
            cache_ttl_seconds=float(env.get("DATASF_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)),
            fuzzy_threshold=float(env.get("DATASF_FUZZY_THRESHOLD", DEFAULT_THRESHOLD)),
            max_records=int(env.get("DATASF_MAX_RECORDS", DEFAULT_MAX_RECORDS)),
            timeout_seconds=float(env.get("DATASF_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
        )
