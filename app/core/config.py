"""Environment settings for the response compatibility layer.

Handler thresholds, fallback wording and diagnostics switches are read from the
process environment (a local .env file is honoured) and exposed through the
cached get_settings() accessor used by the validator, handler and HTTP app.

Env vars (optional) and their roles:
        MAX_ERRORS              -> Consecutive problematic responses tolerated before the handler reports "critical".
        DEFAULT_REQUIRED_FIELDS -> Comma separated canonical fields required when a caller passes no options.
        ENABLE_LOGGING          -> Default for the per-call validation issue warning.
        ENABLE_FALLBACK         -> Default for returning a fallback record instead of raising.
        FALLBACK_ID_PREFIX      -> Prefix of generated fallback identifiers.
        FALLBACK_MODEL          -> Model name stamped on complete fallback responses.
        FALLBACK_CONTENT        -> Human readable apology placed in fallback content.
        FALLBACK_ERROR          -> Error string placed in fallback responses.
        DEBUG_NORMALIZATION     -> Verbose field resolution logging.
        LOG_LEVEL               -> Root log level applied by app.main.
"""

import os
from functools import lru_cache
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
        return os.getenv(name, default) in {"1", "true", "True"}


class Settings:
        """Switches for normalization, error tracking and fallback records.

        Notes:
        - Plain class attributes evaluated at import; env changes need a restart.
        - Tests and embedders override per instance (max_errors=..., options) instead.
        """

        # ---- Error tracking ----
        MAX_ERRORS: int = int(os.getenv("MAX_ERRORS", "5"))  # Advisory threshold, never fail-closed

        # ---- Handler defaults ----
        DEFAULT_REQUIRED_FIELDS: List[str] = [
                f.strip() for f in os.getenv("DEFAULT_REQUIRED_FIELDS", "content").split(",") if f.strip()
        ]
        ENABLE_LOGGING: bool = _flag("ENABLE_LOGGING", "1")
        ENABLE_FALLBACK: bool = _flag("ENABLE_FALLBACK", "1")

        # ---- Fallback record ----
        FALLBACK_ID_PREFIX: str = os.getenv("FALLBACK_ID_PREFIX", "fallback")
        FALLBACK_MODEL: str = os.getenv("FALLBACK_MODEL", "fallback-model")
        FALLBACK_CONTENT: str = os.getenv(
                "FALLBACK_CONTENT",
                "Sorry, there was a problem processing the API response. Please try again later.",
        )
        FALLBACK_ERROR: str = os.getenv("FALLBACK_ERROR", "API compatibility issue detected")

        # ---- Diagnostics ----
        DEBUG_NORMALIZATION: bool = _flag("DEBUG_NORMALIZATION", "0")  # Per-candidate resolution traces
        LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings() -> Settings:
        """Return the process-wide Settings, built on first use.

        Validators and handlers created later share the same resolved values.
        """
        return Settings()
