"""Field resolution and normalization of heterogeneous API responses.

Different API versions name the same logical attribute differently
(``content`` / ``text`` / ``response`` / ``data.message`` ...). The validator
owns a synonym table (canonical field -> ordered candidate keys or dot-paths)
and a default table, and turns any raw response into a NormalizedResponse.

Resolution policy:
    * Candidates are tried in table order; the first PRESENT path wins, even
      when its value is None (later candidates are not consulted).
    * A required field that resolves to nothing, or to None when the field is
      not nullable, gets its default and a "Missing field: <name>" issue.
    * Optional canonical fields are filled the same way but silently.
    * Anything that is not a mapping is replaced by a complete fallback record.
"""

import copy
import logging
import time
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.config import get_settings
from app.compat.paths import MISSING, get_path
from app.compat.schemas import RESERVED_FIELDS, NormalizedResponse, ValidationInfo

log = logging.getLogger("compat.validator")

DEFAULT_FIELD_MAPPINGS: Dict[str, List[str]] = {
    "content": ["content", "text", "message", "response", "result"],
    "id": ["id", "messageId", "requestId", "uuid"],
    "timestamp": ["timestamp", "created_at", "time", "date"],
    "model": ["model", "model_name", "modelName", "version"],
    "usage": ["usage", "token_usage", "tokenUsage", "consumption"],
    "error": ["error", "error_message", "errorMessage", "message"],
}

OPTIONAL_FIELDS: Tuple[str, ...] = ("id", "timestamp", "model", "usage", "error")
NULLABLE_FIELDS = frozenset({"error"})  # None here means "no error", a real value


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ApiResponseValidator:
    """Synonym-driven field resolver producing NormalizedResponse records.

    Each instance owns its own copy of the synonym and default tables, so
    extending one validator never leaks into another.
    """

    def __init__(
        self,
        field_mappings: Optional[Dict[str, Iterable[str]]] = None,
        default_values: Optional[Dict[str, Any]] = None,
    ):
        self.settings = get_settings()
        source = DEFAULT_FIELD_MAPPINGS if field_mappings is None else field_mappings
        for field, candidates in source.items():
            if isinstance(candidates, str):
                raise TypeError(f"invalid_synonym_entry field={field} expected=list got=str")
        self.field_mappings: Dict[str, List[str]] = {k: list(v) for k, v in source.items()}
        self.default_values: Dict[str, Any] = {
            "content": "",
            "id": self.generate_fallback_id,
            "timestamp": utc_now_iso,
            "model": "unknown-model",
            "usage": lambda: {"total_tokens": 0},
            "error": None,
        }
        if default_values:
            self.default_values.update(default_values)

    # ---- Synonym table ----
    def register_synonym(self, field: str, path: str, priority: Optional[int] = None) -> List[str]:
        """Add ``path`` as a candidate for ``field``; returns the updated candidates.

        priority=None appends (lowest precedence); an int inserts at that index.
        Registering an existing path is a no-op.
        """
        if not isinstance(field, str) or not field:
            raise ValueError("invalid_field")
        if not isinstance(path, str) or not path.strip() or "" in path.split("."):
            raise ValueError("invalid_path")
        candidates = self.field_mappings.setdefault(field, [])
        if path not in candidates:
            if priority is None:
                candidates.append(path)
            else:
                candidates.insert(priority, path)
        return list(candidates)

    def synonyms_for(self, field: str) -> Tuple[str, ...]:
        candidates = self.field_mappings.get(field)
        if isinstance(candidates, str):
            raise TypeError(f"invalid_synonym_entry field={field} expected=list got=str")
        return tuple(candidates or (field,))

    # ---- Defaults ----
    def generate_fallback_id(self) -> str:
        return f"{self.settings.FALLBACK_ID_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"

    def default_for(self, field: str) -> Any:
        default = self.default_values.get(field, "")
        if callable(default):
            return default()
        return copy.deepcopy(default)

    # ---- Resolution ----
    def extract_field(self, response: Any, field_name: str) -> Any:
        """Return the first present candidate value for ``field_name`` or MISSING.

        A present key holding None returns None, not MISSING.
        """
        for key in self.synonyms_for(field_name):
            value = get_path(response, key)
            if value is not MISSING:
                if self.settings.DEBUG_NORMALIZATION:
                    log.debug("field_resolved field=%s key=%s", field_name, key)
                return value
        if self.settings.DEBUG_NORMALIZATION:
            log.debug("field_unresolved field=%s candidates=%d", field_name, len(self.synonyms_for(field_name)))
        return MISSING

    def _usable(self, field: str, value: Any) -> bool:
        if value is MISSING:
            return False
        return value is not None or field in NULLABLE_FIELDS

    def validate_and_normalize(
        self, response: Any, required_fields: Iterable[str] = ("content",)
    ) -> NormalizedResponse:
        if not isinstance(response, Mapping):
            log.warning("invalid_response_shape type=%s using_fallback=1", type(response).__name__)
            return self.create_fallback_response()

        required_fields = list(required_fields)
        reserved = RESERVED_FIELDS.intersection(required_fields)
        if reserved:
            raise ValueError(f"reserved_field_name fields={sorted(reserved)}")

        issues: List[str] = []
        record: Dict[str, Any] = {}

        for field in required_fields:
            value = self.extract_field(response, field)
            if self._usable(field, value):
                record[field] = value
            else:
                record[field] = self.default_for(field)
                issues.append(f"Missing field: {field}")

        for field in OPTIONAL_FIELDS:
            if field in record:
                continue
            value = self.extract_field(response, field)
            record[field] = value if self._usable(field, value) else self.default_for(field)

        record["_original"] = response
        record["_validation"] = ValidationInfo(timestamp=utc_now_iso(), issues=issues)
        return NormalizedResponse.model_validate(record)

    def create_fallback_response(self) -> NormalizedResponse:
        """Complete canonical record signalling total failure."""
        now = utc_now_iso()
        return NormalizedResponse(
            content=self.settings.FALLBACK_CONTENT,
            id=self.generate_fallback_id(),
            timestamp=now,
            model=self.settings.FALLBACK_MODEL,
            usage={"total_tokens": 0},
            error=self.settings.FALLBACK_ERROR,
            original=None,
            validation=ValidationInfo(timestamp=now, issues=["Complete fallback response generated"]),
        )
