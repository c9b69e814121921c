"""Pydantic models for normalized responses, handler options and reports.

Layers / roles:
    ValidationInfo      : Diagnostic sub-record listing every defaulted required field.
    NormalizedResponse  : Canonical response shape returned to callers (extra fields allowed).
    HandlerOptions      : Per-call switches for ResponseHandler.handle_api_response.
    ErrorReport         : Snapshot of a handler's accumulated compatibility errors.
    SynonymRegistration : Request body for extending the synonym table over HTTP.
    NormalizeRequest    : Request body for POST /normalize.

The diagnostic members are stored as ``original`` / ``validation`` and exposed
on the wire under their historical ``_original`` / ``_validation`` aliases.
Consumers must treat both as diagnostics, not payload.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import get_settings

# Names held by the diagnostic members; never usable as required fields
RESERVED_FIELDS = frozenset({"original", "validation", "_original", "_validation"})


class ValidationInfo(BaseModel):
    """Normalization instant + ordered issue strings ("Missing field: content")."""

    timestamp: str
    issues: List[str] = Field(default_factory=list)


class NormalizedResponse(BaseModel):
    """Canonical response record.

    The six canonical fields are declared; any other field a caller requires is
    kept as an extra attribute (``result.summary`` / ``result.model_extra``).
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    content: Any = None
    id: Any = None
    timestamp: Any = None
    model: Any = None
    usage: Any = None
    error: Any = None
    original: Any = Field(None, alias="_original")
    validation: ValidationInfo = Field(alias="_validation")

    @property
    def issues(self) -> List[str]:
        return self.validation.issues

    def get(self, field: str, default: Any = None) -> Any:
        """Dict-style lookup covering declared and extra fields."""
        if field in type(self).model_fields:
            return getattr(self, field)
        return (self.model_extra or {}).get(field, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def _default_required() -> List[str]:
    return list(get_settings().DEFAULT_REQUIRED_FIELDS)


class HandlerOptions(BaseModel):
    """Per-call handler switches.

    enable_logging only gates the issue warning; it never changes returned data.
    enable_fallback=False lets processing faults propagate to the caller.
    """

    model_config = ConfigDict(populate_by_name=True)

    required_fields: List[str] = Field(default_factory=_default_required, alias="requiredFields")
    enable_logging: bool = Field(default_factory=lambda: get_settings().ENABLE_LOGGING, alias="enableLogging")
    enable_fallback: bool = Field(default_factory=lambda: get_settings().ENABLE_FALLBACK, alias="enableFallback")

    @field_validator("required_fields")
    @classmethod
    def _no_reserved_names(cls, value: List[str]) -> List[str]:
        reserved = RESERVED_FIELDS.intersection(value)
        if reserved:
            raise ValueError(f"reserved_field_name fields={sorted(reserved)}")
        return value


class ErrorReport(BaseModel):
    timestamp: str
    error_count: int
    max_errors: int
    status: Literal["normal", "critical"]
    recommendations: List[str] = Field(default_factory=list)


class SynonymRegistration(BaseModel):  # POST /synonyms body
    field: str
    path: str
    priority: Optional[int] = None


class NormalizeRequest(BaseModel):  # POST /normalize body
    response: Any = None
    options: HandlerOptions = Field(default_factory=HandlerOptions)
