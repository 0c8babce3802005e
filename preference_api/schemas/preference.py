"""
Preference Schemas

``Preference`` is the full, validated preference record. ``PreferenceUpdate``
is its partial variant used as the body of an update. Both reject unknown
fields and locales outside ``settings.supported_locales``.

``safe_parse`` validates untrusted data without raising, so read paths can
treat invalid data as plain absence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from preference_api.config import settings
from preference_api.i18n.locale import is_locale

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate_locale(value: str) -> str:
    if not is_locale(value):
        raise ValueError(f"Unsupported locale '{value}'. Supported: {', '.join(settings.supported_locales)}")
    return value


class Preference(BaseModel):
    """A user's preferences. New fields must be optional with a default.

    Unknown keys are dropped, so payloads written by a newer release still
    resolve to their known fields.
    """

    model_config = ConfigDict(extra="ignore")

    locale: str

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        return _validate_locale(value)


class PreferenceUpdate(BaseModel):
    """Partial preference: only the fields that are set get merged."""

    model_config = ConfigDict(extra="forbid")

    locale: str | None = None

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, value: str | None) -> str:
        # Unset fields keep their default without validation; explicit null is rejected
        if value is None:
            raise ValueError("locale cannot be null")
        return _validate_locale(value)


@dataclass(frozen=True)
class SafeParseResult(Generic[ModelT]):
    """Outcome of ``safe_parse``: either ``data`` or ``errors`` is populated."""

    success: bool
    data: ModelT | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)


def safe_parse(model: type[ModelT], data: Any) -> SafeParseResult[ModelT]:
    """Validate ``data`` against ``model`` without raising."""
    try:
        return SafeParseResult(success=True, data=model.model_validate(data))
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        return SafeParseResult(success=False, errors=errors)
