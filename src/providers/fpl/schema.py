from __future__ import annotations

from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from core.models import BootstrapData, Fixture
from .exceptions import DecodeError

_FIXTURE_LIST = TypeAdapter(List[Fixture])


def _decode_error(exc: ValidationError, root: str) -> DecodeError:
    fields: List[str] = []
    parts: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in (root, *err.get("loc", ())))
        fields.append(loc)
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return DecodeError("; ".join(parts) or f"{root}: invalid payload", fields)


def parse_bootstrap(payload: Any) -> BootstrapData:
    if not isinstance(payload, dict):
        raise DecodeError(f"bootstrap: expected a JSON object, got {type(payload).__name__}", ["bootstrap"])
    try:
        return BootstrapData.model_validate(payload)
    except ValidationError as e:
        raise _decode_error(e, "bootstrap") from e


def parse_fixtures(payload: Any) -> List[Fixture]:
    if not isinstance(payload, list):
        raise DecodeError(f"fixtures: expected a JSON array, got {type(payload).__name__}", ["fixtures"])
    try:
        return _FIXTURE_LIST.validate_python(payload)
    except ValidationError as e:
        raise _decode_error(e, "fixtures") from e


__all__ = ["parse_bootstrap", "parse_fixtures"]
