from dataclasses import dataclass
from typing import Any, Dict

from .errors import ParseError, ValidationError


@dataclass(frozen=True)
class NewProgramme:
    name: str


@dataclass(frozen=True)
class NewModule:
    name: str


@dataclass(frozen=True)
class NewTask:
    name: Any
    start: Any
    end: Any


def as_fields(payload: Any) -> Dict[str, Any]:
    """
    Normalize a decoded JSON body to a field mapping.
      - None (no body, unparsable body, or a literal `null`) -> ParseError
      - any other non-object value is treated as an object with no fields
    """
    if payload is None:
        raise ParseError()
    if not isinstance(payload, dict):
        return {}
    return payload


def _is_missing(value: Any) -> bool:
    # 0.0 == 0 and False == 0, so this also covers those.
    return value is None or value == "" or value == 0


def _require_name(fields: Dict[str, Any], message: str) -> str:
    name = fields.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationError(message)
    return name


def parse_programme(payload: Any) -> NewProgramme:
    fields = as_fields(payload)
    return NewProgramme(name=_require_name(fields, "Name is required"))


def parse_module(payload: Any) -> NewModule:
    fields = as_fields(payload)
    return NewModule(name=_require_name(fields, "Module name is required"))


def parse_task(payload: Any) -> NewTask:
    """
    Presence check only: start/end are kept verbatim, no date parsing.
    """
    fields = as_fields(payload)
    values = [fields.get(key) for key in ("name", "start", "end")]
    if any(_is_missing(v) for v in values):
        raise ValidationError("Name, start, and end are required")
    name, start, end = values
    return NewTask(name=name, start=start, end=end)
