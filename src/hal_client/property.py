from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: str) -> bool:
    """Decimal number check: sign, digits, fraction and exponent; no inf/nan."""
    return bool(NUMERIC_RE.match(value))


def _is_resource(value: Any) -> bool:
    from .resource import Resource

    return isinstance(value, Resource)


def _is_container(value: Any) -> bool:
    return isinstance(value, (list, dict)) or _is_resource(value)


@dataclass(frozen=True)
class Property:
    """
    Typed, defaulting view of one raw property value.

    Every accessor returns ``default`` for a missing (None) value and for
    values that cannot be represented as the requested type.
    """

    name: str
    value: Any = None

    def as_mixed(self) -> Any:
        return self.value

    def as_string(self, default: Optional[str] = None) -> Optional[str]:
        value = self.value
        if value is None:
            return default
        if isinstance(value, str):
            return value
        if _is_container(value):
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def as_int(self, default: Optional[int] = None) -> Optional[int]:
        value = self.value
        if value is None:
            return default
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if _is_container(value):
            return default
        if isinstance(value, str):
            if not is_numeric(value):
                return default
            value = float(value)
        if isinstance(value, float) and not math.isfinite(value):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def as_float(self, default: Optional[float] = None) -> Optional[float]:
        value = self.value
        if value is None:
            return default
        if isinstance(value, float):
            return value
        if isinstance(value, str) and not is_numeric(value):
            return default
        if _is_container(value):
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def as_bool(self, default: Optional[bool] = None) -> Optional[bool]:
        value = self.value
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if _is_container(value):
            return default
        if isinstance(value, str):
            # "0" is the only false non-empty string
            return value not in ("", "0")
        return bool(value)

    def as_array(self, default: Optional[Union[List[Any], Dict[str, Any]]] = None):
        """Returns lists as-is and objects as their map of fields."""
        value = self.value
        if value is None:
            return default
        if isinstance(value, (list, dict)):
            return value
        if _is_resource(value):
            return value.to_dict()
        return default

    def as_object(self, default: Any = None) -> Any:
        """Returns objects with attribute access; lists become fields "0", "1", ..."""
        value = self.value
        if value is None:
            return default
        if _is_resource(value):
            return value
        if isinstance(value, dict):
            return SimpleNamespace(**{str(k): v for k, v in value.items()})
        if isinstance(value, list):
            return SimpleNamespace(**{str(i): v for i, v in enumerate(value)})
        return default

    def as_datetime(self, default: Optional[datetime] = None) -> Optional[datetime]:
        if isinstance(self.value, datetime):
            return self.value
        raw = self.as_string()
        if raw is None:
            return default
        try:
            return datetime.fromisoformat(raw.strip())
        except ValueError:
            return default


__all__ = ["Property", "JsonValue", "is_numeric"]
