"""
Variant value object

A size/color selection attached to a cart line. ``None`` and the empty string
both mean "no selection" and compare equal.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Canonical "no selection" value
UNSET = None


def normalize_variant_part(value: Optional[str]) -> Optional[str]:
    """Map None and "" to UNSET; any other string is returned unchanged"""
    if value is None or value == "":
        return UNSET
    if not isinstance(value, str):
        raise ValueError(f"Variant value must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Variant:
    """Normalized size/color selection"""

    size: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "size", normalize_variant_part(self.size))
        object.__setattr__(self, "color", normalize_variant_part(self.color))

    @classmethod
    def none(cls) -> "Variant":
        """Variant with nothing selected"""
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Variant":
        """Build from a ``{"size": ..., "color": ...}`` mapping (or None)"""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("Variant must be a mapping")
        return cls(size=data.get("size"), color=data.get("color"))

    def is_selected(self) -> bool:
        """True when size or color carries a value"""
        return self.size is not UNSET or self.color is not UNSET

    def to_dict(self) -> Dict[str, str]:
        """Serialize, omitting unset parts"""
        data = {}
        if self.size is not UNSET:
            data["size"] = self.size
        if self.color is not UNSET:
            data["color"] = self.color
        return data

    def __str__(self) -> str:
        parts = [part for part in (self.size, self.color) if part is not UNSET]
        return " / ".join(parts)
