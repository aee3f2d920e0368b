from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

CSS_VARIABLE_PREFIX = "--bakery-"


@dataclass(frozen=True)
class ThemeVariables:
    primary: str = "#8B4513"
    accent: str = "#D2691E"
    cream: str = "#FFF8E7"
    dark: str = "#5D4037"
    light: str = "#FFFFFF"
    text: str = "#333333"
    beige: str = "#F5F5DC"
    sand: str = "#E6DCC3"

    @classmethod
    def from_preset(cls, colors: Optional[Mapping[str, Any]]) -> "ThemeVariables":
        """
        Apply a preset's named colors over the defaults.

        Presets predating beige/sand fall back to their cream before the default.
        """
        colors = colors or {}
        defaults = cls()
        values: Dict[str, str] = {}

        for f in fields(cls):
            value = colors.get(f.name)
            if not value and f.name in ("beige", "sand"):
                value = colors.get("cream")
            values[f.name] = value or getattr(defaults, f.name)

        return cls(**values)

    def as_css_variables(self) -> Dict[str, str]:
        return {
            f"{CSS_VARIABLE_PREFIX}{f.name}": getattr(self, f.name)
            for f in fields(self)
        }


DEFAULT_THEME = ThemeVariables()
