# theme.py
# Visual theme model + strict validation of generated theme payloads.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import json
import math


class InteractionMode(Enum):
    WEAVE = "WEAVE"              # thread-like orbits around fingertips
    CRYSTALLIZE = "CRYSTALLIZE"  # snap onto a lattice
    FRAGMENT = "FRAGMENT"        # blow apart near fingertips
    VOID = "VOID"                # collapse into fingertips
    RESONANCE = "RESONANCE"      # time-driven vibration


class ThemeError(ValueError):
    """A generated theme payload that cannot be used as-is."""


@dataclass(frozen=True)
class VisualTheme:
    primary_color: str
    secondary_color: str
    mode: InteractionMode
    tension: float
    entropy: float
    geometry_scale: float
    description: str


DEFAULT_THEME = VisualTheme(
    primary_color="#D4AF37",    # tungsten gold
    secondary_color="#1A237E",  # deep indigo
    mode=InteractionMode.WEAVE,
    tension=1.0,
    entropy=0.2,
    geometry_scale=100.0,
    description="Awaiting Input",
)

# Response schema handed to the generative service (OpenAPI subset).
THEME_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "primaryColor": {
            "type": "STRING",
            "description": "Dominant color: variations of Tungsten Gold (#C2B280, #D4AF37) or Deep Bronze.",
        },
        "secondaryColor": {
            "type": "STRING",
            "description": "Accent color: variations of Quantum Blue (#003366, #191970) or Ultraviolet.",
        },
        "mode": {
            "type": "STRING",
            "enum": [m.value for m in InteractionMode],
            "description": "The structural behavior mode.",
        },
        "tension": {
            "type": "NUMBER",
            "description": "Elasticity of the threads (0.1 loose to 2.0 tight).",
        },
        "entropy": {
            "type": "NUMBER",
            "description": "Randomness factor for the stardust layer (0.0 to 1.0).",
        },
        "geometryScale": {
            "type": "NUMBER",
            "description": "Scale of the geometric structures (50 to 200).",
        },
        "description": {
            "type": "STRING",
            "description": "A philosophical, 4-word abstract title.",
        },
    },
    "required": [
        "primaryColor",
        "secondaryColor",
        "mode",
        "tension",
        "entropy",
        "geometryScale",
        "description",
    ],
}

_STRING_FIELDS = ("primaryColor", "secondaryColor", "description")
_NUMBER_FIELDS = ("tension", "entropy", "geometryScale")


def _number(data, key) -> float:
    v = data[key]
    # bool is an int subclass; JSON true/false is not a number here
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ThemeError(f"'{key}' must be a number, got {type(v).__name__}")
    v = float(v)
    if not math.isfinite(v):
        raise ThemeError(f"'{key}' must be finite")
    return v


def theme_from_dict(data) -> VisualTheme:
    """
    Validate a decoded payload and build a VisualTheme.

    All required fields must be present with the right JSON types and `mode`
    must name an InteractionMode. No partial themes are ever produced.
    Numeric ranges are not enforced here; the field clamps at use.
    """
    if not isinstance(data, dict):
        raise ThemeError(f"theme payload must be an object, got {type(data).__name__}")

    missing = [k for k in THEME_SCHEMA["required"] if k not in data]
    if missing:
        raise ThemeError(f"theme payload missing fields: {', '.join(missing)}")

    for key in _STRING_FIELDS:
        if not isinstance(data[key], str):
            raise ThemeError(f"'{key}' must be a string")

    try:
        mode = InteractionMode(data["mode"])
    except (ValueError, TypeError):
        raise ThemeError(f"unknown mode {data['mode']!r}") from None

    tension, entropy, scale = (_number(data, k) for k in _NUMBER_FIELDS)

    return VisualTheme(
        primary_color=data["primaryColor"],
        secondary_color=data["secondaryColor"],
        mode=mode,
        tension=tension,
        entropy=entropy,
        geometry_scale=scale,
        description=data["description"],
    )


def parse_theme(text) -> VisualTheme:
    """JSON text -> VisualTheme, raising ThemeError for anything unusable."""
    if not text:
        raise ThemeError("empty theme response")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ThemeError(f"theme response is not JSON: {e}") from e
    return theme_from_dict(data)
