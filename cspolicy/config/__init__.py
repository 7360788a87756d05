"""Settings and named policy presets."""

from cspolicy.config.loader import CspSettings, get_settings, load_settings
from cspolicy.config.presets import get_preset, load_presets, reset_presets_cache

__all__ = [
    "CspSettings",
    "get_preset",
    "get_settings",
    "load_presets",
    "load_settings",
    "reset_presets_cache",
]
