"""Named policies loaded from YAML."""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import RootModel

from cspolicy.config.loader import get_settings
from cspolicy.policy import Policy

logger = structlog.get_logger()

ALLOW_ANY = Policy.parse("default-src *")
ALLOW_SELF = Policy.parse("default-src 'self'")
ALLOW_NONE = Policy.parse("default-src 'none'")


class PresetCatalog(RootModel[dict[str, Policy]]):
    """Preset name -> policy, validated from the YAML document."""

    def __getitem__(self, name: str) -> Policy:
        return self.root[name]

    def __contains__(self, name: object) -> bool:
        return name in self.root

    def names(self) -> list[str]:
        return sorted(self.root)


# Cache loaded presets
_presets: PresetCatalog | None = None


def load_presets(path: Path | str | None = None) -> PresetCatalog:
    """Load presets from YAML, caching after first load.

    ``path`` defaults to the ``presets_file`` setting.
    """
    global _presets
    if _presets is not None and path is None:
        return _presets
    presets_path = Path(path or get_settings().presets_file)
    if not presets_path.exists():
        logger.error("presets_not_found", path=str(presets_path))
        catalog = PresetCatalog({})
    else:
        with open(presets_path) as f:
            catalog = PresetCatalog.model_validate(yaml.safe_load(f) or {})
        logger.debug("presets_loaded", path=str(presets_path), count=len(catalog.root))
    if path is None:
        _presets = catalog
    return catalog


def get_preset(name: str | None = None) -> Policy:
    """Return a named preset, or the configured default preset.

    Raises KeyError if no preset has that name.
    """
    name = name or get_settings().default_preset
    catalog = load_presets()
    if name not in catalog:
        logger.warning("preset_not_found", preset=name, available=catalog.names())
        raise KeyError(name)
    return catalog[name]


def reset_presets_cache() -> None:
    """Reset the presets cache (for testing)."""
    global _presets
    _presets = None
