from __future__ import annotations

import logging
from pathlib import Path

from arbor.presets.base import Preset
from arbor.presets.laravel import LaravelPreset
from arbor.presets.php import PhpPreset

logger = logging.getLogger(__name__)

FALLBACK_PRESET = "php"


def builtin_presets() -> list[Preset]:
    # Most specific first: detection returns the first match.
    return [LaravelPreset(), PhpPreset()]


class PresetCatalog:
    def __init__(self, presets: list[Preset] | None = None) -> None:
        self._presets: dict[str, Preset] = {}
        for preset in builtin_presets() if presets is None else presets:
            self.register(preset)

    def register(self, preset: Preset) -> None:
        self._presets[preset.name] = preset

    def get(self, name: str) -> Preset | None:
        return self._presets.get(name)

    def available(self) -> list[str]:
        return list(self._presets)

    def detect(self, path: Path) -> str:
        for preset in self._presets.values():
            if preset.detect(path):
                logger.debug("Detected preset %s for %s", preset.name, path)
                return preset.name
        return ""

    def suggest(self, path: Path) -> str:
        return self.detect(path) or FALLBACK_PRESET
