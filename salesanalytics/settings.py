"""Settings loaded from the ``*.toml`` files of a settings folder."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

_log = logging.getLogger("salesanalytics")


@dataclass
class Settings:
    """String settings keyed by file stem, then by key."""

    files: dict[str, dict[str, str]] = field(default_factory=dict)

    def get(self, file_name, key):
        """Return the value, or an empty string when it is not configured."""
        values = self.files.get(file_name)
        if values is None:
            return ""
        try:
            return values[key]
        except KeyError:
            _log.warning("TOML key not found: [%s][%s]", file_name, key)
            return ""


def _load_file(path: Path) -> dict[str, str]:
    with path.open("rb") as handle:
        try:
            data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Error loading TOML file {path.name}: {exc}") from exc
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(
                f"Error loading TOML file {path.name}: value of {key!r} is not a string"
            )
    return data


def load_settings(folder="./settings"):
    """Read every ``*.toml`` file in ``folder`` into a :class:`Settings`."""
    settings = Settings()
    for entry in sorted(Path(folder).iterdir()):
        if entry.is_dir() or not entry.name.endswith(".toml"):
            continue
        settings.files[entry.stem] = _load_file(entry)
    _log.info("TOML configuration loaded successfully")
    return settings