"""YAML-backed persisted configuration with per-entry defaults."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

log = logging.getLogger(__name__)

ConfigValue = Union[str, int, float, bool]


class ConfigYamlError(Exception):
    """Raised when the configuration document fails validation."""


@dataclass(eq=False)
class ConfigEntry:
    """A single persisted setting bound to a section and key."""

    config: "ConfigFile" = field(repr=False)
    section: str
    key: str
    default: ConfigValue
    description: str = ""
    _value: ConfigValue = field(default="", repr=False)

    @property
    def value(self) -> ConfigValue:
        return self._value

    @value.setter
    def value(self, new_value: ConfigValue) -> None:
        self._value = _coerce(new_value, self.default, f"{self.section}.{self.key}")
        self.config.entry_changed(self)

    def reset(self) -> None:
        self.value = self.default


class ConfigFile:
    """Sections of named entries, persisted as a YAML mapping of mappings.

    Values found in the file for keys nobody has bound yet are kept and written
    back unchanged, so entries registered later (or by other versions) survive a
    save.
    """

    def __init__(self, path: Optional[Path] = None, save_on_set: bool = True) -> None:
        self.path = path
        self.save_on_set = save_on_set
        self._entries: Dict[str, Dict[str, ConfigEntry]] = {}
        self._orphans: Dict[str, Dict[str, Any]] = {}
        if path is not None and path.exists():
            self._orphans = load_config_yaml(path)

    def bind(
        self,
        section: str,
        key: str,
        default: ConfigValue,
        description: str = "",
    ) -> ConfigEntry:
        """Register an entry, picking up a previously stored value if there is one."""
        existing = self._entries.get(section, {}).get(key)
        if existing is not None:
            return existing

        entry = ConfigEntry(
            config=self,
            section=section,
            key=key,
            default=default,
            description=description,
            _value=default,
        )
        stored = self._orphans.get(section, {}).pop(key, None)
        if stored is not None:
            entry._value = _coerce(stored, default, f"{section}.{key}")
        self._entries.setdefault(section, {})[key] = entry
        return entry

    def get(self, section: str, key: str) -> Optional[ConfigEntry]:
        return self._entries.get(section, {}).get(key)

    def entries(self, section: str) -> Dict[str, ConfigEntry]:
        return dict(self._entries.get(section, {}))

    @property
    def sections(self) -> List[str]:
        names = list(self._entries)
        names.extend(name for name in self._orphans if name not in self._entries)
        return names

    def entry_changed(self, entry: ConfigEntry) -> None:
        log.debug("Config %s.%s set to %r", entry.section, entry.key, entry.value)
        if self.save_on_set and self.path is not None:
            self.save()

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert the configuration into a serializable mapping."""
        data: Dict[str, Dict[str, Any]] = {}
        for section, entries in self._entries.items():
            data[section] = {key: entry.value for key, entry in entries.items()}
        for section, values in self._orphans.items():
            if values:
                data.setdefault(section, {}).update(values)
        return data

    def save(self, destination: Optional[Path] = None) -> Path:
        target = destination or self.path
        if target is None:
            raise ValueError("Destination path required for configs without a file path")
        dump_config_yaml(self.as_dict(), destination=target)
        return target


def load_config_yaml(path: Path) -> Dict[str, Dict[str, Any]]:
    """Load and validate a configuration YAML file."""
    if not path.exists():
        raise ConfigYamlError(f"Config file does not exist: {path}")

    with path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle)

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigYamlError("Config YAML must be a mapping at the top level")

    sections: Dict[str, Dict[str, Any]] = {}
    for section, values in parsed.items():
        if values is None:
            values = {}
        if not isinstance(values, dict):
            raise ConfigYamlError(f"Section '{section}' must be a mapping")
        for key, value in values.items():
            if value is not None and not isinstance(value, (str, int, float, bool)):
                raise ConfigYamlError(f"Field '{section}.{key}' must be a scalar")
        sections[str(section)] = {
            str(key): ("" if value is None else value) for key, value in values.items()
        }
    return sections


def dump_config_yaml(data: Dict[str, Dict[str, Any]], destination: Optional[Path] = None) -> str:
    """Serialize configuration sections to YAML, optionally writing to disk."""
    yaml_text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    if destination is not None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(yaml_text, encoding="utf-8")

    return yaml_text


def _coerce(value: Any, default: ConfigValue, field_name: str) -> ConfigValue:
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        raise ConfigYamlError(f"Field '{field_name}' must be a boolean")
    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ConfigYamlError(f"Field '{field_name}' must be an integer")
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise ConfigYamlError(f"Field '{field_name}' must be a number")
    if isinstance(value, bool):
        raise ConfigYamlError(f"Field '{field_name}' must be a string")
    return str(value)


__all__ = [
    "ConfigYamlError",
    "ConfigEntry",
    "ConfigFile",
    "load_config_yaml",
    "dump_config_yaml",
]
