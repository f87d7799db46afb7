"""Layered item position configuration.

Lookups walk the layers in priority order: round overrides, known items,
mod-registered items, then the custom mapping blob. Category defaults are kept
separately and only consulted by the resolver.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Tuple

from ship_sort.constants import DEFAULT_ONE_HANDED, DEFAULT_TOOLS, DEFAULT_TWO_HANDED
from ship_sort.models.catalog import KNOWN_ITEMS
from ship_sort.models.placement import ItemCategory, PlacementSpec
from ship_sort.models.scene import SceneObject, Vector3
from ship_sort.services.config_file import ConfigEntry, ConfigFile
from ship_sort.services.position_parser import ParseResult, parse_position
from ship_sort.services.world import AnchorResolver

log = logging.getLogger(__name__)

SECTION_GENERAL = "General"
SECTION_DEFAULTS = "Defaults"
SECTION_ITEMS = "Items"
SECTION_MOD_ITEMS = "ModItems"

Parser = Callable[[str], ParseResult]


class ConfigurationIntegrityError(RuntimeError):
    """Raised when a packaged default position cannot be parsed."""


class PositionLayer(Protocol):
    name: str

    def lookup(self, item_key: str) -> Optional[PlacementSpec]:
        """Return the spec this layer holds for ``item_key``, if any."""


class RoundOverrideLayer:
    """Positions assigned for the current game session only."""

    name = "round override"

    def __init__(self) -> None:
        self._overrides: Dict[str, Tuple[Vector3, Optional[SceneObject]]] = {}

    def set(self, item_key: str, position: Vector3, anchor: Optional[SceneObject]) -> None:
        self._overrides[item_key.lower()] = (position, anchor)

    def clear(self) -> None:
        self._overrides = {}

    def lookup(self, item_key: str) -> Optional[PlacementSpec]:
        override = self._overrides.get(item_key.lower())
        if override is None:
            return None
        position, anchor = override
        return PlacementSpec(position=position, anchor=anchor)

    def __len__(self) -> int:
        return len(self._overrides)


class PersistedItemLayer:
    """One namespace of persisted per-item positions."""

    def __init__(self, name: str, config: ConfigFile, section: str, parse: Parser) -> None:
        self.name = name
        self._config = config
        self._section = section
        self._parse = parse
        self._entries: Dict[str, ConfigEntry] = {}

    def register(self, internal_name: str, default_text: str = "", description: str = "") -> ConfigEntry:
        entry = self._config.bind(self._section, internal_name, default_text, description)
        self._entries.setdefault(internal_name.casefold(), entry)
        return entry

    def owns(self, item_key: str) -> bool:
        return item_key.casefold() in self._entries

    def entry(self, item_key: str) -> Optional[ConfigEntry]:
        return self._entries.get(item_key.casefold())

    def __iter__(self) -> Iterator[ConfigEntry]:
        return iter(self._entries.values())

    def lookup(self, item_key: str) -> Optional[PlacementSpec]:
        entry = self.entry(item_key)
        if entry is None:
            return None
        text = str(entry.value)
        if not text.strip():
            return None

        result = self._parse(text)
        if result.ok:
            return result.spec
        log.error("Invalid %s position for %s (%s): %s", self.name, entry.key, text, result.error)

        default_text = str(entry.default)
        if not default_text.strip():
            return None
        result = self._parse(default_text)
        if result.ok:
            return result.spec
        log.error(
            "Invalid default %s position for %s (%s): %s",
            self.name,
            entry.key,
            default_text,
            result.error,
        )
        return None


class CustomMappingLayer:
    """Positions from a ``key:spec;key:spec`` blob, parsed on demand."""

    name = "custom mapping"

    def __init__(self, entry: ConfigEntry, parse: Parser) -> None:
        self._entry = entry
        self._parse = parse
        self._source: Optional[str] = None
        self._texts: Dict[str, Tuple[str, str]] = {}

    def lookup(self, item_key: str) -> Optional[PlacementSpec]:
        self._refresh()
        found = self._texts.get(item_key.casefold())
        if found is None:
            return None
        key, text = found
        if not text.strip():
            return None
        result = self._parse(text)
        if not result.ok:
            log.error("Invalid custom position for %s (%s): %s", key, text, result.error)
            return None
        return result.spec

    def mapping(self) -> Dict[str, PlacementSpec]:
        """Parse every entry; entries that fail are left out."""
        self._refresh()
        specs: Dict[str, PlacementSpec] = {}
        for key, _ in self._texts.values():
            spec = self.lookup(key)
            if spec is not None:
                specs[key] = spec
        return specs

    def _refresh(self) -> None:
        blob = str(self._entry.value)
        if blob != self._source:
            self._texts = split_custom_mapping(blob)
            self._source = blob


def split_custom_mapping(blob: str) -> Dict[str, Tuple[str, str]]:
    """Split a custom mapping blob into ``casefolded key -> (key, spec text)``.

    Malformed entries are logged and skipped; for duplicate keys the first
    occurrence wins.
    """
    texts: Dict[str, Tuple[str, str]] = {}
    for raw_entry in blob.split(";"):
        if not raw_entry.strip():
            continue
        key, separator, text = raw_entry.partition(":")
        key = key.strip()
        if not separator or not key:
            log.error("Invalid custom item position entry (%s): expected key:position", raw_entry)
            continue
        folded = key.casefold()
        if folded in texts:
            log.warning("Duplicate custom item position for %s ignored (%s)", key, text)
            continue
        texts[folded] = (key, text.strip())
    return texts


class CategoryDefaults:
    """Fallback positions for one-handed scrap, two-handed scrap and tools."""

    def __init__(self, config: ConfigFile, parse: Parser) -> None:
        self._parse = parse
        self._entries: Dict[ItemCategory, ConfigEntry] = {
            ItemCategory.ONE_HANDED: config.bind(
                SECTION_DEFAULTS,
                ItemCategory.ONE_HANDED.value,
                DEFAULT_ONE_HANDED,
                "Default position for one-handed scrap",
            ),
            ItemCategory.TWO_HANDED: config.bind(
                SECTION_DEFAULTS,
                ItemCategory.TWO_HANDED.value,
                DEFAULT_TWO_HANDED,
                "Default position for two-handed scrap",
            ),
            ItemCategory.TOOL: config.bind(
                SECTION_DEFAULTS,
                ItemCategory.TOOL.value,
                DEFAULT_TOOLS,
                "Default position for tools",
            ),
        }

    def entry(self, category: ItemCategory) -> ConfigEntry:
        return self._entries[category]

    def spec_for(self, category: ItemCategory) -> PlacementSpec:
        entry = self._entries[category]
        result = self._parse(str(entry.value))
        if result.ok and result.spec is not None and not result.spec.is_flags_only:
            return result.spec
        log.error(
            "Invalid default position for %s (%s): %s",
            category.value,
            entry.value,
            result.error or "a category default needs coordinates",
        )

        result = self._parse(str(entry.default))
        if result.ok and result.spec is not None and not result.spec.is_flags_only:
            return result.spec
        raise ConfigurationIntegrityError(
            f"Packaged default position for {category.value} is invalid ({entry.default}): "
            f"{result.error or 'missing coordinates'}"
        )


class ConfigurationStore:
    """Process-wide owner of every position configuration layer."""

    def __init__(self, config: ConfigFile, anchors: Optional[AnchorResolver] = None) -> None:
        self.config = config
        self.anchors = anchors

        self.sort_delay = config.bind(
            SECTION_GENERAL,
            "sort_delay_ms",
            0,
            "Delay between moving two items in milliseconds; below 10 sorts everything at once",
        )
        self.auto_sort = config.bind(
            SECTION_GENERAL,
            "auto_sort",
            False,
            "Sort all items automatically when the ship is about to land",
        )
        self.custom_item_positions = config.bind(
            SECTION_GENERAL,
            "custom_item_positions",
            "",
            "Semicolon separated list of item:position pairs",
        )

        self.round_overrides = RoundOverrideLayer()
        self.known_items = PersistedItemLayer("known item", config, SECTION_ITEMS, self.parse)
        self.mod_items = PersistedItemLayer("mod item", config, SECTION_MOD_ITEMS, self.parse)
        self.custom_positions = CustomMappingLayer(self.custom_item_positions, self.parse)
        self.defaults = CategoryDefaults(config, self.parse)

        self._display_names: Dict[str, str] = {}
        for item in KNOWN_ITEMS:
            self.known_items.register(item.internal_name, item.default_position, item.display_name)
            self._display_names.setdefault(item.display_name.casefold(), item.internal_name)

    def parse(self, text: str) -> ParseResult:
        return parse_position(text, self.anchors)

    @property
    def layers(self) -> List[PositionLayer]:
        """Layers in lookup priority order."""
        return [self.round_overrides, self.known_items, self.mod_items, self.custom_positions]

    def register_mod_item(
        self, internal_name: str, display_name: Optional[str] = None, default_text: str = ""
    ) -> ConfigEntry:
        """Add a persisted position entry for an item added by another mod."""
        if self.known_items.owns(internal_name):
            log.warning(
                "Mod item %s is also a known item; the known item position takes precedence",
                internal_name,
            )
        entry = self.mod_items.register(internal_name, default_text, display_name or internal_name)
        if display_name:
            self._display_names.setdefault(display_name.casefold(), internal_name)
        return entry

    def is_known(self, item_key: str) -> bool:
        return self.known_items.owns(item_key)

    def lookup_internal_name(self, name: str) -> Optional[str]:
        """Map a display name or internal name to the internal item name."""
        folded = name.casefold()
        if folded in self._display_names:
            return self._display_names[folded]
        for layer in (self.known_items, self.mod_items):
            entry = layer.entry(name)
            if entry is not None:
                return entry.key
        return None

    @property
    def sort_delay_ms(self) -> int:
        return int(self.sort_delay.value)

    @property
    def auto_sort_enabled(self) -> bool:
        return bool(self.auto_sort.value)

    # ------------------------------------------------------------------
    # Setters

    def set_custom_mapping(self, text: str) -> None:
        self.custom_item_positions.value = text

    def set_round_override(
        self, item_key: str, position: Vector3, anchor: Optional[SceneObject] = None
    ) -> None:
        self.round_overrides.set(item_key, position, anchor)

    def clear_round_overrides(self) -> None:
        self.round_overrides.clear()

    def set_item_position(self, item_key: str, text: str) -> bool:
        """Persist ``text`` for the namespace that owns ``item_key``."""
        for layer in (self.known_items, self.mod_items):
            entry = layer.entry(item_key)
            if entry is not None:
                entry.value = text
                return True
        return False

    def set_custom_position(self, item_key: str, text: str) -> None:
        """Replace or append ``item_key`` in the custom mapping blob."""
        texts = split_custom_mapping(str(self.custom_item_positions.value))
        texts[item_key.casefold()] = (item_key, text)
        self.set_custom_mapping(";".join(f"{key}:{value}" for key, value in texts.values()))


__all__ = [
    "ConfigurationIntegrityError",
    "ConfigurationStore",
    "CategoryDefaults",
    "CustomMappingLayer",
    "PersistedItemLayer",
    "PositionLayer",
    "RoundOverrideLayer",
    "split_custom_mapping",
]
