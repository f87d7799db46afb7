"""Resolve the final placement spec for an item from the configuration layers."""

from __future__ import annotations

import logging
from typing import Optional

from ship_sort.models.placement import ItemCategory, PlacementSpec
from ship_sort.services.config_store import ConfigurationStore

log = logging.getLogger(__name__)


class PositionResolver:
    """Merge the configuration layers with the category defaults."""

    def __init__(self, store: ConfigurationStore) -> None:
        self.store = store

    def lookup(self, item_key: str) -> Optional[PlacementSpec]:
        """Return the first spec any layer holds for ``item_key``."""
        for layer in self.store.layers:
            spec = layer.lookup(item_key)
            if spec is not None:
                log.debug("Position for %s from %s layer", item_key, layer.name)
                return spec
        return None

    def resolve(self, item_key: str, category: ItemCategory) -> PlacementSpec:
        """Return a usable spec for ``item_key``; never fails on user configuration.

        A flags-only match keeps its filtering flags (A, C, N) and takes the
        position, anchor and positional flags (P, X) from the category default.
        """
        matched = self.lookup(item_key)
        fallback = self.store.defaults.spec_for(category)

        if matched is None:
            return fallback
        if matched.position is not None:
            return matched
        return PlacementSpec(
            position=fallback.position,
            anchor=fallback.anchor,
            flags=matched.flags.filtering_related() | fallback.flags.position_related(),
        )


__all__ = ["PositionResolver"]
