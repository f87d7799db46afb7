"""Service layer for parsing, configuration, placement and sorting."""

__all__ = [
    "config_file",
    "config_store",
    "placement_engine",
    "position_formatter",
    "position_parser",
    "resolver",
    "scene_yaml",
    "sorter",
    "world",
]
