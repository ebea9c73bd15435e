"""
Catalog registry.

The catalog is loaded from the bundled ``src/aesthetic_progression/data/``
YAML files on first use and cached for the life of the process. If nothing
can be loaded a RuntimeError is raised; the application cannot start
without a valid catalog.

User overrides: place matching files in ``~/.aesthetic-progression/``.
"""

from functools import lru_cache

from .base import Catalog
from .loader import load_catalog_from_yaml


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """
    Return the process-wide Catalog.

    Raises:
        RuntimeError: If no exercises or templates could be loaded
    """
    loaded = load_catalog_from_yaml()
    if loaded is None:
        raise RuntimeError(
            "aesthetic-progression: no catalog could be loaded from YAML. "
            "Check that src/aesthetic_progression/data/*.yaml files are present and valid."
        )
    return loaded
