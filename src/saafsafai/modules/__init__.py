"""Cleanup phases with auto-discovery."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import types
from typing import TYPE_CHECKING

from .base import CleanupModule

if TYPE_CHECKING:
    from ..config import CleanupConfig

logger = logging.getLogger(__name__)


def discover_modules(config: CleanupConfig) -> list[CleanupModule]:
    """Discover and instantiate all cleanup modules enabled by the config.

    Scans the modules package (in file name order) for classes with
    MODULE_ENABLED = True, instantiates them with the config, and keeps the
    ones whose ``config_flag`` is set.
    """
    modules: list[CleanupModule] = []
    package = importlib.import_module(__package__ or "saafsafai.modules")

    for _finder, module_name, _is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name == "base":
            continue
        try:
            mod = importlib.import_module(f"{package.__name__}.{module_name}")
        except ImportError:
            logger.warning("Failed to import module: %s", module_name)
            continue

        modules.extend(_find_module_classes(mod, config))
    return modules


def _find_module_classes(mod: types.ModuleType, config: CleanupConfig) -> list[CleanupModule]:
    """Instantiate all CleanupModule classes defined in the given Python module."""
    found: list[CleanupModule] = []

    for attr_name in dir(mod):
        attr = getattr(mod, attr_name)
        if not (
            isinstance(attr, type)
            and attr.__module__ == mod.__name__
            and getattr(attr, "MODULE_ENABLED", False) is True
        ):
            continue

        try:
            instance = attr(config)
        except (TypeError, ValueError):
            logger.warning("Failed to instantiate module: %s", attr_name, exc_info=True)
            continue

        if not getattr(config, instance.config_flag, False):
            logger.debug("Module disabled by config: %s", instance.name)
            continue

        found.append(instance)
        logger.debug("Loaded module: %s", instance.name)

    return found
