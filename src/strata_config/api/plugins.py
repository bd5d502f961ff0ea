"""Plugin API: the list of plugins a configuration requires."""

import logging

from .base import BaseApi

logger = logging.getLogger(__name__)


class PluginsApi(BaseApi):
    def get(self) -> list[str]:
        """Get the plugins of all layers, without duplicates."""
        return self._config.properties["plugins"]

    def add(self, name: str) -> None:
        """Add a plugin to the active layer if it is not already listed."""
        layer = self._config.layer_active()
        plugins = layer.properties["plugins"]
        if name not in plugins:
            plugins.append(name)
            layer.dirty = True
            logger.info(f"Added plugin '{name}'")

    def remove(self, name: str) -> bool:
        """Remove a plugin from the active layer.

        Returns:
            True if removed, False if not found
        """
        layer = self._config.layer_active()
        plugins = layer.properties["plugins"]
        if name not in plugins:
            return False
        plugins.remove(name)
        layer.dirty = True
        logger.info(f"Removed plugin '{name}'")
        return True
