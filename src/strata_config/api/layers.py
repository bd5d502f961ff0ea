"""Layer API: read, write, select and merge configuration layers."""

import copy
import json
import logging
from pathlib import Path
from typing import Any

from .. import jsonc
from ..exceptions import ConfigFileError
from ..exceptions import ConfigParseError
from ..models import ConfigLayer
from ..utils import backfill_config
from ..utils import deep_merge
from ..utils import empty_config
from ..utils import union_list
from ..utils import unset_path
from .base import BaseApi

logger = logging.getLogger(__name__)


def _keep_existing_items(incoming: list[Any], existing: list[Any]) -> list[Any]:
    return union_list(existing, incoming)


class LayersApi(BaseApi):
    """Manipulate the physical configuration layers.

    Methods taking ``user``/``global_`` target that layer; when both are
    omitted they target the active layer.
    """

    def read(self, user: bool | None = None, global_: bool | None = None) -> None:
        """Read a layer from disk into memory.

        A missing file leaves the layer empty. Missing top-level sections are
        always backfilled.

        Raises:
            ConfigFileError: If the file exists but cannot be read
            ConfigParseError: If the file is not valid JSON
        """
        layer = self._config.target_layer(user, global_)

        if layer.path.exists():
            try:
                text = layer.path.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigFileError(
                    f"error reading config file: unable to read '{layer.path}': {e}", path=layer.path
                ) from e

            try:
                properties = jsonc.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigParseError(layer.path, e.msg, e.lineno, e.colno) from e

            if not isinstance(properties, dict):
                raise ConfigParseError(layer.path, "expected a JSON object", 1, 1)

            layer.properties = properties
            layer.exists = True
            logger.debug(f"Read config layer {layer.path}")

        backfill_config(layer.properties)

    def write(self, user: bool | None = None, global_: bool | None = None) -> None:
        """Write a layer to disk with its secure values removed.

        Raises:
            ConfigFileError: If the file cannot be written
        """
        layer = self._config.target_layer(user, global_)

        sanitized = copy.deepcopy(layer.properties)
        for path in self._config.api.secure.secure_fields(user=layer.user, global_=layer.global_):
            unset_path(sanitized, path)

        try:
            layer.path.parent.mkdir(parents=True, exist_ok=True)
            layer.path.write_text(jsonc.dumps(sanitized), encoding="utf-8")
        except OSError as e:
            raise ConfigFileError(f"error writing '{layer.path}': {e}", path=layer.path) from e

        layer.exists = True
        layer.dirty = False
        logger.info(f"Wrote config layer {layer.path}")

    def activate(self, user: bool, global_: bool, in_dir: Path | str | None = None) -> None:
        """Select the active layer.

        Args:
            user: True for a personal (``.user``) layer
            global_: True for a layer in the home directory
            in_dir: Directory to read this layer's file from instead of the
                searched location
        """
        self._config.set_active(user, global_)

        if in_dir is not None:
            layer = self._config.layer_active()
            layer.path = Path(in_dir).resolve() / layer.path.name
            layer.properties = empty_config()
            layer.exists = False
            layer.dirty = False
            self.read()

        logger.info(f"Activated config layer {self._config.layer_active().path}")

    def exists(self, user: bool, global_: bool) -> bool:
        return self._config.find_layer(user, global_).exists

    def get(self) -> ConfigLayer:
        """Get a copy of the active layer."""
        return copy.deepcopy(self._config.layer_active())

    def set(self, properties: dict[str, Any]) -> None:
        """Replace the contents of the active layer."""
        layer = self._config.layer_active()
        layer.properties = backfill_config(copy.deepcopy(properties))
        layer.dirty = True

    def merge(self, properties: dict[str, Any], dry_run: bool = False) -> ConfigLayer | None:
        """Merge a configuration document into the active layer.

        Existing values win. Lists are unioned, keeping existing entries
        first. ``autoStore`` stays true once either side sets it.

        Args:
            properties: Configuration document to merge in
            dry_run: Merge into a copy and return it, leaving the layer untouched

        Returns:
            The merged copy when ``dry_run`` is True, otherwise None
        """
        layer = self._config.layer_active()
        if dry_run:
            layer = copy.deepcopy(layer)

        incoming = copy.deepcopy(properties)
        current = layer.properties

        current["profiles"] = deep_merge(
            incoming.get("profiles") or {}, current["profiles"], array_merge=_keep_existing_items
        )
        for name, value in (incoming.get("defaults") or {}).items():
            current["defaults"].setdefault(name, value)
        current["plugins"] = union_list(current["plugins"], incoming.get("plugins") or [])
        current["secure"] = union_list(current["secure"], incoming.get("secure") or [])

        if incoming.get("overrides") is not None or current.get("overrides") is not None:
            current["overrides"] = {**(incoming.get("overrides") or {}), **(current.get("overrides") or {})}
        if "autoStore" in incoming:
            current["autoStore"] = bool(current.get("autoStore")) or bool(incoming["autoStore"])

        if dry_run:
            return layer

        layer.dirty = True
        logger.debug(f"Merged configuration into layer {layer.path}")
        return None
