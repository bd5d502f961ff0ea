"""Layered configuration for a CLI application."""

import copy
import logging
from collections.abc import Callable
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from . import jsonc
from .api import ConfigApi
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigInternalError
from .models import ConfigLayer
from .models import ConfigPaths
from .models import LayerKind
from .models import SchemaInfo
from .paths import default_home_dir
from .paths import resolve_paths
from .paths import schema_name
from .utils import coerce_value
from .utils import deep_merge
from .utils import empty_config
from .utils import get_path
from .utils import set_path
from .utils import split_path
from .utils import union_list
from .utils import unset_path
from .vault import Vault

logger = logging.getLogger(__name__)

SECURE_VALUE = "(secure value)"


class Config:
    """Configuration merged from four layers.

    Layers, in priority order:
    1. Project user (``<app>.config.user.json`` found from the working directory)
    2. Project (``<app>.config.json`` found from the working directory)
    3. Global user (``<home>/<app>.config.user.json``)
    4. Global (``<home>/<app>.config.json``)

    Single-layer edits (``set``, ``delete``, ``set_schema``) go to the active
    layer. Reads see all layers merged. Secure properties are held in a vault
    and never written to disk.

    Use ``Config.load`` to create an instance.

    Args:
        app: Application name used to build file names
        paths: Paths of the four layers
        vault: Vault holding secure property values
    """

    def __init__(self, app: str, paths: ConfigPaths, vault: Vault | None = None):
        self._app = app
        self._layers = [
            ConfigLayer(path=paths.for_kind(kind), user=kind.user, global_=kind.global_, properties=empty_config())
            for kind in LayerKind
        ]
        self._active_user = LayerKind.PROJECT_USER.user
        self._active_global = LayerKind.PROJECT_USER.global_
        self.vault = vault
        self.secure_map: dict[str, dict[str, Any]] = {}
        self.api = ConfigApi(self)

    # ===== Loading and Saving =====

    @classmethod
    def load(
        cls,
        app: str,
        vault: Vault | None = None,
        home_dir: Path | str | None = None,
        cwd: Path | str | None = None,
    ) -> "Config":
        """Load configuration for an application from all four layers.

        The first layer found on disk becomes the active layer; if none
        exists the project user layer is active.

        Args:
            app: Application name
            vault: Vault holding secure property values (optional)
            home_dir: Directory of the global layers (default: ``default_home_dir``)
            cwd: Directory the project search starts from (default: current)

        Returns:
            Loaded Config

        Raises:
            ConfigError: If any layer cannot be read or parsed
        """
        home = Path(home_dir).expanduser().resolve() if home_dir is not None else default_home_dir(app)
        paths = resolve_paths(app, cwd=Path(cwd) if cwd is not None else None, home_dir=home)
        config = cls(app, paths)

        try:
            active_found = False
            for layer in config._layers:
                config.api.layers.read(user=layer.user, global_=layer.global_)
                if not active_found and layer.exists:
                    config.set_active(layer.user, layer.global_)
                    active_found = True
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"error reading config file: unexpected error during config load: {e}") from e

        config.api.secure.load(vault)

        if config.secure_unprotected:
            logger.warning(f"Secure properties are configured for '{app}' but no vault is available")

        logger.debug(f"Loaded config for '{app}', active layer {config.layer_active().path}")
        return config

    @staticmethod
    def empty() -> dict[str, Any]:
        """Get an empty configuration document."""
        return empty_config()

    def save(self, all_layers: bool = True) -> None:
        """Save secure values to the vault, then write layers to disk.

        With ``all_layers`` every layer that exists on disk or was edited is
        written along with the active layer; untouched layers without a file
        are not created. Comments in the files are not preserved.

        Args:
            all_layers: False to save only the active layer
        """
        self.api.secure.save(all_layers)

        for layer in self.layers_to_save(all_layers):
            self.api.layers.write(user=layer.user, global_=layer.global_)

    def layers_to_save(self, all_layers: bool = True) -> list[ConfigLayer]:
        """Get the live layers a save writes, in priority order."""
        active = self.layer_active()
        return [
            layer
            for layer in self._layers
            if layer is active or (all_layers and (layer.exists or layer.dirty))
        ]

    # ===== Accessors =====

    @property
    def app(self) -> str:
        return self._app

    @property
    def exists(self) -> bool:
        """True if any layer exists on disk."""
        return any(layer.exists for layer in self._layers)

    @property
    def paths(self) -> list[Path]:
        return [layer.path for layer in self._layers]

    @property
    def layers(self) -> list[ConfigLayer]:
        """Get copies of all layers."""
        return copy.deepcopy(self._layers)

    @property
    def properties(self) -> dict[str, Any]:
        """Get the merged configuration with secure values present."""
        return self.layer_merge()

    @property
    def masked_properties(self) -> dict[str, Any]:
        """Get the merged configuration with secure values masked."""
        return self.layer_merge(mask_secure=True)

    @property
    def secure_unprotected(self) -> bool:
        """True if secure properties are declared but there is no vault to hold them."""
        if self.vault is not None:
            return False
        return any(
            self.api.secure.secure_fields(user=layer.user, global_=layer.global_) for layer in self._layers
        )

    # ===== Property Manipulation =====

    def set(self, path: str, value: Any, secure: bool | None = None) -> None:
        """Set a value in the active layer.

        Strings ``"true"``/``"false"`` become booleans and numeric strings
        become integers. If the current value is a list the value is
        appended to it.

        Args:
            path: Dotted property path
            value: Value to set
            secure: True to mark the path secure, False to unmark it,
                None to leave its secure state unchanged
        """
        layer = self.layer_active()
        layer.dirty = True
        segments = split_path(path)

        parent = layer.properties
        for segment in segments[:-1]:
            if not isinstance(parent.get(segment), dict):
                parent[segment] = {}
            parent = parent[segment]

        leaf = segments[-1]
        value = coerce_value(value)
        if isinstance(parent.get(leaf), list):
            parent[leaf].append(value)
        else:
            parent[leaf] = value

        if secure is True:
            layer.properties["secure"] = union_list(layer.properties["secure"], [path])
        elif secure is False:
            self._unsecure(layer, lambda p: p == path)

    def delete(self, path: str, secure: bool = True) -> None:
        """Delete a value from the active layer.

        Args:
            path: Dotted property path
            secure: False to keep the path and paths below it declared secure
        """
        layer = self.layer_active()
        layer.dirty = True
        unset_path(layer.properties, path)

        if secure:
            self._unsecure(layer, lambda p: p == path or p.startswith(f"{path}."))

    def set_schema(self, schema: str | dict[str, Any]) -> None:
        """Set ``$schema`` as the first property of the active layer.

        Args:
            schema: Schema URI, or a schema object to write next to the active
                layer as ``<app>.schema.json``

        Raises:
            ConfigFileError: If the schema object cannot be written
        """
        layer = self.layer_active()
        layer.dirty = True

        if isinstance(schema, str):
            uri = schema
        else:
            uri = f"./{schema_name(self._app)}"
            schema_path = layer.path.parent / schema_name(self._app)
            try:
                schema_path.parent.mkdir(parents=True, exist_ok=True)
                schema_path.write_text(jsonc.dumps(schema), encoding="utf-8")
            except OSError as e:
                raise ConfigFileError(f"error writing schema '{schema_path}': {e}", path=schema_path) from e
            logger.info(f"Wrote schema {schema_path}")

        rest = {k: v for k, v in layer.properties.items() if k != "$schema"}
        layer.properties.clear()
        layer.properties["$schema"] = uri
        layer.properties.update(rest)

    def schema_info(self) -> SchemaInfo | None:
        """Describe where the active layer's ``$schema`` points, or None if unset."""
        layer = self.layer_active()
        uri = layer.properties.get("$schema")
        if uri is None:
            return None

        if uri.startswith("file://"):
            local_path = Path(uri[len("file://") :])
        elif "://" in uri:
            return SchemaInfo(original=uri, resolved=uri, local=False)
        else:
            local_path = Path(uri)

        resolved = (layer.path.parent / local_path).resolve()
        return SchemaInfo(original=uri, resolved=str(resolved), local=True)

    # ===== Layer Selection =====

    def find_layer(self, user: bool, global_: bool) -> ConfigLayer:
        """Find the layer matching the user and global flags.

        Raises:
            ConfigInternalError: If no layer matches
        """
        for layer in self._layers:
            if layer.user == user and layer.global_ == global_:
                return layer
        raise ConfigInternalError(f"internal error: no layer found for user={user} global={global_}")

    def layer_active(self) -> ConfigLayer:
        """Get the active layer.

        Raises:
            ConfigInternalError: If the active selection matches no layer
        """
        return self.find_layer(self._active_user, self._active_global)

    def target_layer(self, user: bool | None = None, global_: bool | None = None) -> ConfigLayer:
        """Get the layer for the given flags, or the active layer when both are None."""
        if user is None and global_ is None:
            return self.layer_active()
        return self.find_layer(bool(user), bool(global_))

    def set_active(self, user: bool, global_: bool) -> None:
        self._active_user = user
        self._active_global = global_

    def iter_layers(self) -> Iterator[ConfigLayer]:
        """Iterate over the live layers in priority order."""
        return iter(self._layers)

    # ===== Merging =====

    def layer_merge(self, mask_secure: bool = False) -> dict[str, Any]:
        """Merge all layers into one configuration.

        - ``plugins``: union of all layers in priority order
        - ``defaults``: the highest priority layer defining a key wins
        - ``profiles``: project user over project, global user over global;
          a global profile is used only if the project has no profile of that
          top-level name
        - ``secure``: always empty, it only applies to individual layers

        Args:
            mask_secure: Replace secure values with a placeholder

        Returns:
            New merged configuration dictionary
        """
        merged = empty_config()
        layer_profiles: dict[LayerKind, dict[str, Any]] = {}

        for layer in self._layers:
            merged["plugins"] = union_list(merged["plugins"], layer.properties.get("plugins") or [])
            for name, value in (layer.properties.get("defaults") or {}).items():
                if name not in merged["defaults"]:
                    merged["defaults"][name] = copy.deepcopy(value)

            properties = copy.deepcopy(layer.properties)
            if mask_secure:
                for path in self.api.secure.secure_fields(user=layer.user, global_=layer.global_):
                    if get_path(properties, path) is not None:
                        set_path(properties, path, SECURE_VALUE)
            layer_profiles[layer.kind] = properties.get("profiles") or {}

        project = deep_merge(
            layer_profiles[LayerKind.PROJECT], layer_profiles[LayerKind.PROJECT_USER], array_merge=union_list
        )
        global_ = deep_merge(
            layer_profiles[LayerKind.GLOBAL], layer_profiles[LayerKind.GLOBAL_USER], array_merge=union_list
        )

        merged["profiles"] = project
        for name, profile in global_.items():
            if name not in merged["profiles"]:
                merged["profiles"][name] = profile

        return merged

    # ===== Private Helpers =====

    def _unsecure(self, layer: ConfigLayer, matches: Callable[[str], bool]) -> None:
        """Drop matching paths from a layer's ``secure`` list and profile ``secure`` arrays."""
        layer.properties["secure"] = [p for p in layer.properties["secure"] if not matches(p)]

        for path in self.api.secure.secure_fields(user=layer.user, global_=layer.global_):
            if not matches(path):
                continue
            info = self.api.secure.secure_info_for_prop(path)
            names = get_path(layer.properties, info.path) if info else None
            if isinstance(names, list) and info.prop in names:
                names.remove(info.prop)
