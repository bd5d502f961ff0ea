"""Secure API: keep secure property values in a vault instead of on disk.

Every secure value of every layer is stored in one vault account as the
base64 encoding of a JSON "secure map"::

    {"/abs/path/app.config.json": {"profiles.base.properties.password": "..."}}
"""

import base64
import binascii
import json
import logging
import re
from typing import TYPE_CHECKING
from typing import Any

from ..exceptions import ConfigError
from ..models import SecureInfo
from ..utils import get_path
from ..utils import set_path
from ..utils import union_list
from ..vault import Vault
from .base import BaseApi

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)

SECURE_ACCOUNT = "secure_config_props"


def find_secure(profiles: dict[str, Any], prefix: str) -> list[str]:
    """Collect the secure property paths declared inside a profiles object.

    Args:
        profiles: A ``profiles`` object, at the top level or nested
        prefix: Dotted path of that ``profiles`` object

    Returns:
        Paths like ``profiles.lpar1.properties.password``
    """
    paths: list[str] = []
    for name, profile in profiles.items():
        for prop in profile.get("secure") or []:
            paths.append(f"{prefix}.{name}.properties.{prop}")
        if profile.get("profiles") is not None:
            paths.extend(find_secure(profile["profiles"], f"{prefix}.{name}.profiles"))
    return paths


def encode_secure_map(secure_map: dict[str, dict[str, Any]]) -> str:
    return base64.b64encode(json.dumps(secure_map).encode("utf-8")).decode("ascii")


def decode_secure_map(blob: str) -> dict[str, dict[str, Any]]:
    try:
        return json.loads(base64.b64decode(blob, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"unable to decode secure properties from the vault: {e}") from e


class SecureApi(BaseApi):
    """Load and save secure property values through the config's vault."""

    def __init__(self, config: "Config"):
        super().__init__(config)
        self._load_failed: bool | None = None

    @property
    def load_failed(self) -> bool:
        """True if the last vault load raised, or no vault was ever installed."""
        if self._load_failed is not None:
            return self._load_failed
        return self._config.vault is None

    def load(self, vault: Vault | None = None) -> None:
        """Load secure values from the vault into every layer.

        Only paths the layer currently declares secure are injected.
        Without a vault this does nothing.

        Args:
            vault: Vault to install on the config before loading
        """
        if vault is not None:
            self._config.vault = vault
        vault = self._config.vault
        if vault is None:
            return

        try:
            blob = vault.load(SECURE_ACCOUNT)
        except Exception:
            self._load_failed = True
            raise
        self._load_failed = False

        if blob is None:
            return
        self._config.secure_map = decode_secure_map(blob)

        for layer in self._config.iter_layers():
            stored = self._config.secure_map.get(str(layer.path))
            if not stored:
                continue
            for path in self.secure_fields(user=layer.user, global_=layer.global_):
                if path in stored:
                    set_path(layer.properties, path, stored[path])

        logger.debug(f"Loaded secure properties from {vault.name}")

    def save(self, all_layers: bool = True) -> None:
        """Save the secure values of the live layers into the vault.

        Only layers that a save writes to disk are included, so the vault
        never holds values for a file that was not written. Each included
        layer's entry is rebuilt from scratch; layers with no secure values
        lose their entry. The vault is written only if the map holds entries
        now or did before.

        Args:
            all_layers: False to save only the active layer's entry
        """
        vault = self._config.vault
        if vault is None:
            return

        secure_map = self._config.secure_map
        had_entries = len(secure_map) > 0

        for layer in self._config.layers_to_save(all_layers):
            entry: dict[str, Any] = {}
            for path in self.secure_fields(user=layer.user, global_=layer.global_):
                value = get_path(layer.properties, path)
                if value is not None:
                    entry[path] = value

            secure_map.pop(str(layer.path), None)
            if entry:
                secure_map[str(layer.path)] = entry

        if secure_map or had_entries:
            vault.save(SECURE_ACCOUNT, encode_secure_map(secure_map))
            logger.info(f"Saved secure properties for {len(secure_map)} layer(s) to {vault.name}")

    def secure_fields(self, user: bool | None = None, global_: bool | None = None) -> list[str]:
        """List the secure property paths declared by one layer.

        Combines the layer's top-level ``secure`` list with the ``secure``
        arrays of its profiles.
        """
        layer = self._config.target_layer(user, global_)
        declared = layer.properties.get("secure") or []
        return union_list(declared, find_secure(layer.properties.get("profiles") or {}, "profiles"))

    def secure_props_for_profile(self, profile_name: str) -> list[str]:
        """List names of secure properties that apply to a profile.

        They may be declared on the profile itself or on an ancestor.
        """
        profile_path = self._config.api.profiles.expand_path(profile_name)
        props: list[str] = []
        for path in self.secure_fields():
            segments = path.split(".")
            owner = ".".join(segments[:-2])
            if profile_path == owner or profile_path.startswith(f"{owner}."):
                props.append(segments[-1])
        return props

    def secure_info_for_prop(self, property_path: str, find_up: bool = False) -> SecureInfo | None:
        """Find the ``secure`` array that governs a profile property.

        ``profiles.lpar1.properties.password`` is governed by the name
        ``password`` in ``profiles.lpar1.secure``.

        Args:
            property_path: Full dotted path of the property
            find_up: Prefer an ancestor profile's ``secure`` array that already
                lists the property

        Returns:
            SecureInfo, or None if the path is not a profile property
        """
        if ".properties." not in property_path:
            return None

        segments = property_path.split(".")
        prop = segments.pop()
        secure_path = re.sub(r"\.properties\..+", ".secure", property_path)

        if find_up:
            layer = self._config.layer_active()
            while layer.exists and len(segments) > 2:
                segments.pop()
                candidate = ".".join(segments) + ".secure"
                if prop in (get_path(layer.properties, candidate) or []):
                    secure_path = candidate
                    break

        return SecureInfo(path=secure_path, prop=prop)
