"""Build configuration documents.

``ConfigBuilder.build`` creates a starter document from profile type
schemas. ``ConfigBuilder.convert`` migrates a legacy directory of YAML
profiles::

    <root>/
        zosmf/
            zosmf_meta.yaml     # defaultProfile: lpar1
            lpar1.yaml
            lpar2.yaml
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

import yaml

from .utils import empty_config
from .vault import Vault

logger = logging.getLogger(__name__)

SECURELY_STORED = "managed by"

GetValue = Callable[[str, dict[str, Any]], Any]

_TYPE_DEFAULTS: dict[str, Callable[[], Any]] = {
    "string": str,
    "number": int,
    "object": dict,
    "array": list,
    "boolean": bool,
}


@dataclass
class ProfileTypeConfig:
    """A profile type and the schema of its properties.

    Attributes:
        type: Profile type name
        schema: JSON schema with a ``properties`` object; each property may
            carry ``includeInTemplate``, ``secure``, ``type`` and
            ``optionDefinition``
    """

    type: str
    schema: dict[str, Any]


@dataclass
class ProfileFailure:
    """A legacy profile or profile type that could not be converted.

    ``name`` is None when the failure concerns the whole type, such as an
    unreadable meta file.
    """

    type: str
    name: str | None
    error: str


@dataclass
class ConvertResult:
    config: dict[str, Any]
    profiles_converted: dict[str, list[str]] = field(default_factory=dict)
    profiles_failed: list[ProfileFailure] = field(default_factory=list)


def _default_value(prop_type: str | list[str] | None) -> Any:
    """Empty value suited to a schema type. Only the first of several types counts."""
    if isinstance(prop_type, list):
        prop_type = prop_type[0] if prop_type else None
    factory = _TYPE_DEFAULTS.get(prop_type)
    return factory() if factory else None


class ConfigBuilder:
    """Create configuration documents from profile definitions."""

    @staticmethod
    def build(
        profile_types: list[ProfileTypeConfig],
        populate_properties: bool = False,
        get_value: GetValue | None = None,
        base_profile_type: str | None = None,
    ) -> dict[str, Any]:
        """Build a starter configuration with one profile per type.

        Args:
            profile_types: Profile types to create profiles for
            populate_properties: Fill in properties flagged ``includeInTemplate``
                and make each profile the default for its type
            get_value: Callback ``(name, property_schema)`` giving a starting
                value for secure properties; None results are not stored
            base_profile_type: Type whose profile receives properties shared
                by all other profiles

        Returns:
            Configuration document with ``autoStore`` enabled
        """
        config = empty_config()

        for profile_type in profile_types:
            properties: dict[str, Any] = {}
            secure: list[str] = []

            for name, prop in (profile_type.schema.get("properties") or {}).items():
                if not (populate_properties and prop.get("includeInTemplate")):
                    continue

                if prop.get("secure"):
                    secure.append(name)
                    value = get_value(name, prop) if get_value else None
                    if value is not None:
                        properties[name] = value
                else:
                    option = prop.get("optionDefinition") or {}
                    if "defaultValue" in option:
                        properties[name] = option["defaultValue"]
                    else:
                        properties[name] = _default_value(prop.get("type"))

            config["profiles"][profile_type.type] = {
                "type": profile_type.type,
                "properties": properties,
                "secure": secure,
            }
            if populate_properties:
                config["defaults"][profile_type.type] = profile_type.type

        if base_profile_type is not None and base_profile_type in config["profiles"]:
            ConfigBuilder._hoist_properties(config["profiles"], base_profile_type)

        logger.debug(f"Built config with {len(config['profiles'])} profile(s)")
        return {**config, "autoStore": True}

    @staticmethod
    def _hoist_properties(profiles: dict[str, Any], base_profile_type: str) -> None:
        """Move properties that child profiles define with one shared value into the base profile."""
        children = [p for p in profiles.values() if p["type"] != base_profile_type]

        values: dict[str, list[Any]] = {}
        for child in children:
            for name, value in child["properties"].items():
                values.setdefault(name, []).append(value)

        base = profiles[base_profile_type]
        for name, found in values.items():
            if len(found) < 2 or any(v != found[0] for v in found[1:]):
                continue
            base["properties"] = {name: found[0], **base["properties"]}
            for child in children:
                child["properties"].pop(name, None)

    @staticmethod
    def convert(profiles_root: Path | str, vault: Vault | None = None) -> ConvertResult:
        """Convert a legacy YAML profile directory into a configuration document.

        Profiles are named ``<type>_<name>``. Property values reading
        ``managed by ...`` are fetched from ``vault`` under
        ``<type>_<name>_<property>`` and marked secure. Failures are
        collected in the result instead of being raised.

        Args:
            profiles_root: Directory holding one subdirectory per profile type
            vault: Vault holding the legacy secure values

        Returns:
            ConvertResult with the document, converted names and failures
        """
        root = Path(profiles_root)
        result = ConvertResult(config={**empty_config(), "autoStore": True})

        if not root.is_dir():
            logger.debug(f"No legacy profiles found at {root}")
            return result

        for type_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            profile_type = type_dir.name
            meta_name = f"{profile_type}_meta.yaml"

            for profile_path in sorted(type_dir.glob("*.yaml")):
                if profile_path.name == meta_name:
                    continue
                name = profile_path.stem
                try:
                    profile = ConfigBuilder._convert_profile(profile_path, profile_type, name, vault, result)
                except (OSError, yaml.YAMLError, ValueError) as e:
                    result.profiles_failed.append(ProfileFailure(type=profile_type, name=name, error=str(e)))
                    logger.warning(f"Failed to load {profile_type} profile '{name}': {e}")
                    continue

                result.config["profiles"][f"{profile_type}_{name}"] = profile
                result.profiles_converted.setdefault(profile_type, []).append(name)

            try:
                meta = yaml.safe_load((type_dir / meta_name).read_text(encoding="utf-8")) or {}
                default_name = meta["defaultProfile"]
            except (OSError, yaml.YAMLError, KeyError, TypeError) as e:
                result.profiles_failed.append(ProfileFailure(type=profile_type, name=None, error=str(e)))
                logger.warning(f"Failed to find default {profile_type} profile: {e}")
                continue
            result.config["defaults"][profile_type] = f"{profile_type}_{default_name}"

        converted = sum(len(names) for names in result.profiles_converted.values())
        logger.info(f"Converted {converted} legacy profile(s) from {root}")
        return result

    @staticmethod
    def _convert_profile(
        path: Path, profile_type: str, name: str, vault: Vault | None, result: ConvertResult
    ) -> dict[str, Any]:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping in '{path}'")

        properties: dict[str, Any] = {}
        secure: list[str] = []

        for prop, value in data.items():
            if prop == "type":
                continue
            if isinstance(value, str) and value.startswith(SECURELY_STORED):
                account = f"{profile_type}_{name}_{prop.replace('.', '_')}"
                try:
                    stored = vault.load(account) if vault is not None else None
                    if stored is None:
                        raise ValueError(f"no value stored for '{account}'")
                    properties[prop] = json.loads(stored)
                except Exception as e:
                    result.profiles_failed.append(
                        ProfileFailure(type=profile_type, name=name, error=f"secure property '{prop}': {e}")
                    )
                    logger.warning(f"Failed to load secure property '{prop}' of {profile_type} profile '{name}': {e}")
                    continue
                secure.append(prop)
            else:
                properties[prop] = value

        return {"type": profile_type, "properties": properties, "secure": secure}
