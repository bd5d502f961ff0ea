"""Profile API: navigate and edit the profile tree."""

import copy
import re
from typing import Any

from .base import BaseApi


class ProfilesApi(BaseApi):
    """Profile tree access.

    Reads use the merged view of all layers; writes go to the active layer.
    Profile paths are dotted names of nested profiles (``lpar1.zosmf``).
    """

    def set(self, path: str, profile: dict[str, Any]) -> None:
        """Set a copy of a profile at a (possibly nested) location in the active layer."""
        profile = copy.deepcopy(profile)
        profile.setdefault("properties", {})
        layer = self._config.layer_active()
        layer.dirty = True
        node = layer.properties
        segments = path.split(".")

        for index, segment in enumerate(segments):
            children = node.setdefault("profiles", {})
            if index == len(segments) - 1:
                children[segment] = profile
            elif children.get(segment) is None:
                children[segment] = {"properties": {}}
            node = children[segment]

    def get(self, path: str) -> dict[str, Any]:
        """Get the properties of a profile.

        Properties of each ancestor on the path are included, nearer
        profiles overriding farther ones.
        """
        profiles = copy.deepcopy(self._config.properties["profiles"])
        properties: dict[str, Any] = {}

        for segment in path.split("."):
            profile = profiles.get(segment)
            if profile is None:
                break
            properties.update(profile.get("properties") or {})
            profiles = profile.get("profiles") or {}

        return properties

    def exists(self, path: str) -> bool:
        return self._find(path) is not None

    def default_set(self, profile_type: str, name: str) -> None:
        layer = self._config.layer_active()
        layer.properties["defaults"][profile_type] = name
        layer.dirty = True

    def default_get(self, profile_type: str) -> dict[str, Any] | None:
        """Get the properties of the default profile of a type, or None."""
        name = self._config.properties["defaults"].get(profile_type)
        if name is None or not self.exists(name):
            return None
        return self.get(name)

    def expand_path(self, short_path: str) -> str:
        """Expand ``a.b`` to the document path ``profiles.a.profiles.b``."""
        return re.sub(r"(^|\.)", r"\1profiles.", short_path)

    def _find(self, path: str) -> dict[str, Any] | None:
        profiles = self._config.properties["profiles"]
        profile = None
        for segment in path.split("."):
            if profiles is None or segment not in profiles:
                return None
            profile = profiles[segment]
            profiles = profile.get("profiles")
        return profile
