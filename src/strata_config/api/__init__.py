"""Sub-APIs exposed as ``Config.api``."""

from typing import TYPE_CHECKING

from .layers import LayersApi
from .plugins import PluginsApi
from .profiles import ProfilesApi
from .secure import SECURE_ACCOUNT
from .secure import SecureApi
from .secure import find_secure

if TYPE_CHECKING:
    from ..config import Config


class ConfigApi:
    """Groups the sub-APIs of one Config instance."""

    def __init__(self, config: "Config"):
        self.layers = LayersApi(config)
        self.plugins = PluginsApi(config)
        self.profiles = ProfilesApi(config)
        self.secure = SecureApi(config)


__all__ = [
    "ConfigApi",
    "LayersApi",
    "PluginsApi",
    "ProfilesApi",
    "SecureApi",
    "SECURE_ACCOUNT",
    "find_secure",
]
