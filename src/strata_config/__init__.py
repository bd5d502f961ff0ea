"""strata-config: Layered JSON configuration for command-line applications.

This library merges configuration from four files:
- Project user (``<app>.config.user.json``, searched upward from the working directory)
- Project (``<app>.config.json``, searched upward from the working directory)
- Global user (``~/.<app>/<app>.config.user.json``)
- Global (``~/.<app>/<app>.config.json``)

Properties declared secure are kept in a credential vault instead of on
disk. The global directory can be relocated with ``<APP>_CLI_HOME``.

Public API:
    Config: Load, edit, merge and save layered configuration
    ConfigBuilder: Build starter configurations and convert legacy profiles
    KeyringVault, ChunkedVault: Vault adapters
    ConfigError, ConfigFileError, ConfigParseError: Exception types

Example:
    ```python
    from strata_config import Config, KeyringVault

    config = Config.load("mycli", vault=KeyringVault("mycli"))

    # Read merged settings
    host = config.api.profiles.get("lpar1")["host"]

    # Edit the active layer
    config.set("profiles.lpar1.properties.password", "secret", secure=True)
    config.save()
    ```
"""

from .api import ConfigApi
from .builder import ConfigBuilder
from .builder import ConvertResult
from .builder import ProfileFailure
from .builder import ProfileTypeConfig
from .config import SECURE_VALUE
from .config import Config
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigInternalError
from .exceptions import ConfigParseError
from .exceptions import ConfigValidationError
from .models import ConfigLayer
from .models import ConfigPaths
from .models import LayerKind
from .models import SchemaInfo
from .models import SecureInfo
from .utils import deep_merge
from .utils import parse_json_value
from .vault import ChunkedVault
from .vault import KeyringVault
from .vault import Vault

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigApi",
    "ConfigBuilder",
    "ConvertResult",
    "ProfileFailure",
    "ProfileTypeConfig",
    "ConfigLayer",
    "ConfigPaths",
    "LayerKind",
    "SchemaInfo",
    "SecureInfo",
    "SECURE_VALUE",
    "Vault",
    "KeyringVault",
    "ChunkedVault",
    "deep_merge",
    "parse_json_value",
    "ConfigError",
    "ConfigFileError",
    "ConfigParseError",
    "ConfigValidationError",
    "ConfigInternalError",
]
