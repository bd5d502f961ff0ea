"""Exceptions for strata-config."""

from pathlib import Path


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or writing configuration file."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ConfigParseError(ConfigFileError):
    """Configuration file exists but is not valid JSON.

    Attributes:
        path: File that failed to parse
        line: 1-based line of the parse failure
        column: 1-based column of the parse failure
    """

    def __init__(self, path: Path | str, reason: str, line: int, column: int):
        self.reason = reason
        self.line = line
        self.column = column
        super().__init__(
            f"error reading config file: {path}: {reason} (line {line}, column {column}). "
            "Please check this configuration file for errors.",
            path=path,
        )


class ConfigValidationError(ConfigError):
    """Error validating configuration data."""

    pass


class ConfigInternalError(ConfigError):
    """Active layer selector no longer matches any layer."""

    pass
