"""Data models for strata-config."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import Any


class LayerKind(Enum):
    """Configuration layer enumeration, in priority order.

    Iteration order is significant: merge precedence and active layer
    selection both follow it.
    """

    PROJECT_USER = (True, False)
    PROJECT = (False, False)
    GLOBAL_USER = (True, True)
    GLOBAL = (False, True)

    @property
    def user(self) -> bool:
        return self.value[0]

    @property
    def global_(self) -> bool:
        return self.value[1]

    @classmethod
    def of(cls, user: bool, global_: bool) -> "LayerKind":
        return cls((user, global_))


@dataclass(frozen=True)
class ConfigPaths:
    """Resolved paths to the four configuration layers.

    Attributes:
        project_user: Personal project file (``<app>.config.user.json``)
        project: Shared project file (``<app>.config.json``)
        global_user: Personal file in the home directory
        global_config: Shared file in the home directory
    """

    project_user: Path
    project: Path
    global_user: Path
    global_config: Path

    def for_kind(self, kind: LayerKind) -> Path:
        return {
            LayerKind.PROJECT_USER: self.project_user,
            LayerKind.PROJECT: self.project,
            LayerKind.GLOBAL_USER: self.global_user,
            LayerKind.GLOBAL: self.global_config,
        }[kind]

    def as_list(self) -> list[Path]:
        return [self.for_kind(kind) for kind in LayerKind]


@dataclass
class ConfigLayer:
    """One physical configuration file and its in-memory contents.

    Attributes:
        path: Absolute path of the file
        user: True for personal (``.user``) files
        global_: True for files in the home directory
        exists: True once the file has been read or written successfully
        properties: Parsed configuration document
        dirty: True when edited in memory since the last read or write
    """

    path: Path
    user: bool
    global_: bool
    exists: bool = False
    properties: dict[str, Any] = field(default_factory=dict)
    dirty: bool = False

    @property
    def kind(self) -> LayerKind:
        return LayerKind.of(self.user, self.global_)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "exists": self.exists,
            "user": self.user,
            "global": self.global_,
            "properties": self.properties,
        }


@dataclass(frozen=True)
class SecureInfo:
    """Location of the ``secure`` array that governs one profile property."""

    path: str
    prop: str


@dataclass(frozen=True)
class SchemaInfo:
    """Where the active layer's ``$schema`` points.

    Attributes:
        original: Value of ``$schema`` as written in the file
        resolved: Absolute path or URL
        local: True when the schema is a file on disk
    """

    original: str
    resolved: str
    local: bool
