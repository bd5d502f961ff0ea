"""Shared base for the configuration sub-APIs."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import Config


class BaseApi:
    """Sub-API bound to one Config instance.

    Sub-APIs operate on the config's live layers; they never hold copies.
    """

    def __init__(self, config: "Config"):
        self._config = config
