"""Credential vault adapters.

The engine stores every secure value of every layer in one blob under a
single account name. A vault only has to load and save text by account.
"""

import logging
import math
import sys
from typing import Protocol

import keyring

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "strata"

# Windows Credential Manager rejects blobs larger than this
WINDOWS_MAX_CREDENTIAL_LENGTH = 2560

_TERMINATOR = "\0"


class Vault(Protocol):
    """Protocol for a credential store addressed by account name."""

    name: str

    def load(self, account: str) -> str | None:
        """
        Load the text stored for an account.

        Returns:
            The stored text, or None if nothing is stored.
        """
        ...

    def save(self, account: str, value: str) -> None:
        """Store text for an account, replacing any previous value."""
        ...


class KeyringVault:
    """
    Store secrets in the OS keychain through ``keyring``.

    All accounts share one keychain service name.
    """

    def __init__(self, service: str = DEFAULT_SERVICE):
        self.service = service

    @property
    def name(self) -> str:
        return keyring.get_keyring().name

    def load(self, account: str) -> str | None:
        return keyring.get_password(self.service, account)

    def save(self, account: str, value: str) -> None:
        keyring.set_password(self.service, account, value)


def default_chunk_length() -> int | None:
    """Largest value stored under one account, or None for no limit."""
    if sys.platform == "win32":
        # leave room for the backend's own encoding overhead
        return math.ceil(WINDOWS_MAX_CREDENTIAL_LENGTH * 0.75) - 4
    return None


class ChunkedVault:
    """
    Split long values across several accounts of a wrapped vault.

    With a limit set, every value is NUL-terminated and stored in pieces of
    at most ``max_length`` under ``account``, ``account-2``, ``account-3``
    ... On load the pieces are concatenated until the terminator is seen,
    so pieces left over from a longer earlier value are never read.
    """

    def __init__(self, vault: Vault, max_length: int | None = -1):
        self._vault = vault
        self.max_length = default_chunk_length() if max_length == -1 else max_length

    @property
    def name(self) -> str:
        return self._vault.name

    def load(self, account: str) -> str | None:
        value = self._vault.load(account)
        if value is None or self.max_length is None:
            return value

        index = 1
        while not value.endswith(_TERMINATOR):
            index += 1
            chunk = self._vault.load(f"{account}-{index}")
            if chunk is None:
                # stored unchunked
                return value
            value += chunk

        return value[: -len(_TERMINATOR)]

    def save(self, account: str, value: str) -> None:
        if self.max_length is None:
            self._vault.save(account, value)
            return

        value += _TERMINATOR
        chunks = [value[i : i + self.max_length] for i in range(0, len(value), self.max_length)]
        for index, chunk in enumerate(chunks, start=1):
            key = account if index == 1 else f"{account}-{index}"
            self._vault.save(key, chunk)
        logger.debug(f"Saved {account} in {len(chunks)} chunks to {self.name}")
