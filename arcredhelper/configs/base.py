#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path

from arcredhelper.auth import Credential
from arcredhelper.logger import LOG
from arcredhelper.sanitizer import redact_config_content
from arcredhelper.exceptions import ConfigFileError


def home_dir() -> Path:
    """Return the user's home directory or raise ConfigFileError."""
    try:
        return Path.home()
    except RuntimeError as error:
        raise ConfigFileError(f"cannot find HOME dir: {error}") from error


def read_text_file(path: Path) -> str | None:
    """Return the file content, or None if the file does not exist."""
    try:
        # Undecodable bytes round-trip through surrogate escapes
        return path.read_text(encoding="utf-8", errors="surrogateescape")
    except FileNotFoundError:
        return None
    except OSError as error:
        raise ConfigFileError(f'cannot load file "{path}": {error}', str(path)) from error


def write_text_file(path: Path, content: str) -> None:
    """Truncate and rewrite ``path``, creating parent directories as needed."""
    try:
        os.makedirs(path.parent, mode=0o755, exist_ok=True)
    except OSError as error:
        raise ConfigFileError(
            f'failed to create dir for "{path}": {error}', str(path)
        ) from error

    try:
        with open(
            path, "w", encoding="utf-8", errors="surrogateescape", newline=""
        ) as config_file:
            config_file.write(content)
    except OSError as error:
        raise ConfigFileError(f'failed to save "{path}": {error}', str(path)) from error
    LOG.debug(
        "Wrote %d bytes:\n%s",
        len(content),
        redact_config_content(content),
        extra={"target_file": str(path)},
    )


class AuthConfig(ABC):
    """A config document holding registry credentials.

    A document is opened (existing file read, or an empty/default document),
    updated in memory, then persisted by :meth:`close`. Used as a context
    manager it is only persisted when the block exits without error.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @abstractmethod
    def set_token(self, keys: list[str], token: str) -> None:
        """Set an access token for the given hosts, registries or repo IDs."""

    @abstractmethod
    def set_json_key(self, keys: list[str], base64_key: str) -> None:
        """Set a base64 encoded JSON key for the given hosts, registries or repo IDs."""

    @abstractmethod
    def close(self) -> None:
        """Persist the document to :attr:`path`."""

    def apply(self, keys: list[str], credential: Credential) -> None:
        if credential.is_token:
            self.set_token(keys, credential.value)
        else:
            self.set_json_key(keys, credential.value)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()
        return False


class UserPasswordConfig(AuthConfig):
    """A document storing a username and secret pair for each key."""

    @abstractmethod
    def update(self, keys: list[str], user: str, secret: str) -> None:
        """Set ``user`` and ``secret`` for every key."""

    def set_token(self, keys: list[str], token: str) -> None:
        self.apply(keys, Credential.token(token))

    def set_json_key(self, keys: list[str], base64_key: str) -> None:
        self.apply(keys, Credential.json_key(base64_key))

    def apply(self, keys: list[str], credential: Credential) -> None:
        self.update(keys, credential.username, credential.value)
