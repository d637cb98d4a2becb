#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Edit Artifact Registry entries of a netrc file.

Entries are written as three-line blocks, each preceded by an empty line::

    machine us-go.pkg.dev
    login oauth2accesstoken
    password <token>
"""

from __future__ import annotations

import re
from typing import Callable
from pathlib import Path

from arcredhelper.auth import TOKEN_USERNAME, JSON_KEY_USERNAME
from arcredhelper.logger import LOG
from arcredhelper.configs.base import (
    AuthConfig,
    home_dir,
    read_text_file,
    write_text_file,
)


NETRC_FILENAME = ".netrc"

CATCH_ALL_PATTERN = re.compile(
    "\nmachine (.*.pkg.dev)\nlogin (oauth2accesstoken|_json_key_base64)\npassword (.*)\n"
)
TOKEN_PATTERN = re.compile("\nmachine (.*.pkg.dev)\nlogin oauth2accesstoken\npassword (.*)\n")


def token_format(host: str, token: str) -> str:
    return f"\nmachine {host}\nlogin {TOKEN_USERNAME}\npassword {token}\n"


def json_key_format(host: str, base64_key: str) -> str:
    return f"\nmachine {host}\nlogin {JSON_KEY_USERNAME}\npassword {base64_key}\n"


def resolve_netrc_path(netrc_path: str | Path | None = None) -> Path:
    """Default to ``~/.netrc``; a path not ending in ``.netrc`` is a directory."""
    if not netrc_path:
        netrc_path = home_dir()
    path = Path(netrc_path).expanduser()
    if not path.name.endswith(NETRC_FILENAME):
        path = path / NETRC_FILENAME
    return path


class NetRC(AuthConfig):
    """A netrc document held as raw text."""

    def __init__(self, path: Path | str, content: str = ""):
        super().__init__(path)
        self.content = content

    @classmethod
    def open(cls, netrc_path: str | Path | None = None) -> NetRC:
        return cls.from_file(resolve_netrc_path(netrc_path))

    @classmethod
    def from_file(cls, path: str | Path) -> NetRC:
        """Load ``path`` as is; a missing file starts an empty document."""
        path = Path(path)
        content = read_text_file(path)
        if content is None:
            LOG.debug("%s does not exist yet, starting empty", path)
            content = ""
        return cls(path, content)

    def set_token(self, keys: list[str], token: str, append: bool = False) -> None:
        self._update(keys, token_format, token, append)

    def set_json_key(self, keys: list[str], base64_key: str, append: bool = False) -> None:
        self._update(keys, json_key_format, base64_key, append)

    def refresh(self, token: str) -> None:
        """Replace the password of every existing access token block."""
        self.content, count = TOKEN_PATTERN.subn(
            lambda match: token_format(match.group(1), token), self.content
        )
        LOG.info("Refreshed %d access token entries", count)

    def close(self) -> None:
        write_text_file(self.path, self.content)

    def _update(
        self,
        hosts: list[str],
        formatter: Callable[[str, str], str],
        secret: str,
        append: bool,
    ) -> None:
        content = self.content
        if not append:
            # Every Artifact Registry entry goes, not only the requested hosts
            content = CATCH_ALL_PATTERN.sub("", content)
        self.content = content + "".join(formatter(host, secret) for host in hosts)
