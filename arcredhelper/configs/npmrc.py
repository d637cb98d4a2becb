#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Edit Artifact Registry entries of an ``.npmrc`` file.

Each registry needs four lines::

    @scope:registry=https://us-npm.pkg.dev/my-project/repo1/
    //us-npm.pkg.dev/my-project/repo1/:always-auth=true
    //us-npm.pkg.dev/my-project/repo1/:email=not.valid@email.com
    //us-npm.pkg.dev/my-project/repo1/:_authToken=<base64 of user:secret>

Existing lines are rewritten in place, missing ones are appended, so applying
the same update twice yields the same file.
"""

from __future__ import annotations

import base64
from pathlib import Path
from dataclasses import field, dataclass

from arcredhelper.logger import LOG
from arcredhelper.configs.base import (
    UserPasswordConfig,
    home_dir,
    read_text_file,
    write_text_file,
)


NPMRC_FILENAME = ".npmrc"
PLACEHOLDER_EMAIL = "not.valid@email.com"


def normalize_repo_url(repo_url: str) -> str:
    """Add the ``https://`` scheme and trailing slash npm expects."""
    if not repo_url.startswith("https://"):
        repo_url = "https://" + repo_url
    if not repo_url.endswith("/"):
        repo_url += "/"
    return repo_url


def encode_auth(user: str, secret: str) -> str:
    return base64.b64encode(f"{user}:{secret}".encode()).decode("ascii")


@dataclass
class _RegistryLines:
    """Which of the four lines were already present for one registry."""

    url: str
    registry: str = field(init=False)
    has_registry: bool = False
    has_always_auth: bool = False
    has_email: bool = False
    has_auth_token: bool = False

    def __post_init__(self):
        # //host/path/ form used as key prefix
        self.registry = self.url.removeprefix("https:")


class NpmRC(UserPasswordConfig):
    """An ``.npmrc`` document held as a list of lines."""

    def __init__(self, path: Path | str, lines: list[str] | None = None, scope: str = ""):
        super().__init__(path)
        self.lines: list[str] = lines or []
        self.scope = scope.lstrip("@") if scope else ""

    @classmethod
    def open(cls, npmrc_path: str | Path | None = None, scope: str = "") -> NpmRC:
        path = Path(npmrc_path).expanduser() if npmrc_path else home_dir() / NPMRC_FILENAME
        content = read_text_file(path)
        lines = content.splitlines() if content else []
        return cls(path, lines, scope)

    @property
    def content(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    @property
    def registry_key(self) -> str:
        if not self.scope:
            return "registry"
        return f"@{self.scope}:registry"

    def close(self) -> None:
        write_text_file(self.path, self.content)

    def update(self, repos: list[str], user: str, secret: str) -> None:
        """Set credentials for every repository URL in ``repos``."""
        auth_token = encode_auth(user, secret)
        registries = list(
            {
                url: _RegistryLines(url)
                for url in (normalize_repo_url(repo) for repo in repos)
            }.values()
        )

        lines: list[str] = []
        for raw_line in self.lines:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                lines.append(line)
                continue

            key, sep, value = line.partition("=")
            if not sep:
                # Not a key=value line, keep it untouched
                lines.append(line)
                continue
            key = key.strip()
            value = value.strip()

            new_line = line
            for entry in registries:
                if key == self.registry_key and value == entry.url:
                    entry.has_registry = True
                if key == f"{entry.registry}:always-auth":
                    new_line = f"{entry.registry}:always-auth=true"
                    entry.has_always_auth = True
                if key == f"{entry.registry}:email":
                    entry.has_email = True
                if key == f"{entry.registry}:_authToken":
                    new_line = f"{entry.registry}:_authToken={auth_token}"
                    entry.has_auth_token = True
            lines.append(new_line)

        for entry in registries:
            if not entry.has_registry:
                lines.append(f"{self.registry_key}={entry.url}")
            if not entry.has_always_auth:
                lines.append(f"{entry.registry}:always-auth=true")
            if not entry.has_email:
                lines.append(f"{entry.registry}:email={PLACEHOLDER_EMAIL}")
            if not entry.has_auth_token:
                lines.append(f"{entry.registry}:_authToken={auth_token}")

        LOG.debug("Updated %d npm registries", len(registries))
        self.lines = lines
