#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""The ``get`` and ``set-*`` commands."""

from __future__ import annotations

import sys
import json
import threading
from abc import ABC, abstractmethod
from typing import IO
from pathlib import Path
from urllib.parse import urlsplit

import jsonschema

from arcredhelper.auth import Credential, CredentialSource
from arcredhelper.logger import LOG, set_command_context
from arcredhelper.configs import (
    NetRC,
    NpmRC,
    AuthConfig,
    AptAuthConfig,
    MavenSettings,
    default_repo_id,
)
from arcredhelper.options import CommonOptions, validate_hosts
from arcredhelper.refresh import RefreshLoop, stop_on_signals
from arcredhelper.sanitizer import sanitize_for_logging
from arcredhelper.settings import APT_AUTH_CONFIG_DIR, DEFAULT_APT_AUTH_CONFIG
from arcredhelper.exceptions import (
    RefreshError,
    CredHelperError,
    CredentialError,
    ValidationError,
)


REQUEST_SCHEMA_PATH = Path(__file__).parent / "get-request-schema.json"


def _load_request_schema() -> dict:
    with open(REQUEST_SCHEMA_PATH, encoding="utf-8") as schema_file:
        return json.load(schema_file)


def decode_request(payload: str) -> str:
    """Return the host of a ``{"uri": ...}`` credential helper request."""
    try:
        request = json.loads(payload)
    except json.JSONDecodeError as error:
        raise ValidationError(f"failed to parse request: {error}") from error

    try:
        jsonschema.validate(request, _load_request_schema())
    except jsonschema.ValidationError as error:
        raise ValidationError(f"failed to parse request: {error.message}") from error

    uri = request["uri"].strip()
    if "://" in uri:
        return urlsplit(uri).hostname or ""
    return uri.split("/", 1)[0]


def encode_response(token: str) -> str:
    return json.dumps(
        {"headers": {"Authorization": [f"Bearer {token}"]}},
        separators=(",", ":"),
    )


class GetCommand:
    """Print the credential helper response for the given host(s)."""

    name = "get"

    def __init__(
        self,
        credentials: CredentialSource | None = None,
        hosts: list[str] | None = None,
        stdin: IO[str] | None = None,
        stdout: IO[str] | None = None,
    ):
        self.credentials = credentials or CredentialSource()
        self.hosts = hosts or []
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def run(self) -> None:
        set_command_context(self.name)
        if self.hosts:
            hosts = self.hosts
        else:
            try:
                payload = self.stdin.read()
            except OSError as error:
                raise CredHelperError(f"failed to read stdin: {error}") from error
            hosts = [decode_request(payload)]

        validate_hosts(hosts)

        try:
            token = self.credentials.access_token()
        except CredentialError as error:
            raise CredentialError(f"failed to get access token: {error}") from error

        self.stdout.write(encode_response(token))
        self.stdout.flush()
        LOG.info("Returned credential for %s", ", ".join(hosts))


class SetCommand(ABC):
    """Write a credential into one config file, optionally refreshing it."""

    name: str = ""

    def __init__(
        self,
        options: CommonOptions,
        credentials: CredentialSource | None = None,
    ):
        self.options = options
        self.credentials = credentials or CredentialSource()

    def validate(self) -> None:
        self.options.validate()

    @abstractmethod
    def open_config(self) -> AuthConfig:
        """Open the target document."""

    @abstractmethod
    def config_keys(self) -> list[str]:
        """Hosts, registry URLs or repo IDs the credential is set for."""

    def update(self, config: AuthConfig, credential: Credential) -> None:
        config.apply(self.config_keys(), credential)

    def run_once(self, config: AuthConfig | None = None) -> None:
        """Open, update once and persist the target document."""
        if config is None:
            config = self.open_config()
        set_command_context(self.name, str(config.path))
        with config:
            credential = self.credentials.resolve(self.options)
            self.update(config, credential)
        LOG.info("Credential written to %s", config.path)

    def run(self, stop_event: threading.Event | None = None) -> None:
        self.validate()
        LOG.debug(
            "%s options: %s", self.name, sanitize_for_logging(self.options.to_dict())
        )
        loop = RefreshLoop(
            self.options.background_refresh_interval,
            self.options.background_refresh_duration,
            stop_event=stop_event,
        )

        with stop_on_signals(loop):
            try:
                loop.run(self.run_once)
            except RefreshError:
                raise
            except CredHelperError as error:
                raise CredHelperError(f"failed to set credential: {error}") from error


class SetNetrcCommand(SetCommand):
    """Set the credential in a .netrc file.

    All Artifact Registry entries are removed before the requested hosts are
    added, unless ``append`` is set. ``refresh_only`` rewrites the token of
    existing entries and adds nothing.
    """

    name = "set-netrc"

    def __init__(
        self,
        options: CommonOptions,
        credentials: CredentialSource | None = None,
        netrc_path: str | None = None,
        append: bool = False,
        refresh_only: bool = False,
    ):
        super().__init__(options, credentials)
        self.netrc_path = netrc_path
        self.append = append
        self.refresh_only = refresh_only

    def validate(self) -> None:
        options_error = None
        try:
            if self.refresh_only:
                self.options.validate_without_urls()
            else:
                self.options.validate()
        except ValidationError as error:
            options_error = error

        merr = ValidationError.collect(
            options_error,
            "--refresh cannot be combined with --append"
            if self.refresh_only and self.append
            else None,
            "--refresh only applies to access tokens, not --json-key"
            if self.refresh_only and self.options.json_key_path
            else None,
            # Every tick would add another block per host
            "--append cannot be combined with --background-refresh-interval"
            if self.append and self.options.background_refresh_interval > 0
            else None,
        )
        if merr:
            raise merr

    def open_config(self) -> NetRC:
        return NetRC.open(self.netrc_path)

    def config_keys(self) -> list[str]:
        return self.options.repo_hosts()

    def update(self, config: AuthConfig, credential: Credential) -> None:
        if self.refresh_only:
            config.refresh(credential.value)
        elif credential.is_token:
            config.set_token(self.config_keys(), credential.value, append=self.append)
        else:
            config.set_json_key(self.config_keys(), credential.value, append=self.append)


class SetMavenCommand(SetCommand):
    """Set the credential in a Maven settings.xml file."""

    name = "set-maven"

    def __init__(
        self,
        options: CommonOptions,
        credentials: CredentialSource | None = None,
        maven_settings_path: str | None = None,
        repo_ids_override: list[str] | None = None,
    ):
        super().__init__(options, credentials)
        self.maven_settings_path = maven_settings_path
        self.repo_ids_override = repo_ids_override or []

    def validate(self) -> None:
        if self.repo_ids_override:
            self.options.validate_without_urls()
        else:
            self.options.validate()

    def open_config(self) -> MavenSettings:
        return MavenSettings.open(self.maven_settings_path)

    def config_keys(self) -> list[str]:
        if self.repo_ids_override:
            return list(self.repo_ids_override)
        return [default_repo_id(url) for url in self.options.parsed_urls()]


class SetAptCommand(SetCommand):
    """Set the credential in an APT auth config. Needs root (``sudo -E``)."""

    name = "set-apt"

    def __init__(
        self,
        options: CommonOptions,
        credentials: CredentialSource | None = None,
        config_name: str = DEFAULT_APT_AUTH_CONFIG,
        config_dir: str = APT_AUTH_CONFIG_DIR,
    ):
        super().__init__(options, credentials)
        self.config_name = config_name
        self.config_dir = config_dir

    def open_config(self) -> AptAuthConfig:
        return AptAuthConfig.open(self.config_name, self.config_dir)

    def config_keys(self) -> list[str]:
        return self.options.repo_hosts()


class SetNpmCommand(SetCommand):
    """Set the credential in an .npmrc file."""

    name = "set-npm"

    def __init__(
        self,
        options: CommonOptions,
        credentials: CredentialSource | None = None,
        npmrc_path: str | None = None,
        scope: str = "",
    ):
        super().__init__(options, credentials)
        self.npmrc_path = npmrc_path
        self.scope = scope

    def open_config(self) -> NpmRC:
        return NpmRC.open(self.npmrc_path, self.scope)

    def config_keys(self) -> list[str]:
        return [url.url for url in self.options.parsed_urls()]
