#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Obtain Artifact Registry credentials.

Access tokens come from Application Default Credentials, falling back to the
account logged into ``gcloud``. Service account JSON keys are passed to the
registry base64 encoded, under the ``_json_key_base64`` user.
"""

from __future__ import annotations

import os
import base64
import subprocess
from typing import TYPE_CHECKING, Callable
from dataclasses import field, dataclass

import google.auth
import google.auth.exceptions
from google.auth.transport.requests import Request

from arcredhelper.logger import LOG
from arcredhelper.settings import GCLOUD_TIMEOUT
from arcredhelper.sanitizer import register_sensitive_value
from arcredhelper.exceptions import CredentialError


if TYPE_CHECKING:
    from arcredhelper.options import CommonOptions


CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

TOKEN_USERNAME = "oauth2accesstoken"
JSON_KEY_USERNAME = "_json_key_base64"


@dataclass(frozen=True)
class Credential:
    """Either an OAuth access token or a base64 encoded service account key."""

    kind: str
    value: str = field(repr=False)

    TOKEN = "token"
    JSON_KEY = "json_key"

    @classmethod
    def token(cls, value: str) -> Credential:
        return cls(kind=cls.TOKEN, value=value)

    @classmethod
    def json_key(cls, value: str) -> Credential:
        return cls(kind=cls.JSON_KEY, value=value)

    @property
    def is_token(self) -> bool:
        return self.kind == self.TOKEN

    @property
    def username(self) -> str:
        """The login the registry expects alongside this secret."""
        return TOKEN_USERNAME if self.is_token else JSON_KEY_USERNAME


def application_default_token() -> str:
    """Return an access token from Application Default Credentials."""
    try:
        credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        credentials.refresh(Request())
    except google.auth.exceptions.GoogleAuthError as error:
        raise CredentialError(f"ApplicationDefault: {error}") from error

    if not credentials.token:
        raise CredentialError("ApplicationDefault: no access token returned")
    LOG.debug("Obtained access token from Application Default Credentials")
    return credentials.token


def _gcloud_binary() -> str:
    return "gcloud.cmd" if os.name == "nt" else "gcloud"


def gcloud_token(timeout: float = GCLOUD_TIMEOUT) -> str:
    """Return the access token of the account logged into gcloud."""
    command = [_gcloud_binary(), "auth", "print-access-token"]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as error:
        raise CredentialError(f"gcloud: command not found: {error}") from error
    except subprocess.TimeoutExpired as error:
        raise CredentialError(f"gcloud: timed out after {timeout:g}s") from error

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise CredentialError(
            f"gcloud: exited with code {result.returncode}"
            + (f": {stderr}" if stderr else "")
        )

    token = result.stdout.strip()
    if not token:
        raise CredentialError("gcloud: returned empty output")
    LOG.debug("Obtained access token from gcloud")
    return token


def get_token() -> str:
    """Return an access token, trying ADC first and gcloud second."""
    try:
        token = application_default_token()
    except CredentialError as adc_error:
        LOG.info("Application Default Credentials unavailable, trying gcloud")
        try:
            token = gcloud_token()
        except CredentialError as gcloud_error:
            raise CredentialError(
                f"failed to find Application Default Credentials: {adc_error} "
                f"and gcloud credentials: {gcloud_error}"
            ) from gcloud_error
    register_sensitive_value(token)
    return token


def encode_json_key(key_path: str) -> str:
    """Return the base64 encoding of a service account JSON key file."""
    try:
        with open(key_path, "rb") as key_file:
            data = key_file.read()
    except OSError as error:
        raise CredentialError(
            f'EncodeJSONKey: cannot read "{key_path}": {error}'
        ) from error

    encoded = base64.b64encode(data).decode("ascii")
    register_sensitive_value(encoded)
    return encoded


def token_from_env(env_name: str) -> str:
    """Return a pre-obtained access token from the named environment variable."""
    token = os.environ.get(env_name, "")
    if not token:
        raise CredentialError(f'failed to get access token from env var "{env_name}"')
    register_sensitive_value(token)
    return token


TokenGetter = Callable[[], str]
JSONKeyEncoder = Callable[[str], str]


@dataclass
class CredentialSource:
    """The credential acquisition functions a command depends on.

    Commands receive one at construction so tests can hand in stubs.
    """

    get_token: TokenGetter = get_token
    encode_json_key: JSONKeyEncoder = encode_json_key

    def access_token(self) -> str:
        try:
            return self.get_token()
        except CredentialError:
            raise
        except Exception as error:
            raise CredentialError(str(error)) from error

    def resolve(self, options: CommonOptions) -> Credential:
        """Pick the credential the flags ask for: JSON key, env token, or ambient."""
        if options.json_key_path:
            try:
                key = self.encode_json_key(options.json_key_path)
            except CredentialError as error:
                raise CredentialError(f"failed to encode JSON key: {error}") from error
            register_sensitive_value(key)
            return Credential.json_key(key)

        if options.access_token_from_env:
            return Credential.token(token_from_env(options.access_token_from_env))

        try:
            token = self.access_token()
        except CredentialError as error:
            raise CredentialError(f"failed to get access token: {error}") from error
        register_sensitive_value(token)
        return Credential.token(token)
