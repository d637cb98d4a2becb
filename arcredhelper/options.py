#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Repository URL parsing and the flags shared by every ``set-*`` command."""

from __future__ import annotations

import re
from urllib.parse import urlsplit
from dataclasses import field, dataclass

from arcredhelper.logger import LOG
from arcredhelper.settings import MIN_BACKGROUND_REFRESH_INTERVAL
from arcredhelper.exceptions import ValidationError


REGISTRY_DOMAIN = ".pkg.dev"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


@dataclass(frozen=True)
class RepoURL:
    """A parsed ``<region>.pkg.dev/<project>/<repo>`` repository reference."""

    host: str
    project: str
    repo: str

    @property
    def path(self) -> str:
        return f"/{self.project}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.path}"

    def __str__(self) -> str:
        return self.url


def _with_scheme(value: str) -> str:
    if not value.startswith("https://"):
        return "https://" + value
    return value


def parse_repo_url(value: str) -> RepoURL:
    """Parse a single repository URL, raising ValidationError if malformed."""
    raw = _with_scheme(value.strip())
    try:
        parts = urlsplit(raw)
        host = parts.hostname or ""
        if parts.port is not None:
            host = f"{host}:{parts.port}"
    except ValueError as error:
        raise ValidationError(f'failed to parse host "{raw}": {error}') from error

    segments = parts.path.strip("/").split("/")
    if (
        not host.endswith(REGISTRY_DOMAIN)
        or len(segments) != 2
        or not all(segments)
    ):
        raise ValidationError(
            f"repo URL \"{raw}\" not in format '*.pkg.dev/[project]/[repo]'"
        )
    return RepoURL(host=host, project=segments[0], repo=segments[1])


def parse_repo_urls(values: list[str]) -> list[RepoURL]:
    """Parse every repository URL, reporting all malformed ones together."""
    parsed: list[RepoURL] = []
    errors: list[str] = []
    for value in values:
        try:
            parsed.append(parse_repo_url(value))
        except ValidationError as error:
            errors.extend(error.errors)
    if errors:
        raise ValidationError(errors)
    return parsed


def unique_hosts(urls: list[RepoURL]) -> list[str]:
    """Hosts of ``urls`` without duplicates, in first-seen order."""
    return list(dict.fromkeys(url.host for url in urls))


def validate_hosts(hosts: list[str]) -> None:
    """Check bare hosts (no path) as accepted by the ``get`` command."""
    if not hosts:
        raise ValidationError("no host specified")

    errors = [
        f"host \"{host}\" doesn't have domain '.pkg.dev'"
        for host in hosts
        if not host.endswith(REGISTRY_DOMAIN)
    ]
    if errors:
        raise ValidationError(errors)


def parse_duration(value: str | float | int | None) -> float:
    """Parse ``5m``, ``12h``, ``1h30m``, ``90s`` or plain seconds into seconds."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip().lower()
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position == 0 or position != len(text):
        raise ValidationError(f'invalid duration "{value}"')
    return total


def split_list(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma separated flag values."""
    result: list[str] = []
    for value in values or []:
        result.extend(item.strip() for item in value.split(",") if item.strip())
    return result


@dataclass
class CommonOptions:
    """Flags shared by the ``set-*`` commands."""

    repo_urls: list[str] = field(default_factory=list)
    access_token_from_env: str = ""
    json_key_path: str = ""
    background_refresh_interval: float = 0.0
    background_refresh_duration: float = 12 * 3600.0

    _parsed_urls: list[RepoURL] | None = field(default=None, init=False, repr=False)

    def validate(self) -> None:
        """Validate every shared flag, repository URLs included."""
        url_error = None
        try:
            self.parsed_urls()
        except ValidationError as error:
            url_error = error

        merr = ValidationError.collect(
            self._without_urls_error(),
            None if self.repo_urls else "no host specified",
            url_error,
        )
        if merr:
            raise merr
        LOG.debug("Validated %d repository URLs", len(self.repo_urls))

    def validate_without_urls(self) -> None:
        """Validate the shared flags that do not involve repository URLs."""
        merr = self._without_urls_error()
        if merr:
            raise merr

    def _without_urls_error(self) -> ValidationError | None:
        errors: list[str] = []
        interval = self.background_refresh_interval
        if 0 < interval < MIN_BACKGROUND_REFRESH_INTERVAL:
            errors.append("background refresh interval must be at least 2 minutes")
        if interval < 0:
            errors.append("background refresh interval must not be negative")
        if self.background_refresh_duration < 0:
            errors.append("background refresh duration must not be negative")
        if self.json_key_path and self.access_token_from_env:
            errors.append("only one of --json-key or --access-token-from-env can be set")
        return ValidationError.collect(*errors)

    def to_dict(self) -> dict:
        return {
            "repo_urls": list(self.repo_urls),
            "access_token_from_env": self.access_token_from_env,
            "json_key": self.json_key_path,
            "background_refresh_interval": self.background_refresh_interval,
            "background_refresh_duration": self.background_refresh_duration,
        }

    def parsed_urls(self) -> list[RepoURL]:
        if self._parsed_urls is None:
            self._parsed_urls = parse_repo_urls(self.repo_urls)
        return self._parsed_urls

    def repo_hosts(self) -> list[str]:
        return unique_hosts(self.parsed_urls())
