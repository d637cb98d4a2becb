# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for repository URL parsing and shared option validation."""

from __future__ import annotations

import pytest

from arcredhelper.options import (
    RepoURL,
    CommonOptions,
    split_list,
    unique_hosts,
    parse_duration,
    parse_repo_url,
    validate_hosts,
    parse_repo_urls,
)
from arcredhelper.exceptions import ValidationError


class TestParseRepoURL:
    """Test parsing <region>.pkg.dev/<project>/<repo> references."""

    def test_without_scheme(self):
        url = parse_repo_url("us-maven.pkg.dev/my-project/my-repo")

        assert url == RepoURL("us-maven.pkg.dev", "my-project", "my-repo")
        assert url.path == "/my-project/my-repo"
        assert url.url == "https://us-maven.pkg.dev/my-project/my-repo"
        assert str(url) == url.url

    def test_with_scheme_and_trailing_slash(self):
        url = parse_repo_url("https://us-npm.pkg.dev/p/r/")

        assert url == RepoURL("us-npm.pkg.dev", "p", "r")

    @pytest.mark.parametrize(
        "value",
        [
            "https://invalid-url",
            "us-maven.pkg.dev/only-project",
            "us-maven.pkg.dev/p/r/extra",
            "example.com/p/r",
            "us-maven.pkg.dev//r",
        ],
    )
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="not in format"):
            parse_repo_url(value)

    def test_invalid_message(self):
        with pytest.raises(ValidationError) as excinfo:
            parse_repo_url("https://invalid-url")

        assert str(excinfo.value) == (
            "repo URL \"https://invalid-url\" not in format '*.pkg.dev/[project]/[repo]'"
        )

    def test_parse_many_reports_all_errors(self):
        with pytest.raises(ValidationError) as excinfo:
            parse_repo_urls(["bad-one", "us-go.pkg.dev/p/r", "bad-two"])

        assert len(excinfo.value.errors) == 2


class TestHosts:
    """Test host helpers."""

    def test_unique_hosts_keeps_order(self):
        urls = parse_repo_urls(
            ["us-go.pkg.dev/p/r1", "eu-go.pkg.dev/p/r", "us-go.pkg.dev/p/r2"]
        )

        assert unique_hosts(urls) == ["us-go.pkg.dev", "eu-go.pkg.dev"]

    def test_validate_hosts(self):
        validate_hosts(["us-go.pkg.dev", "eu-python.pkg.dev"])

    def test_validate_hosts_empty(self):
        with pytest.raises(ValidationError, match="no host specified"):
            validate_hosts([])

    def test_validate_hosts_wrong_domain(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_hosts(["invalid-host"])

        assert str(excinfo.value) == "host \"invalid-host\" doesn't have domain '.pkg.dev'"


class TestParseDuration:
    """Test duration strings."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("5m", 300.0),
            ("12h", 43200.0),
            ("1h30m", 5400.0),
            ("90s", 90.0),
            ("500ms", 0.5),
            ("120", 120.0),
            (45, 45.0),
            ("", 0.0),
            (None, 0.0),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["abc", "5x", "m5", "5m junk"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="invalid duration"):
            parse_duration(value)


class TestSplitList:
    def test_repeated_and_comma_separated(self):
        assert split_list(["a,b", " c ", "d,,"]) == ["a", "b", "c", "d"]

    def test_none(self):
        assert split_list(None) == []


class TestCommonOptions:
    """Test validation of the flags shared by set-* commands."""

    def test_valid(self):
        options = CommonOptions(repo_urls=["us-go.pkg.dev/p/r", "us-go.pkg.dev/p/r2"])

        options.validate()
        assert options.repo_hosts() == ["us-go.pkg.dev"]

    def test_no_repo_urls(self):
        with pytest.raises(ValidationError, match="no host specified"):
            CommonOptions().validate()

    def test_interval_too_short(self):
        options = CommonOptions(
            repo_urls=["us-go.pkg.dev/p/r"], background_refresh_interval=60
        )

        with pytest.raises(ValidationError, match="at least 2 minutes"):
            options.validate()

    def test_interval_minimum_allowed(self):
        CommonOptions(
            repo_urls=["us-go.pkg.dev/p/r"], background_refresh_interval=120
        ).validate()

    def test_json_key_and_env_token_conflict(self):
        options = CommonOptions(
            repo_urls=["us-go.pkg.dev/p/r"],
            json_key_path="/tmp/key.json",
            access_token_from_env="TOKEN",
        )

        with pytest.raises(ValidationError, match="only one of --json-key"):
            options.validate()

    def test_errors_are_aggregated(self):
        options = CommonOptions(
            repo_urls=["bad-url"],
            background_refresh_interval=10,
            json_key_path="/tmp/key.json",
            access_token_from_env="TOKEN",
        )

        with pytest.raises(ValidationError) as excinfo:
            options.validate()

        assert len(excinfo.value.errors) == 3

    def test_validate_without_urls_ignores_urls(self):
        CommonOptions(repo_urls=["bad-url"]).validate_without_urls()

    def test_negative_duration(self):
        with pytest.raises(ValidationError, match="duration must not be negative"):
            CommonOptions(background_refresh_duration=-1).validate_without_urls()
