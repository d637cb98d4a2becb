# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for environment settings."""

from __future__ import annotations

import pytest

from arcredhelper.settings import (
    NAMESPACE,
    HOSTS_ENV,
    env_list,
    env_value,
    get_log_level,
    get_gcloud_timeout,
    _validate_log_level,
)


class TestLogLevel:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("DEBUG", "debug"),
            (" Info ", "info"),
            ("error", "error"),
            ("verbose", "warning"),
            ("", "warning"),
        ],
    )
    def test_validate_log_level(self, raw, expected):
        assert _validate_log_level(raw) == expected

    def test_get_log_level(self, monkeypatch):
        monkeypatch.setenv(f"{NAMESPACE}LOG_LEVEL", "ERROR")

        assert get_log_level(NAMESPACE) == "error"

    def test_get_log_level_default(self, monkeypatch):
        monkeypatch.delenv(f"{NAMESPACE}LOG_LEVEL", raising=False)

        assert get_log_level(NAMESPACE) == "warning"


class TestEnvValues:
    def test_env_value(self, monkeypatch):
        monkeypatch.setenv(HOSTS_ENV, "  us-go.pkg.dev/p/r ")

        assert env_value(HOSTS_ENV) == "us-go.pkg.dev/p/r"

    def test_env_value_default(self):
        assert env_value(HOSTS_ENV, "fallback") == "fallback"

    def test_empty_env_value_uses_default(self, monkeypatch):
        monkeypatch.setenv(HOSTS_ENV, "   ")

        assert env_value(HOSTS_ENV, "fallback") == "fallback"

    def test_env_list(self, monkeypatch):
        monkeypatch.setenv(HOSTS_ENV, "a, b,,c")

        assert env_list(HOSTS_ENV) == ["a", "b", "c"]

    def test_env_list_unset(self):
        assert env_list(HOSTS_ENV) == []


class TestGcloudTimeout:
    @pytest.mark.parametrize(
        "raw, expected",
        [("10", 10.0), ("2.5", 2.5), ("", 30.0), ("abc", 30.0), ("-1", 30.0)],
    )
    def test_get_gcloud_timeout(self, monkeypatch, raw, expected):
        monkeypatch.setenv(f"{NAMESPACE}GCLOUD_TIMEOUT", raw)

        assert get_gcloud_timeout(NAMESPACE) == expected
