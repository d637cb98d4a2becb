#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

import pytest

from arcredhelper.sanitizer import clear_sensitive_values
from arcredhelper.logger import clear_command_context


@pytest.fixture(autouse=True)
def _reset_process_state(monkeypatch):
    """Keep env overrides and global registries from leaking between tests."""
    for name in (
        "AR_CRED_HELPER_HOSTS",
        "AR_CRED_HELPER_ACCESS_TOKEN_FROM_ENV",
        "AR_CRED_HELPER_JSON_KEY",
        "AR_CRED_HELPER_BACKGROUND_REFRESH_INTERVAL",
        "AR_CRED_HELPER_BACKGROUND_REFRESH_DURATION",
        "AR_CRED_HELPER_NETRC",
        "AR_CRED_HELPER_MAVEN_SETTINGS",
        "AR_CRED_HELPER_MAVEN_REPO_IDS_OVERRIDE",
        "AR_CRED_HELPER_APT_AUTH_CONFIG",
        "AR_CRED_HELPER_NPMRC",
        "AR_CRED_HELPER_SCOPE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    clear_sensitive_values()
    clear_command_context()
