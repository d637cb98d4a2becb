#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""
Artifact Registry credential helper environment variables

This module centralizes all environment variable definitions so that every
command flag and its environment override share a single name.
"""

from __future__ import annotations

import os


NAMESPACE = "AR_CRED_HELPER_"

# Flag overrides
HOSTS_ENV = f"{NAMESPACE}HOSTS"
ACCESS_TOKEN_FROM_ENV_ENV = f"{NAMESPACE}ACCESS_TOKEN_FROM_ENV"
JSON_KEY_ENV = f"{NAMESPACE}JSON_KEY"
BACKGROUND_REFRESH_INTERVAL_ENV = f"{NAMESPACE}BACKGROUND_REFRESH_INTERVAL"
BACKGROUND_REFRESH_DURATION_ENV = f"{NAMESPACE}BACKGROUND_REFRESH_DURATION"
NETRC_ENV = f"{NAMESPACE}NETRC"
MAVEN_SETTINGS_ENV = f"{NAMESPACE}MAVEN_SETTINGS"
MAVEN_REPO_IDS_OVERRIDE_ENV = f"{NAMESPACE}MAVEN_REPO_IDS_OVERRIDE"
APT_AUTH_CONFIG_ENV = f"{NAMESPACE}APT_AUTH_CONFIG"
NPMRC_ENV = f"{NAMESPACE}NPMRC"
SCOPE_ENV = f"{NAMESPACE}SCOPE"

DEFAULT_BACKGROUND_REFRESH_DURATION = "12h"
MIN_BACKGROUND_REFRESH_INTERVAL = 120.0

APT_AUTH_CONFIG_DIR = "/etc/apt/auth.conf.d"
DEFAULT_APT_AUTH_CONFIG = "artifact-registry.conf"


def env_value(name: str, default: str | None = None) -> str | None:
    """Return the environment value for ``name`` or ``default`` when unset/empty."""
    value = os.environ.get(name, "").strip()
    return value or default


def env_list(name: str) -> list[str]:
    """Split a comma separated environment value into a list."""
    value = env_value(name)
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _validate_log_level(log_level: str):
    """Validate log level, accepting case-insensitive values with fallback."""
    valid_levels = {"debug", "info", "warning", "error", "critical"}
    normalized_level = log_level.lower().strip()
    return normalized_level if normalized_level in valid_levels else "warning"


def get_log_level(namespace: str) -> str:
    """Get log level from environment with validation and fallback."""
    raw_level = os.environ.get(f"{namespace}LOG_LEVEL", "warning")
    return _validate_log_level(raw_level)


def get_gcloud_timeout(namespace: str) -> float:
    """Get the gcloud subprocess timeout (seconds) from environment."""
    raw_value = os.environ.get(f"{namespace}GCLOUD_TIMEOUT", "").strip()
    try:
        timeout = float(raw_value)
    except ValueError:
        return 30.0
    return timeout if timeout > 0 else 30.0


# Logging
LOG_LEVEL: str = get_log_level(NAMESPACE)

# Credential acquisition
GCLOUD_TIMEOUT: float = get_gcloud_timeout(NAMESPACE)
