#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Package manager config files that can carry registry credentials."""

from __future__ import annotations

from arcredhelper.configs.apt import AptAuthConfig
from arcredhelper.configs.base import AuthConfig
from arcredhelper.configs.maven import MavenSettings, default_repo_id
from arcredhelper.configs.netrc import NetRC
from arcredhelper.configs.npmrc import NpmRC


__all__ = [
    "AptAuthConfig",
    "AuthConfig",
    "MavenSettings",
    "NetRC",
    "NpmRC",
    "default_repo_id",
]
