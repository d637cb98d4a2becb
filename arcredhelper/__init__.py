#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Artifact Registry credential helper for package manager config files."""

from __future__ import annotations


__version__ = "0.1.0"
__license__ = "MPL-2.0"

# Build information (populated at release time)
__git_commit__ = "development"
__build_date__ = "unknown"

try:
    from arcredhelper._build_info import (
        __version__ as _build_version,
        __build_date__ as _build_date,
        __git_commit__ as _git_commit,
    )

    __git_commit__ = _git_commit
    __build_date__ = _build_date
    if _build_version and _build_version != "0.1.0":
        __version__ = _build_version
except ImportError:
    # _build_info.py only exists in release builds
    pass


__all__ = [
    "__version__",
    "__license__",
    "__git_commit__",
    "__build_date__",
]
