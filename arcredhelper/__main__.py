#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Entry point for ``python -m arcredhelper``.

Usage:
    python -m arcredhelper set-netrc --repo-urls us-go.pkg.dev/my-project/repo

This is equivalent to:
    artifact-registry-cred-helper set-netrc --repo-urls us-go.pkg.dev/my-project/repo
"""

import sys

from arcredhelper.cli import main


if __name__ == "__main__":
    sys.exit(main())
