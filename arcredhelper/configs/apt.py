#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""APT auth config (``/etc/apt/auth.conf.d``), which uses the netrc format.

All Artifact Registry entries live in a single file, and every update
replaces them.
"""

from __future__ import annotations

from pathlib import Path

from arcredhelper.settings import APT_AUTH_CONFIG_DIR, DEFAULT_APT_AUTH_CONFIG
from arcredhelper.exceptions import ConfigFileError
from arcredhelper.configs.base import AuthConfig
from arcredhelper.configs.netrc import NetRC


class AptAuthConfig(AuthConfig):
    def __init__(self, config: NetRC):
        super().__init__(config.path)
        self.config = config

    @classmethod
    def open(
        cls,
        config_name: str | None = None,
        config_dir: str | Path = APT_AUTH_CONFIG_DIR,
    ) -> AptAuthConfig:
        config_path = Path(config_dir) / (config_name or DEFAULT_APT_AUTH_CONFIG)
        try:
            config = NetRC.from_file(config_path)
        except ConfigFileError as error:
            raise ConfigFileError(
                f'failed to open apt auth config file (as netrc) at "{config_path}": '
                f"{error}",
                str(config_path),
            ) from error
        return cls(config)

    @property
    def content(self) -> str:
        return self.config.content

    def set_token(self, keys: list[str], token: str) -> None:
        self.config.set_token(keys, token, append=False)

    def set_json_key(self, keys: list[str], base64_key: str) -> None:
        self.config.set_json_key(keys, base64_key, append=False)

    def close(self) -> None:
        self.config.close()
