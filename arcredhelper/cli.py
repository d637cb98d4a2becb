#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Command-line interface for the Artifact Registry credential helper."""

from __future__ import annotations

import argparse
from typing import IO

from arcredhelper import __version__
from arcredhelper import settings
from arcredhelper.auth import CredentialSource
from arcredhelper.logger import LOG, set_log_level, clear_command_context
from arcredhelper.options import CommonOptions, split_list, parse_duration
from arcredhelper.commands import (
    GetCommand,
    SetAptCommand,
    SetNpmCommand,
    SetMavenCommand,
    SetNetrcCommand,
)
from arcredhelper.exceptions import CredHelperError


PROG = "artifact-registry-cred-helper"


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("common options")
    _ = group.add_argument(
        "--repo-urls",
        action="append",
        metavar="URLS",
        help=(
            "REQUIRED. Comma separated repositories to set the credential for, "
            "in format '*.pkg.dev/[project]/[repo]' "
            f"(env: {settings.HOSTS_ENV})"
        ),
    )
    _ = group.add_argument(
        "--access-token-from-env",
        default=settings.env_value(settings.ACCESS_TOKEN_FROM_ENV_ENV, ""),
        metavar="ENV_VAR",
        help=(
            "Name of the env var holding an access token produced by another "
            f"process (env: {settings.ACCESS_TOKEN_FROM_ENV_ENV})"
        ),
    )
    _ = group.add_argument(
        "--json-key",
        default=settings.env_value(settings.JSON_KEY_ENV, ""),
        metavar="PATH",
        help=(
            "Path to a service account JSON key; authenticate with the key "
            f"instead of an access token (env: {settings.JSON_KEY_ENV})"
        ),
    )
    _ = group.add_argument(
        "--background-refresh-interval",
        default=settings.env_value(settings.BACKGROUND_REFRESH_INTERVAL_ENV, ""),
        metavar="DURATION",
        help=(
            "Keep running and refresh the credential at this interval, "
            "e.g. 5m. Minimum 2m "
            f"(env: {settings.BACKGROUND_REFRESH_INTERVAL_ENV})"
        ),
    )
    _ = group.add_argument(
        "--background-refresh-duration",
        default=settings.env_value(
            settings.BACKGROUND_REFRESH_DURATION_ENV,
            settings.DEFAULT_BACKGROUND_REFRESH_DURATION,
        ),
        metavar="DURATION",
        help=(
            "How long the background refresh runs before exiting "
            f"(default: {settings.DEFAULT_BACKGROUND_REFRESH_DURATION}, "
            f"env: {settings.BACKGROUND_REFRESH_DURATION_ENV})"
        ),
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Issue Artifact Registry credentials and write them into package "
            "manager config files"
        ),
    )

    _ = parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Set logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    get_parser = subparsers.add_parser(
        "get",
        help="Get the credential for the given host",
        description=(
            "Print a credential helper response for the given host(s). Hosts "
            'come from --hosts, or from a {"uri": "..."} JSON request on stdin.'
        ),
    )
    _ = get_parser.add_argument(
        "--hosts",
        action="append",
        metavar="HOSTS",
        help=(
            "Comma separated hosts to get the credential for, with domain "
            f"'*.pkg.dev' (env: {settings.HOSTS_ENV})"
        ),
    )

    netrc_parser = subparsers.add_parser(
        "set-netrc",
        help="Set the credential in the .netrc file for the given repos",
        description=(
            "Set the credential in the .netrc file. All Artifact Registry "
            "credentials are removed before the new hosts are added."
        ),
    )
    _add_common_options(netrc_parser)
    netrc_group = netrc_parser.add_argument_group("netrc options")
    _ = netrc_group.add_argument(
        "--netrc",
        default=settings.env_value(settings.NETRC_ENV),
        metavar="PATH",
        help=f"Path to the .netrc file (default: ~/.netrc, env: {settings.NETRC_ENV})",
    )
    _ = netrc_group.add_argument(
        "--append",
        action="store_true",
        help=(
            "Append entries without removing existing ones; may duplicate hosts. "
            "Not allowed with --background-refresh-interval"
        ),
    )
    _ = netrc_group.add_argument(
        "--refresh",
        action="store_true",
        help="Only replace the token of existing access token entries",
    )

    maven_parser = subparsers.add_parser(
        "set-maven",
        help="Set the credential in the Maven settings.xml file for the given repos",
    )
    _add_common_options(maven_parser)
    maven_group = maven_parser.add_argument_group("maven options")
    _ = maven_group.add_argument(
        "--maven-settings",
        default=settings.env_value(settings.MAVEN_SETTINGS_ENV),
        metavar="PATH",
        help=(
            "Path to the Maven settings.xml file "
            f"(default: ~/.m2/settings.xml, env: {settings.MAVEN_SETTINGS_ENV})"
        ),
    )
    _ = maven_group.add_argument(
        "--repo-ids-override",
        action="append",
        metavar="IDS",
        help=(
            "Comma separated repo IDs used in pom.xml, instead of the default "
            f"artifactregistry-<project>-<repo> (env: {settings.MAVEN_REPO_IDS_OVERRIDE_ENV})"
        ),
    )

    apt_parser = subparsers.add_parser(
        "set-apt",
        help="Set the credential in /etc/apt/auth.conf.d for the given repos",
        description=(
            "Set the credential in /etc/apt/auth.conf.d. Must run as root "
            "('sudo -E'). All Artifact Registry credentials are removed from "
            "the auth config before the new hosts are added."
        ),
    )
    _add_common_options(apt_parser)
    apt_group = apt_parser.add_argument_group("apt options")
    _ = apt_group.add_argument(
        "--config-name",
        default=settings.env_value(
            settings.APT_AUTH_CONFIG_ENV, settings.DEFAULT_APT_AUTH_CONFIG
        ),
        metavar="NAME",
        help=(
            "Name of the config file under /etc/apt/auth.conf.d "
            f"(default: {settings.DEFAULT_APT_AUTH_CONFIG}, "
            f"env: {settings.APT_AUTH_CONFIG_ENV})"
        ),
    )

    npm_parser = subparsers.add_parser(
        "set-npm",
        help="Set the credential in the .npmrc file for the given repos",
    )
    _add_common_options(npm_parser)
    npm_group = npm_parser.add_argument_group("npmrc options")
    _ = npm_group.add_argument(
        "--npmrc",
        default=settings.env_value(settings.NPMRC_ENV),
        metavar="PATH",
        help=f"Path to the .npmrc file (default: ~/.npmrc, env: {settings.NPMRC_ENV})",
    )
    _ = npm_group.add_argument(
        "--scope",
        default=settings.env_value(settings.SCOPE_ENV, ""),
        help=f"npm scope for the given repos, e.g. @my-scope (env: {settings.SCOPE_ENV})",
    )

    return parser


def _list_option(values: list[str] | None, env_name: str) -> list[str]:
    """Flag values win over the environment variable."""
    return split_list(values) or settings.env_list(env_name)


def build_common_options(args: argparse.Namespace) -> CommonOptions:
    return CommonOptions(
        repo_urls=_list_option(args.repo_urls, settings.HOSTS_ENV),
        access_token_from_env=args.access_token_from_env or "",
        json_key_path=args.json_key or "",
        background_refresh_interval=parse_duration(args.background_refresh_interval),
        background_refresh_duration=parse_duration(args.background_refresh_duration),
    )


def build_command(
    args: argparse.Namespace,
    credentials: CredentialSource | None = None,
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
):
    """Create the command object selected by ``args.command``."""
    credentials = credentials or CredentialSource()

    if args.command == "get":
        return GetCommand(
            credentials,
            hosts=_list_option(args.hosts, settings.HOSTS_ENV),
            stdin=stdin,
            stdout=stdout,
        )

    options = build_common_options(args)
    if args.command == "set-netrc":
        return SetNetrcCommand(
            options,
            credentials,
            netrc_path=args.netrc,
            append=args.append,
            refresh_only=args.refresh,
        )
    if args.command == "set-maven":
        return SetMavenCommand(
            options,
            credentials,
            maven_settings_path=args.maven_settings,
            repo_ids_override=_list_option(
                args.repo_ids_override, settings.MAVEN_REPO_IDS_OVERRIDE_ENV
            ),
        )
    if args.command == "set-apt":
        return SetAptCommand(options, credentials, config_name=args.config_name)
    if args.command == "set-npm":
        return SetNpmCommand(
            options, credentials, npmrc_path=args.npmrc, scope=args.scope
        )
    raise ValueError(f"Unknown command {args.command}")


def main(
    argv: list[str] | None = None,
    credentials: CredentialSource | None = None,
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
) -> int:
    """Main CLI entry point - parse arguments and run the selected command."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        set_log_level(args.log_level)

    try:
        command = build_command(args, credentials, stdin=stdin, stdout=stdout)
        command.run()
    except KeyboardInterrupt:
        LOG.info("Interrupted")
        return 130
    except CredHelperError as error:
        LOG.error("%s", error)
        return 1
    finally:
        clear_command_context()

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
