# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for the npmrc updater."""

from __future__ import annotations

import base64

from arcredhelper.auth import Credential
from arcredhelper.configs.npmrc import NpmRC, encode_auth, normalize_repo_url


def expected_lines(repo: str, user: str, secret: str, registry_key: str = "registry"):
    url = normalize_repo_url(repo)
    registry = url.removeprefix("https:")
    encoded = base64.b64encode(f"{user}:{secret}".encode()).decode()
    return [
        f"{registry_key}={url}",
        f"{registry}:always-auth=true",
        f"{registry}:email=not.valid@email.com",
        f"{registry}:_authToken={encoded}",
    ]


class TestNormalizeRepoURL:
    """Test registry URL normalization."""

    def test_adds_scheme_and_slash(self):
        assert (
            normalize_repo_url("us-npm.pkg.dev/p/r") == "https://us-npm.pkg.dev/p/r/"
        )

    def test_keeps_normalized(self):
        assert (
            normalize_repo_url("https://us-npm.pkg.dev/p/r/")
            == "https://us-npm.pkg.dev/p/r/"
        )


class TestOpen:
    """Test loading .npmrc files."""

    def test_open_non_existing_file(self, tmp_path):
        """Test a missing file opens with no content."""
        config = NpmRC.open(tmp_path / "nonexistent.npmrc")

        assert config.lines == []
        assert config.content == ""

    def test_scope_at_sign_is_optional(self, tmp_path):
        """Test '@my-scope' and 'my-scope' produce the same registry key."""
        assert NpmRC.open(tmp_path / "a", "@my-scope").registry_key == "@my-scope:registry"
        assert NpmRC.open(tmp_path / "b", "my-scope").registry_key == "@my-scope:registry"
        assert NpmRC.open(tmp_path / "c").registry_key == "registry"


class TestUpdate:
    """Test setting credentials in .npmrc content."""

    def test_set_token_empty_file(self, tmp_path):
        """Test an empty file gets exactly four lines."""
        path = tmp_path / "test.npmrc"
        path.write_text("")
        config = NpmRC.open(path)

        config.set_token(["us-npm.pkg.dev/p/r"], "t")

        assert config.lines == expected_lines("us-npm.pkg.dev/p/r", "oauth2accesstoken", "t")
        assert config.lines[3] == "//us-npm.pkg.dev/p/r/:_authToken=" + base64.b64encode(
            b"oauth2accesstoken:t"
        ).decode()

    def test_set_json_key_with_scope_keeps_other_registry(self, tmp_path):
        """Test a scoped registry is added beside an existing default one."""
        path = tmp_path / "test_json.npmrc"
        path.write_text("registry=https://us-npm.pkg.dev/my-project/repo0/\n")
        config = NpmRC.open(path, "myscope")

        config.set_json_key(["us-npm.pkg.dev/my-project/repo1"], "base64jsonkey")

        assert config.lines == [
            "registry=https://us-npm.pkg.dev/my-project/repo0/",
            *expected_lines(
                "us-npm.pkg.dev/my-project/repo1",
                "_json_key_base64",
                "base64jsonkey",
                registry_key="@myscope:registry",
            ),
        ]

    def test_existing_lines_rewritten_in_place(self, tmp_path):
        """Test always-auth and _authToken are forced, email and registry kept."""
        path = tmp_path / ".npmrc"
        path.write_text(
            "# my settings\n"
            "\n"
            "registry=https://us-npm.pkg.dev/p/r/\n"
            "//us-npm.pkg.dev/p/r/:always-auth=false\n"
            "//us-npm.pkg.dev/p/r/:email=me@example.com\n"
            "//us-npm.pkg.dev/p/r/:_authToken=stale\n"
            "save-exact=true\n"
        )
        config = NpmRC.open(path)

        config.set_token(["us-npm.pkg.dev/p/r"], "fresh")

        assert config.lines == [
            "# my settings",
            "",
            "registry=https://us-npm.pkg.dev/p/r/",
            "//us-npm.pkg.dev/p/r/:always-auth=true",
            "//us-npm.pkg.dev/p/r/:email=me@example.com",
            "//us-npm.pkg.dev/p/r/:_authToken=" + encode_auth("oauth2accesstoken", "fresh"),
            "save-exact=true",
        ]

    def test_missing_lines_appended_in_order(self, tmp_path):
        """Test only the missing lines are appended."""
        path = tmp_path / ".npmrc"
        path.write_text("//us-npm.pkg.dev/p/r/:email=me@example.com\n")
        config = NpmRC.open(path)

        config.set_token(["us-npm.pkg.dev/p/r"], "t")

        assert config.lines == [
            "//us-npm.pkg.dev/p/r/:email=me@example.com",
            "registry=https://us-npm.pkg.dev/p/r/",
            "//us-npm.pkg.dev/p/r/:always-auth=true",
            "//us-npm.pkg.dev/p/r/:_authToken=" + encode_auth("oauth2accesstoken", "t"),
        ]

    def test_lines_without_equals_are_kept(self, tmp_path):
        """Test malformed lines pass through."""
        path = tmp_path / ".npmrc"
        path.write_text("not a key value\n")
        config = NpmRC.open(path)

        config.set_token(["us-npm.pkg.dev/p/r"], "t")

        assert config.lines[0] == "not a key value"
        assert len(config.lines) == 5

    def test_multiple_repos(self, tmp_path):
        """Test each repository gets its four lines."""
        config = NpmRC.open(tmp_path / ".npmrc")
        repos = ["us-npm.pkg.dev/p/r1", "eu-npm.pkg.dev/p/r2"]

        config.set_token(repos, "t")

        assert config.lines == expected_lines(
            repos[0], "oauth2accesstoken", "t"
        ) + expected_lines(repos[1], "oauth2accesstoken", "t")

    def test_reapplication_is_byte_identical(self, tmp_path):
        """Test a second identical update writes the same bytes."""
        path = tmp_path / ".npmrc"
        config = NpmRC.open(path)
        config.set_token(["us-npm.pkg.dev/p/r"], "t")
        config.close()
        first = path.read_bytes()

        config = NpmRC.open(path)
        config.set_token(["us-npm.pkg.dev/p/r"], "t")
        config.close()

        assert path.read_bytes() == first

    def test_new_secret_replaces_token(self, tmp_path):
        """Test a new token replaces the old _authToken without new lines."""
        config = NpmRC.open(tmp_path / ".npmrc")
        config.set_token(["us-npm.pkg.dev/p/r"], "old")
        config.set_token(["us-npm.pkg.dev/p/r"], "new")

        assert config.lines == expected_lines("us-npm.pkg.dev/p/r", "oauth2accesstoken", "new")


class TestClose:
    """Test persisting .npmrc files."""

    def test_close_writes_file(self, tmp_path):
        """Test close writes the lines with a trailing newline."""
        path = tmp_path / "nested" / "close_test.npmrc"
        config = NpmRC.open(path)
        config.set_token(["us-npm.pkg.dev/my-project/repo2"], "closetesttoken")
        config.close()

        assert path.read_text() == "\n".join(
            expected_lines(
                "us-npm.pkg.dev/my-project/repo2", "oauth2accesstoken", "closetesttoken"
            )
        ) + "\n"


class TestApply:
    """Test the login derived from the credential kind."""

    def test_apply_json_key(self, tmp_path):
        config = NpmRC.open(tmp_path / ".npmrc")

        config.apply(["us-npm.pkg.dev/p/r"], Credential.json_key("key"))

        assert config.lines == expected_lines("us-npm.pkg.dev/p/r", "_json_key_base64", "key")

    def test_apply_token(self, tmp_path):
        config = NpmRC.open(tmp_path / ".npmrc")

        config.apply(["us-npm.pkg.dev/p/r"], Credential.token("tok"))

        assert config.lines == expected_lines("us-npm.pkg.dev/p/r", "oauth2accesstoken", "tok")
