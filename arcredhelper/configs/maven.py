#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Edit the ``<servers>`` section of a Maven ``settings.xml``."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING
from pathlib import Path

from arcredhelper.logger import LOG
from arcredhelper.exceptions import ConfigFileError
from arcredhelper.configs.base import (
    UserPasswordConfig,
    home_dir,
    read_text_file,
    write_text_file,
)


if TYPE_CHECKING:
    from arcredhelper.options import RepoURL


SETTINGS_FILENAME = "settings.xml"
MAVEN_DIR = ".m2"

MAVEN_SETTINGS_NS = "http://maven.apache.org/SETTINGS/1.0.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
MAVEN_SCHEMA_LOCATION = (
    "http://maven.apache.org/SETTINGS/1.0.0 "
    "http://maven.apache.org/xsd/settings-1.0.0.xsd"
)

ET.register_namespace("xsi", XSI_NS)


def default_repo_id(repo_url: RepoURL) -> str:
    """Repo ID used in pom.xml and settings.xml for a repository.

    Given repo URL: us-maven.pkg.dev/my-project/my-repo
    Default repo ID: artifactregistry-my-project-my-repo
    """
    return "artifactregistry" + repo_url.path.replace("/", "-")


def resolve_settings_path(settings_path: str | Path | None = None) -> Path:
    """Default to ``~/.m2/settings.xml``; other paths are directories unless named settings.xml."""
    if not settings_path:
        settings_path = home_dir() / MAVEN_DIR
    path = Path(settings_path).expanduser()
    if not path.name.endswith(SETTINGS_FILENAME):
        path = path / SETTINGS_FILENAME
    return path


def _namespace(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1 : tag.index("}")]
    return ""


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def new_settings_document() -> ET.ElementTree:
    settings = ET.Element(
        f"{{{MAVEN_SETTINGS_NS}}}settings",
        {f"{{{XSI_NS}}}schemaLocation": MAVEN_SCHEMA_LOCATION},
    )
    return ET.ElementTree(settings)


class MavenSettings(UserPasswordConfig):
    """A Maven settings document held as an element tree."""

    def __init__(
        self,
        path: Path | str,
        tree: ET.ElementTree | None = None,
        xml_declaration: bool = False,
    ):
        super().__init__(path)
        self.tree = tree if tree is not None else new_settings_document()
        self.xml_declaration = xml_declaration

        root = self.tree.getroot()
        if _local_name(root.tag) != "settings":
            raise ConfigFileError(
                f'Maven settings.xml at "{self.path}" has root <{_local_name(root.tag)}>, '
                "expected <settings>",
                str(self.path),
            )
        self._ns = _namespace(root.tag)

    @classmethod
    def open(cls, settings_path: str | Path | None = None) -> MavenSettings:
        path = resolve_settings_path(settings_path)
        content = read_text_file(path)
        if content is None:
            LOG.debug("%s does not exist yet, starting a new settings document", path)
            return cls(path)

        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            root = ET.fromstring(content, parser=parser)
        except (ET.ParseError, UnicodeError) as error:
            raise ConfigFileError(
                f'cannot load Maven settings.xml file at "{path}": {error}', str(path)
            ) from error
        return cls(
            path,
            ET.ElementTree(root),
            xml_declaration=content.lstrip().startswith("<?xml"),
        )

    @property
    def root(self) -> ET.Element:
        return self.tree.getroot()

    def _tag(self, name: str) -> str:
        return f"{{{self._ns}}}{name}" if self._ns else name

    def _child(self, parent: ET.Element, name: str, create: bool = False) -> ET.Element | None:
        child = parent.find(self._tag(name))
        if child is None and create:
            child = ET.SubElement(parent, self._tag(name))
        return child

    def servers(self) -> list[ET.Element]:
        servers = self._child(self.root, "servers")
        if servers is None:
            return []
        return servers.findall(self._tag("server"))

    def find_server(self, repo_id: str) -> ET.Element | None:
        for server in self.servers():
            id_elem = self._child(server, "id")
            if id_elem is not None and id_elem.text == repo_id:
                return server
        return None

    def update(self, repo_ids: list[str], user: str, pwd: str) -> None:
        """Set the username and password of the ``<server>`` of every repo ID."""
        servers = self._child(self.root, "servers", create=True)

        for repo_id in repo_ids:
            server = self.find_server(repo_id)
            if server is not None:
                self._child(server, "username", create=True).text = user
                self._child(server, "password", create=True).text = pwd
                LOG.debug("Updated Maven server %s", repo_id)
                continue

            server = ET.SubElement(servers, self._tag("server"))
            ET.SubElement(server, self._tag("id")).text = repo_id
            ET.SubElement(server, self._tag("username")).text = user
            ET.SubElement(server, self._tag("password")).text = pwd
            LOG.debug("Added Maven server %s", repo_id)

    def to_string(self) -> str:
        ET.indent(self.tree, space="  ")
        if self._ns:
            # Keep the document namespace unprefixed, whatever its settings version
            ET.register_namespace("", self._ns)
        body = ET.tostring(self.root, encoding="unicode")
        if self.xml_declaration:
            body = '<?xml version="1.0" encoding="UTF-8"?>\n' + body
        return body + "\n"

    def close(self) -> None:
        write_text_file(self.path, self.to_string())
