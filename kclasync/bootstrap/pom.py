"""Reading dependencies out of a Maven POM file."""

from __future__ import annotations

import sys
from pathlib import Path
from xml.parsers import expat

from .maven import MavenPackage


def _log(text: str) -> None:
    print(text, file=sys.stderr)


def _strip_ns(tag: str) -> str:
    return tag.rsplit(":", 1)[-1]


class _PomScanner:
    """Collects dependencies from the stream of XML events."""

    def __init__(self) -> None:
        self.packages: list[MavenPackage] = []
        self._versions: dict[str, str] = {}
        self._current_tag = ""
        self._in_dependency = False
        self._in_properties = False
        self._in_exclusions = False
        self._in_cdata = False
        self._group_id = ""
        self._artifact_id = ""
        self._version = ""
        self._text: list[str] = []

    def start(self, name: str, _attrs: dict) -> None:
        self.flush()
        self._current_tag = _strip_ns(name)
        if self._current_tag == "dependency":
            self._in_dependency = True
            self._group_id = self._artifact_id = self._version = ""
        elif self._current_tag == "properties":
            self._in_properties = True
        elif self._current_tag == "exclusions":
            self._in_exclusions = True

    def end(self, name: str) -> None:
        self.flush()
        tag = _strip_ns(name)
        if tag == "dependency":
            self._in_dependency = False
            if not self._in_exclusions and self._group_id and self._artifact_id and self._version:
                version = self._versions.get(self._version, self._version)
                self.packages.append(MavenPackage(self._group_id, self._artifact_id, version))
                _log(f"Parsed dependency: {self._group_id}:{self._artifact_id}:{version}")
        elif tag == "properties":
            self._in_properties = False
        elif tag == "exclusions":
            self._in_exclusions = False

    def characters(self, data: str) -> None:
        if not self._in_cdata:
            self._text.append(data)

    def start_cdata(self) -> None:
        self.flush()
        self._in_cdata = True

    def end_cdata(self) -> None:
        self._in_cdata = False

    def flush(self, *_args: object) -> None:
        text = "".join(self._text).strip()
        self._text.clear()
        if not text:
            return
        if self._in_properties:
            self._versions[f"${{{self._current_tag}}}"] = text
        elif self._in_dependency and not self._in_exclusions:
            if self._current_tag == "groupId":
                self._group_id = text
            elif self._current_tag == "artifactId":
                self._artifact_id = text
            elif self._current_tag == "version":
                self._version = text


def parse_pom(path: str | Path) -> list[MavenPackage]:
    """Return the dependencies declared in the POM at ``path``.

    Versions written as ``${property}`` are resolved from ``<properties>``.
    Parsing stops quietly at the first malformed part of the document.
    """
    _log(f"Parsing POM: {path}")
    scanner = _PomScanner()
    with open(path, "rb") as handle:
        parser = expat.ParserCreate()
        parser.StartElementHandler = scanner.start
        parser.EndElementHandler = scanner.end
        parser.CharacterDataHandler = scanner.characters
        parser.StartCdataSectionHandler = scanner.start_cdata
        parser.EndCdataSectionHandler = scanner.end_cdata
        parser.CommentHandler = scanner.flush
        parser.ProcessingInstructionHandler = scanner.flush
        try:
            parser.ParseFile(handle)
        except expat.ExpatError:
            pass

    _log(f"Total dependencies parsed: {len(scanner.packages)}")
    return scanner.packages