"""Command line tool that prepares and starts the KCL MultiLang daemon."""

from __future__ import annotations

import argparse
import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .maven import MavenPackage
from .pom import parse_pom

DAEMON_CLASS = "software.amazon.kinesis.multilang.MultiLangDaemon"


def _log(text: str) -> None:
    print(text, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    """The parser for the bootstrap command's options."""
    parser = argparse.ArgumentParser(
        prog="kcl-bootstrap",
        description="Fetch the KCL JARs and build the MultiLang daemon command line.",
    )
    parser.add_argument("-j", "--java", dest="java_location", default=None)
    parser.add_argument("-p", "--properties", dest="properties_file", required=True)
    parser.add_argument("--jar-folder", dest="jar_folder", default="jars")
    parser.add_argument("--pom", dest="pom_file", default="pom.xml")
    parser.add_argument("-e", "--execute", dest="should_execute", action="store_true")
    parser.add_argument("-l", "--log-configuration", dest="logback_configuration", default=None)
    return parser


def fetch_jars(jar_folder: str | Path, packages: Iterable[MavenPackage]) -> list[Path]:
    """Download ``packages`` and return the classpath: every JAR in the folder, then the CWD."""
    jar_folder = Path(jar_folder)
    _log(f"Fetching JARs into folder: {jar_folder}")
    for package in packages:
        package.fetch(jar_folder)

    paths = []
    for path in sorted(jar_folder.iterdir()):
        if path.suffix == ".jar":
            _log(f"Found JAR: {path}")
            paths.append(path)

    paths.append(Path.cwd())
    return paths


def find_java(custom: str | None) -> str | None:
    """Return ``custom`` if given, otherwise the ``java`` found on PATH, if any."""
    if custom is not None:
        _log(f"Using custom Java path: {custom}")
        return custom

    found = shutil.which("java")
    if found is not None:
        _log(f"Found Java in PATH: {found}")
    else:
        _log("Java not found in PATH")
    return found


def build_command(
    java: str,
    classpath: Iterable[str | Path],
    properties_file: str,
    logback_configuration: str | None = None,
) -> list[str]:
    """The argument list that starts the MultiLang daemon."""
    command = [
        java,
        "-cp",
        os.pathsep.join(str(path) for path in classpath),
        DAEMON_CLASS,
        "-p",
        properties_file,
    ]
    if logback_configuration is not None:
        command += ["-l", logback_configuration]
    return command


def main(argv: Sequence[str] | None = None) -> int:
    """Print the daemon's command line, or run it with ``--execute``."""
    _log("Parsing CLI arguments...")
    args = build_parser().parse_args(argv)

    try:
        _log("Parsing POM...")
        packages = parse_pom(args.pom_file)

        _log("Fetching JAR files...")
        classpath = fetch_jars(args.jar_folder, packages)

        _log("Looking for Java...")
        java = find_java(args.java_location)
        if java is None:
            raise LookupError("Java not found (neither custom path nor in PATH)")

        _log("Building command line...")
        command = build_command(java, classpath, args.properties_file, args.logback_configuration)

        if args.should_execute:
            _log("Executing Java process...")
            subprocess.run(command, check=False)
        else:
            print(shlex.join(command))
    except (OSError, LookupError) as exc:
        _log(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())