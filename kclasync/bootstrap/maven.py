"""Maven Central artifacts and downloading them."""

from __future__ import annotations

import shutil
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

_USER_AGENT = "Mozilla/5.0"


def _log(text: str) -> None:
    print(text, file=sys.stderr)


@dataclass(frozen=True)
class MavenPackage:
    """A JAR artifact identified by its Maven coordinates."""

    group_id: str
    artifact_id: str
    version: str

    REPOSITORY: ClassVar[str] = "https://repo1.maven.org/maven2"

    def file_name(self) -> str:
        """The name of the artifact's JAR file."""
        return f"{self.artifact_id}-{self.version}.jar"

    def url(self) -> str:
        """Where the JAR lives on Maven Central."""
        group_path = self.group_id.replace(".", "/")
        return f"{self.REPOSITORY}/{group_path}/{self.artifact_id}/{self.version}/{self.file_name()}"

    def fetch(self, folder: str | Path) -> Path:
        """Download the JAR into ``folder`` unless it is already there.

        Returns the path of the JAR; raises ``OSError`` if the download fails.
        """
        _log(f"Fetching package: {self.group_id}:{self.artifact_id}:{self.version}")
        folder = Path(folder)
        folder.mkdir(parents=True, exist_ok=True)
        dest = folder / self.file_name()

        if dest.exists():
            _log(f"Already exists: {dest}")
            return dest

        _log(f"Downloading from URL: {self.url()}")
        request = urllib.request.Request(self.url(), headers={"User-Agent": _USER_AGENT})
        try:
            with urllib.request.urlopen(request) as response:
                status = response.status
                if not 200 <= status < 300:
                    reason = getattr(response, "reason", "") or ""
                    raise OSError(f"Failed to fetch {self.file_name()}: {status} {reason}".rstrip())
                with dest.open("wb") as out:
                    shutil.copyfileobj(response, out)
        except urllib.error.HTTPError as exc:
            raise OSError(f"Failed to fetch {self.file_name()}: {exc.code} {exc.reason}") from exc

        _log(f"Saved to: {dest}")
        return dest