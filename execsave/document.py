"""
Host model - Read-only snapshots of editor state plus file system access.

The host (editor integration) describes each saved buffer as a Document and
its surroundings as a Workspace. Both are snapshots taken for one
invocation; the pipeline never looks up editor state on its own.
"""

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .shebang import SHEBANG, read_prefix

FILE_SCHEME = "file"


@dataclass(frozen=True)
class Document:
    """Snapshot of an editor buffer.

    Attributes:
        path: File system path backing the buffer (None if never saved)
        text: Buffer content, or at least its leading characters
        scheme: URI scheme of the buffer ("file", "untitled", "git", ...)
        is_untitled: True for transient buffers without a file
    """
    path: Optional[str]
    text: str = ""
    scheme: str = FILE_SCHEME
    is_untitled: bool = False

    @classmethod
    def from_path(cls, path: str, encoding: str = "utf-8") -> "Document":
        """Build a Document for a file on disk.

        Only the leading characters needed for shebang detection are read.

        Raises:
            OSError: If the file cannot be opened
        """
        with open(path, "r", encoding=encoding, errors="replace") as f:
            head = f.read(len(SHEBANG))
        return cls(path=os.fspath(path), text=head)

    @classmethod
    def untitled(cls, text: str = "") -> "Document":
        """Build a Document for an unsaved buffer."""
        return cls(path=None, text=text, scheme="untitled", is_untitled=True)

    @property
    def uri(self) -> str:
        return f"{self.scheme}://{self.path or ''}"

    @property
    def is_local_file(self) -> bool:
        """Whether the buffer is backed by a plain local file."""
        return not self.is_untitled and bool(self.path) and self.scheme == FILE_SCHEME

    def read_prefix(self, length: int = 2) -> str:
        """Clamped read of the leading characters."""
        return read_prefix(self.text, length)


@dataclass(frozen=True)
class Workspace:
    """Snapshot of the workspace the document belongs to.

    Attributes:
        is_trusted: False when the host runs in restricted mode
        folders: Workspace folder roots
    """
    is_trusted: bool = True
    folders: List[str] = field(default_factory=list)

    def folder_for(self, path: str) -> Optional[Path]:
        """Return the innermost workspace folder containing ``path``."""
        target = Path(path).resolve()
        best: Optional[Path] = None
        for folder in self.folders:
            root = Path(folder).resolve()
            if target == root or root in target.parents:
                if best is None or len(root.parts) > len(best.parts):
                    best = root
        return best


class FileSystem:
    """Local file system capability used by the pipeline.

    Both calls run on the event loop's default executor so a slow disk
    never blocks other documents.
    """

    async def stat_mode(self, path: str) -> int:
        """Return the full st_mode permission bits of ``path``.

        Raises:
            OSError: FileNotFoundError, PermissionError or others
        """
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, os.stat, path)
        return result.st_mode & 0o7777

    async def chmod(self, path: str, mode: int) -> None:
        """Set the permission bits of ``path`` to ``mode``.

        Raises:
            OSError: FileNotFoundError, PermissionError or others
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, os.chmod, path, mode)
