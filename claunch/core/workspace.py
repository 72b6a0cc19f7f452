from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol


class WorkspaceContext(Protocol):
    def active_working_directory(self) -> Path: ...

    def vault_root_directory(self) -> Path: ...


@dataclass
class Workspace:
    """Derives the launch directory from a root folder and the document being edited."""

    root: Path
    active_document: Optional[Path] = None
    always_open_root: bool = False

    def vault_root_directory(self) -> Path:
        return self.root.expanduser().resolve()

    def active_working_directory(self) -> Path:
        root = self.vault_root_directory()
        if self.always_open_root or self.active_document is None:
            return root
        document = self.active_document.expanduser()
        if not document.is_absolute():
            document = root / document
        document = document.resolve()
        folder = document if document.is_dir() else document.parent
        try:
            folder.relative_to(root)
        except ValueError:
            return root
        return folder

    def display_path(self) -> str:
        """Folder shown to the user, relative to the root."""
        folder = self.active_working_directory()
        root = self.vault_root_directory()
        if folder == root:
            return "vault root"
        return str(folder.relative_to(root))
