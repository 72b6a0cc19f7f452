import tempfile
import unittest
from pathlib import Path

from claunch.core.workspace import Workspace


class WorkspaceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "notes" / "daily").mkdir(parents=True)
        self.document = self.root / "notes" / "daily" / "today.md"
        self.document.write_text("# today\n", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_document_parent_is_used(self) -> None:
        workspace = Workspace(self.root, active_document=self.document)
        self.assertEqual(workspace.active_working_directory(), self.root / "notes" / "daily")
        self.assertEqual(workspace.display_path(), str(Path("notes") / "daily"))

    def test_relative_document(self) -> None:
        workspace = Workspace(self.root, active_document=Path("notes/daily/today.md"))
        self.assertEqual(workspace.active_working_directory(), self.root / "notes" / "daily")

    def test_folder_is_used_as_is(self) -> None:
        workspace = Workspace(self.root, active_document=self.root / "notes")
        self.assertEqual(workspace.active_working_directory(), self.root / "notes")

    def test_root_when_no_document(self) -> None:
        workspace = Workspace(self.root)
        self.assertEqual(workspace.active_working_directory(), self.root)
        self.assertEqual(workspace.display_path(), "vault root")

    def test_root_when_always_open_root(self) -> None:
        workspace = Workspace(self.root, active_document=self.document, always_open_root=True)
        self.assertEqual(workspace.active_working_directory(), self.root)

    def test_document_outside_root(self) -> None:
        with tempfile.TemporaryDirectory() as other:
            outside = Path(other) / "elsewhere.md"
            outside.write_text("x", encoding="utf-8")
            workspace = Workspace(self.root, active_document=outside)
            self.assertEqual(workspace.active_working_directory(), self.root)
            self.assertEqual(workspace.vault_root_directory(), self.root)


if __name__ == "__main__":
    unittest.main()
