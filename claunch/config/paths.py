from dataclasses import dataclass
from pathlib import Path


@dataclass
class ClaunchPaths:
    """Centralizes filesystem paths for a claunch workspace."""

    root: Path

    @property
    def claunch_dir(self) -> Path:
        return self.root / ".claunch"

    @property
    def config_file(self) -> Path:
        return self.claunch_dir / "claunch.json"

    @property
    def global_dir(self) -> Path:
        return Path.home() / ".claunch"

    @property
    def global_config_file(self) -> Path:
        return self.global_dir / "claunch.json"

    @property
    def logs_dir(self) -> Path:
        return self.global_dir / "logs"
