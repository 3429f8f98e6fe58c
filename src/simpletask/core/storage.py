"""Save and load whole workspace trees as JSON files."""

import json
import os
import tempfile
from pathlib import Path

from loguru import logger

from simpletask.core.manager import WorkspaceManager


class JsonWorkspaceStore:
    """Persist a workspace tree to a single JSON file.

    - The whole tree is written on every save and read on every load.
    - The file is not rewritten if its contents would not change.
    - Writes go through a temporary file in the same directory, so a reader
      never sees a half-written tree.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> WorkspaceManager:
        """Read the file and return a new manager over its tree.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or not a valid tree.
        """
        if not self.exists():
            msg = f"Workspace file not found: {self.path}"
            raise FileNotFoundError(msg)
        try:
            record = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            msg = f"Workspace file {self.path} is not valid JSON: {e}"
            raise ValueError(msg) from None
        manager = WorkspaceManager.from_record(record)
        logger.debug("Loaded {} nodes from {}", len(manager), self.path)
        return manager

    def save(self, manager: WorkspaceManager) -> None:
        contents = json.dumps(manager.to_record(), sort_keys=True, indent=4) + "\n"

        if self.exists() and self.path.read_text(encoding="utf-8") == contents:
            logger.debug("Workspace unchanged, not rewriting {}", self.path)
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(contents)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved {} nodes to {}", len(manager), self.path)
