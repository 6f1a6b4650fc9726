"""All-or-nothing output writing.

Artifacts are written into staging locations next to their targets and
only swapped in by commit(). If anything fails before that, the staged
copies are removed and the previous output is left as it was.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from routedoc.errors import OutputError

logger = logging.getLogger("routedoc.generator.output")


class StagedOutput:
    """Collects staged files and directories; use as a context manager."""

    def __init__(self):
        self._directories: list[tuple[Path, Path]] = []  # (target, staged)
        self._files: list[tuple[Path, Path]] = []
        self.committed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.committed:
            self.discard()
        return False

    def stage_directory(self, target: Path, files: dict[str, str]) -> Path:
        """Write {relative path: text} into a fresh directory beside `target`."""
        target = Path(target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            staged = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))
        except OSError as e:
            raise OutputError(f"Cannot create staging directory for {target}: {e}") from e
        self._directories.append((target, staged))

        try:
            for relative, content in files.items():
                path = staged / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Cannot write staged output for {target}: {e}") from e
        return staged

    def stage_file(self, target: Path, content: str) -> Path:
        target = Path(target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(prefix=f".{target.name}-", suffix=".tmp", dir=target.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise OutputError(f"Cannot write staged output for {target}: {e}") from e
        staged = Path(name)
        self._files.append((target, staged))
        return staged

    def commit(self) -> None:
        """Swap every staged artifact into place."""
        try:
            for target, staged in self._directories:
                _replace_directory(target, staged)
            for target, staged in self._files:
                os.replace(staged, target)
        except OSError as e:
            raise OutputError(f"Cannot replace previous output: {e}") from e
        self.committed = True

    def discard(self) -> None:
        for _, staged in self._directories:
            shutil.rmtree(staged, ignore_errors=True)
        for _, staged in self._files:
            try:
                staged.unlink()
            except FileNotFoundError:
                pass


def _replace_directory(target: Path, staged: Path) -> None:
    if not staged.exists():
        return
    backup = None
    if target.exists():
        backup = target.with_name(f".{target.name}.previous")
        if backup.exists():
            shutil.rmtree(backup)
        target.rename(backup)
    try:
        staged.rename(target)
    except OSError:
        if backup is not None:
            backup.rename(target)
        raise
    if backup is not None:
        shutil.rmtree(backup, ignore_errors=True)
    logger.debug("Replaced %s", target)
