"""Local git diff source"""

import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from tablediff.infrastructure.diff_source.base import DiffSource

logger = logging.getLogger(__name__)


class GitDiffSource(DiffSource):
    """Runs `git diff` against a revision for a single file

    Config:
        repo_root: Working directory for git (default: current directory)
        revision: Revision to diff against (default: HEAD)
        timeout: Subprocess timeout in seconds (default: 10)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        repo_root = self.config.get("repo_root")
        self.repo_root: Optional[Path] = Path(repo_root) if repo_root else None
        self.revision: str = self.config.get("revision") or "HEAD"
        self.timeout: float = float(self.config.get("timeout", 10.0))

    def _validate_config(self, config: Dict[str, Any]) -> None:
        timeout = config.get("timeout", 10.0)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError(f"git timeout must be a positive number, got {timeout!r}")

    def get_unified_diff(self, file_path: str, revision_range: Optional[str] = None) -> Optional[str]:
        """Diff the file against a revision, falling back to the staged version

        Args:
            file_path: File to diff
            revision_range: Revision or "from..to" range (default: configured revision)

        Returns:
            Unified diff text with zero context lines, or None on failure
        """
        revision = revision_range or self.revision
        diff = self._run(["diff", "--unified=0", "--no-color", revision, "--", file_path])
        if diff:
            return diff

        logger.debug(f"No diff against {revision} for {file_path}, trying index")
        staged = self._run(["diff", "--unified=0", "--no-color", "--cached", "--", file_path])
        if staged:
            return staged
        return diff

    def _run(self, args: List[str]) -> Optional[str]:
        command = ["git"] + args
        try:
            result = subprocess.run(
                command,
                cwd=str(self.repo_root) if self.repo_root else None,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            logger.warning("git executable not found")
            return None
        except subprocess.TimeoutExpired:
            logger.warning(f"git diff timed out after {self.timeout}s")
            return None
        except OSError as e:
            logger.warning(f"Failed to run git: {e}")
            return None

        if result.returncode != 0:
            logger.debug(f"{' '.join(command)} exited with {result.returncode}: {result.stderr.strip()}")
            return None
        return result.stdout


def find_repo_root(path: Path, timeout: float = 10.0) -> Optional[Path]:
    """Return the top-level directory of the git work tree containing path

    Returns:
        Absolute repository root, or None outside a work tree or without git
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(path),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"Could not locate git work tree for {path}: {e}")
        return None

    if result.returncode != 0 or not result.stdout.strip():
        return None
    return Path(result.stdout.strip()).resolve()
