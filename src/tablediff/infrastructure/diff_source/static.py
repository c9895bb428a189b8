"""In-memory diff source"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from tablediff.infrastructure.diff_source.base import DiffSource

logger = logging.getLogger(__name__)


class StaticDiffSource(DiffSource):
    """Serves pre-recorded diffs keyed by file path

    Config:
        diffs: Mapping of file path -> unified diff text
        diff_file: Path to a diff file returned for every requested path
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.diffs: Dict[str, str] = {_key(path): text for path, text in self.config.get("diffs", {}).items()}
        self.default_diff: Optional[str] = None
        diff_file = self.config.get("diff_file")
        if diff_file:
            self.default_diff = Path(diff_file).read_text(encoding="utf-8")
            logger.info(f"Loaded diff from {diff_file}")

    def _validate_config(self, config: Dict[str, Any]) -> None:
        if not isinstance(config.get("diffs", {}), dict):
            raise ValueError("static diff source expects 'diffs' to be a mapping of path -> diff text")

    def get_unified_diff(self, file_path: str, revision_range: Optional[str] = None) -> Optional[str]:
        return self.diffs.get(_key(file_path), self.default_diff)


def _key(file_path: str) -> str:
    return Path(file_path).as_posix()
