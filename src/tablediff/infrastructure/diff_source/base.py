"""Base diff source interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class DiffSource(ABC):
    """Abstract base class for unified diff providers"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize source with configuration

        Args:
            config: Source configuration dictionary

        Raises:
            ValueError: If configuration is invalid
        """
        self.config = config or {}
        self._validate_config(self.config)

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate source configuration

        Raises:
            ValueError: If configuration is invalid
        """
        # Override in subclasses for specific validation
        pass

    @abstractmethod
    def get_unified_diff(self, file_path: str, revision_range: Optional[str] = None) -> Optional[str]:
        """Return unified diff text for one file

        Args:
            file_path: Path of the file, relative to the repository root or absolute
            revision_range: Revision, or "from..to" range (source default if None)

        Returns:
            Unified diff text, or None when no diff is available (untracked
            file, tool missing, remote failure)
        """
        pass
