"""Factory for creating diff sources"""

import logging
from typing import Any, Dict

from tablediff.infrastructure.diff_source.base import DiffSource
from tablediff.infrastructure.diff_source.git import GitDiffSource
from tablediff.infrastructure.diff_source.gitlab import GitLabDiffSource
from tablediff.infrastructure.diff_source.static import StaticDiffSource

logger = logging.getLogger(__name__)


class DiffSourceFactory:
    """Factory for creating diff source instances"""

    SOURCES = {
        "git": GitDiffSource,
        "gitlab": GitLabDiffSource,
        "static": StaticDiffSource,
    }

    @classmethod
    def create(cls, source_type: str, config: Dict[str, Any] = None) -> DiffSource:
        """Create diff source instance

        Args:
            source_type: Type of source (git, gitlab, static)
            config: Source configuration

        Returns:
            DiffSource instance

        Raises:
            ValueError: If source type is not supported
        """
        if config is None:
            config = {}

        source_type_lower = source_type.lower()

        if source_type_lower not in cls.SOURCES:
            available = ", ".join(cls.SOURCES.keys())
            raise ValueError(
                f"Unknown diff source: {source_type}. "
                f"Available sources: {available}"
            )

        source_class = cls.SOURCES[source_type_lower]
        logger.info(f"Creating {source_type_lower} diff source")
        return source_class(config)
