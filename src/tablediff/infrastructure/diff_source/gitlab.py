"""GitLab compare API diff source"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

import gitlab

from tablediff.domain.config.retry import RetryConfig
from tablediff.infrastructure.diff_source.base import DiffSource
from tablediff.infrastructure.retry import retry_gitlab_call

logger = logging.getLogger(__name__)


class GitLabDiffSource(DiffSource):
    """Fetches per-file diffs between two refs from the GitLab compare API

    Config:
        project_id: Project ID or path (e.g., "group/project")
        url: GitLab instance URL (default: from GITLAB_URL env or gitlab.com)
        token: GitLab private token (default: from GITLAB_TOKEN env)
        retry: Retry configuration (RetryConfig or dict)
        revision: Default "from..to" range
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.project_id = self.config["project_id"]
        self.gitlab_url = self.config.get("url") or os.getenv("GITLAB_URL", "https://gitlab.com")
        self.private_token = self.config.get("token") or os.getenv("GITLAB_TOKEN")
        self.revision: Optional[str] = self.config.get("revision")

        retry_config = self.config.get("retry")
        if isinstance(retry_config, dict):
            retry_config = RetryConfig(**retry_config)
        self.retry_config: RetryConfig = retry_config or RetryConfig()

        if not self.private_token:
            raise ValueError(
                "GitLab private token is required. "
                "Set GITLAB_TOKEN environment variable or provide in config."
            )

        self.gl = gitlab.Gitlab(self.gitlab_url, private_token=self.private_token)
        self._project = None
        logger.info(f"GitLab diff source initialized for {self.gitlab_url} ({self.project_id})")

    def _validate_config(self, config: Dict[str, Any]) -> None:
        if not config.get("project_id"):
            raise ValueError("GitLab diff source requires 'project_id'")

    def _retry_api_call(self, func):
        """Execute a GitLab API call with retry

        Raises:
            RuntimeError: If all retries fail or the error is not retryable
        """
        return retry_gitlab_call(self.retry_config)(func)()

    def _get_project(self):
        if self._project is None:
            self._project = self._retry_api_call(lambda: self.gl.projects.get(self.project_id))
        return self._project

    def get_unified_diff(self, file_path: str, revision_range: Optional[str] = None) -> Optional[str]:
        """Diff one file between two refs

        Args:
            file_path: Repository-relative path
            revision_range: "from..to" range (default: configured revision)

        Returns:
            Unified diff text for the file, "" if the file is unchanged, or
            None when the range is invalid or the API fails
        """
        refs = _split_range(revision_range or self.revision)
        if refs is None:
            logger.warning(f"GitLab diff source needs a 'from..to' range, got {revision_range or self.revision!r}")
            return None
        ref_from, ref_to = refs

        try:
            project = self._get_project()
            comparison = self._retry_api_call(lambda: project.repository_compare(ref_from, ref_to))
        except RuntimeError as e:
            logger.warning(f"Failed to compare {ref_from}..{ref_to}: {e}")
            return None

        for change in comparison.get("diffs", []):
            if file_path in (change.get("new_path"), change.get("old_path")):
                return change.get("diff") or ""
        logger.debug(f"{file_path} unchanged between {ref_from} and {ref_to}")
        return ""


def _split_range(revision_range: Optional[str]) -> Optional[Tuple[str, str]]:
    if not revision_range or ".." not in revision_range:
        return None
    ref_from, _, ref_to = revision_range.partition("..")
    ref_to = ref_to.lstrip(".")  # Accept "a...b" as well
    if not ref_from or not ref_to:
        return None
    return ref_from, ref_to
