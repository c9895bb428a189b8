"""GitLab configuration model."""

from typing import Optional, Union

from pydantic import BaseModel


class GitLabConfig(BaseModel):
    """Configuration for the GitLab diff source.

    Attributes:
        url: GitLab instance URL (None = from GITLAB_URL env or gitlab.com)
        token: GitLab API token (None = from GITLAB_TOKEN env)
        project_id: Project ID or path, e.g. "group/project"
    """

    url: Optional[str] = None
    token: Optional[str] = None
    project_id: Optional[Union[int, str]] = None
