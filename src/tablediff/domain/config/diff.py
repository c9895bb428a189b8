"""Diff retrieval configuration model."""

from typing import Literal

from pydantic import BaseModel, Field


class DiffConfig(BaseModel):
    """Configuration for where unified diffs come from and how long they are reused.

    Attributes:
        source: Diff source type (git, gitlab or static)
        revision: Revision to diff the working tree against, or a "from..to" range
        cache_ttl_seconds: Lifetime of cached line changes (0 disables reuse)
        git_timeout: Timeout for the git subprocess in seconds
    """

    source: Literal["git", "gitlab", "static"] = "git"
    revision: str = "HEAD"
    cache_ttl_seconds: float = Field(5.0, ge=0.0)
    git_timeout: float = Field(10.0, gt=0.0)
