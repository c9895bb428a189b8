"""Configuration models with Pydantic validation."""

from tablediff.domain.config.app import AppConfig
from tablediff.domain.config.columns import ColumnsConfig
from tablediff.domain.config.diff import DiffConfig
from tablediff.domain.config.gitlab import GitLabConfig
from tablediff.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "DiffConfig",
    "ColumnsConfig",
    "GitLabConfig",
    "RetryConfig",
]
