"""Unified diff providers."""

from tablediff.infrastructure.diff_source.base import DiffSource
from tablediff.infrastructure.diff_source.factory import DiffSourceFactory
from tablediff.infrastructure.diff_source.git import GitDiffSource
from tablediff.infrastructure.diff_source.gitlab import GitLabDiffSource
from tablediff.infrastructure.diff_source.static import StaticDiffSource

__all__ = [
    "DiffSource",
    "DiffSourceFactory",
    "GitDiffSource",
    "GitLabDiffSource",
    "StaticDiffSource",
]
