"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from tablediff.domain.config.columns import ColumnsConfig
from tablediff.domain.config.diff import DiffConfig
from tablediff.domain.config.gitlab import GitLabConfig
from tablediff.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation runs at
    load time so that configuration errors fail fast.

    Attributes:
        diff: Diff source and cache configuration
        columns: Column detection thresholds
        gitlab: GitLab integration configuration
        retry: Retry logic configuration
    """

    diff: DiffConfig = Field(default_factory=DiffConfig)
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "diff": {
                    "source": "git",
                    "revision": "HEAD",
                    "cache_ttl_seconds": 5.0,
                    "git_timeout": 10.0,
                },
                "columns": {
                    "fuzzy_threshold": 0.6,
                    "sampling_threshold": 0.8,
                    "max_sample_rows": 50,
                },
                "gitlab": {
                    "url": None,
                    "token": None,
                    "project_id": None,
                },
                "retry": {
                    "max_attempts": 3,
                    "initial_delay": 1.0,
                    "backoff_multiplier": 2.0,
                    "jitter": 0.1,
                },
            }
        },
    )
