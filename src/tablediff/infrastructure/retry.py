"""Retry utilities for remote diff lookups using tenacity."""

from __future__ import annotations

import logging
from typing import Any, Callable

from gitlab.exceptions import GitlabError
from tenacity import (
    RetryCallState,
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from tablediff.domain.config.retry import RetryConfig

logger = logging.getLogger(__name__)


def _status_code(exception: Exception) -> int | None:
    return getattr(exception, "response_code", None)


def _is_permanent_status(status_code: int | None) -> bool:
    """Auth errors and 4xx other than 429 will not succeed on retry"""
    if status_code in (401, 403):
        return True
    return bool(status_code and 400 <= status_code < 500 and status_code != 429)


def _should_retry_gitlab_error(exception: GitlabError) -> bool:
    """Check if GitlabError should be retried."""
    return not _is_permanent_status(_status_code(exception))


def create_retry_decorator(
    retry_config: RetryConfig,
    retry_condition: Callable[[BaseException], bool],
    before_sleep: Callable[[RetryCallState], None] | None = None,
) -> Callable[[Callable], Callable]:
    """Create a retry decorator with tenacity.

    Args:
        retry_config: Retry configuration
        retry_condition: Function that returns True if exception should be retried
        before_sleep: Optional callback before sleep (defaults to logging)

    Returns:
        Retry decorator
    """
    # initial_delay * (backoff_multiplier ^ attempt)
    wait = wait_exponential(
        multiplier=retry_config.initial_delay,
        exp_base=retry_config.backoff_multiplier,
        min=retry_config.initial_delay,
        max=60.0,
    )

    if retry_config.jitter > 0:
        jitter_amount = retry_config.initial_delay * retry_config.jitter
        wait = wait + wait_random(-jitter_amount, jitter_amount)

    if before_sleep is None:
        before_sleep = before_sleep_log(logger, logging.WARNING)

    def decorator(func: Callable) -> Callable:
        return retry(
            stop=stop_after_attempt(retry_config.max_attempts),
            wait=wait,
            retry=retry_if_exception(retry_condition),
            reraise=True,
            before_sleep=before_sleep,
        )(func)

    return decorator


def retry_gitlab_call(retry_config: RetryConfig) -> Callable[[Callable], Callable]:
    """Create a retry decorator for GitLab API calls.

    Exhausted or non-retryable failures surface as RuntimeError.
    """

    def _retry_condition(exception: BaseException) -> bool:
        if isinstance(exception, GitlabError):
            return _should_retry_gitlab_error(exception)
        return isinstance(exception, (ConnectionError, TimeoutError))

    def _before_sleep_log(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        attempt = retry_state.attempt_number
        logger.warning(f"GitLab API error (attempt {attempt}/{retry_config.max_attempts}): {exception}. Retrying...")

    decorator = create_retry_decorator(retry_config, _retry_condition, _before_sleep_log)

    def wrapper(func: Callable) -> Callable:
        retried_func = decorator(func)

        def wrapped(*args: Any, **kwargs: Any) -> Any:
            try:
                return retried_func(*args, **kwargs)
            except GitlabError as e:
                status_code = _status_code(e)
                if status_code in (401, 403):
                    logger.error(f"GitLab API authentication error: {e}")
                    raise RuntimeError(f"GitLab API authentication failed: {e}") from e
                elif _is_permanent_status(status_code):
                    if status_code == 404:
                        logger.debug(f"GitLab API 404 (not found): {e}")
                    else:
                        logger.error(f"GitLab API client error: {e}")
                    raise RuntimeError(f"GitLab API client error: {e}") from e
                else:
                    logger.error(f"GitLab API failed after {retry_config.max_attempts} attempts: {e}")
                    raise RuntimeError(
                        f"GitLab API request failed after {retry_config.max_attempts} attempts: {e}"
                    ) from e
            except (ConnectionError, TimeoutError) as e:
                logger.error(f"GitLab API unreachable after {retry_config.max_attempts} attempts: {e}")
                raise RuntimeError(f"GitLab API unreachable after {retry_config.max_attempts} attempts: {e}") from e

        return wrapped

    return wrapper
