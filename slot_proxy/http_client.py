"""HTTP client utilities with connection pooling and an attempt policy.

Purpose: Centralize upstream HTTP configuration.

Pattern: requests.Session with pooled adapter, wrapped by a tenacity retry
policy that only covers connection-level failures. The default policy makes
a single attempt; status codes are never retried here and are left to the
caller to interpret.
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from slot_proxy import config

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def create_http_session(
    max_attempts: int = config.UPSTREAM_MAX_ATTEMPTS,
    backoff_factor: float = 1.0,
    timeout: int = config.UPSTREAM_TIMEOUT
) -> requests.Session:
    """
    Create HTTP session with connection pooling.

    Args:
        max_attempts: Total attempts per request on connection errors and
                      timeouts (default from config: 1, i.e. no retry)
        backoff_factor: Exponential backoff multiplier between attempts
        timeout: Request timeout in seconds, applied unless the caller
                 passes its own

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    # No urllib3-level retries; the attempt policy below is the only one
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    original_get = session.get
    original_post = session.post

    attempt_policy = retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=backoff_factor, max=8),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )

    @attempt_policy
    def get_with_policy(*args, **kwargs):
        kwargs.setdefault('timeout', timeout)
        return original_get(*args, **kwargs)

    @attempt_policy
    def post_with_policy(*args, **kwargs):
        kwargs.setdefault('timeout', timeout)
        return original_post(*args, **kwargs)

    session.get = get_with_policy
    session.post = post_with_policy

    return session
