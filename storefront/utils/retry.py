# storefront/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.utils.logging import get_logger
from storefront.utils.settings import UPSTREAM_RETRY_ATTEMPTS

logger = get_logger(__name__)


def http_retry():
    """Transport errors and 5xx from the ZIP code provider."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(UPSTREAM_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(UPSTREAM_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
