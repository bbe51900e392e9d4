"""Global rate limiting for AWS API calls.

This module caps the number of concurrent EC2 calls and the call rate for
the whole process. It uses a semaphore for concurrency control and a token
bucket for the rate. Failed calls are not retried or delayed here; errors
pass straight through to the caller.
"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Final

from ec2kit.config.settings import get_settings

logger: Final = logging.getLogger(__name__)


class GlobalThrottler:
    """Process-wide rate limiter with a token bucket and a concurrency cap.

    Configuration comes from :class:`~ec2kit.config.settings.Settings`:
    - MAX_CONCURRENT_AWS_CALLS: Maximum concurrent calls (default: 8)
    - AWS_API_RATE_LIMIT: Tokens per second (default: 15.0)
    - AWS_API_MAX_TOKENS: Maximum token bucket size (default: 30)
    """

    def __init__(
        self,
        max_concurrent_calls: int | None = None,
        tokens_per_second: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Initialize the throttler.

        Args:
            max_concurrent_calls: Concurrency cap. Defaults to settings.
            tokens_per_second: Token refill rate. Defaults to settings.
            max_tokens: Bucket size. Defaults to settings.
        """
        settings = get_settings()
        self.max_concurrent_calls = max_concurrent_calls or settings.max_concurrent_aws_calls
        self.tokens_per_second = tokens_per_second or settings.aws_api_rate_limit
        self.max_tokens = max_tokens or settings.aws_api_max_tokens

        self._semaphore = asyncio.Semaphore(self.max_concurrent_calls)
        self._tokens = float(self.max_tokens)
        self._last_refill = time.monotonic()
        self._token_lock = asyncio.Lock()

        self._total_requests = 0
        self._waited_requests = 0
        self._failed_requests = 0

        logger.info(
            f"Global throttler initialized: {self.max_concurrent_calls} concurrent, "
            f"{self.tokens_per_second} tokens/sec"
        )

    def _refill_tokens(self) -> None:
        """Add tokens proportional to the time elapsed since the last refill."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(float(self.max_tokens), self._tokens + elapsed * self.tokens_per_second)
        self._last_refill = now

    async def _wait_for_token(self) -> None:
        """Take one token from the bucket, sleeping until one is available."""
        while True:
            async with self._token_lock:
                self._refill_tokens()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                wait_time = (1 - self._tokens) / self.tokens_per_second

            self._waited_requests += 1
            logger.debug(f"Rate limiting: waiting {wait_time:.2f}s for token")
            # Sleep outside the lock so other callers can refill and check
            await asyncio.sleep(wait_time)

    @asynccontextmanager
    async def throttled_request(self, operation_name: str = "aws_api_call") -> AsyncGenerator[None]:
        """Context manager for throttled AWS API requests.

        Args:
            operation_name: Name of the operation for logging purposes.
                Defaults to "aws_api_call".

        Yields:
            None. The context manager handles throttling transparently.

        Raises:
            Exception: Re-raises any exception from the wrapped code unchanged.

        Example:
            >>> throttler = GlobalThrottler()
            >>> async with throttler.throttled_request("ec2:describe_instances"):
            ...     result = await make_aws_call()
        """
        self._total_requests += 1

        async with self._semaphore:
            await self._wait_for_token()
            logger.debug(f"Throttler: allowing {operation_name} (tokens: {self._tokens:.1f})")

            start_time = time.monotonic()
            try:
                yield
            except Exception:
                self._failed_requests += 1
                raise
            duration = time.monotonic() - start_time
            logger.debug(f"Throttler: {operation_name} completed in {duration:.2f}s")

    def get_stats(self) -> dict[str, Any]:
        """Get throttling statistics for monitoring.

        Returns:
            Dictionary containing throttling metrics:
            - total_requests: Total number of requests processed
            - waited_requests: Number of times a request waited for a token
            - failed_requests: Number of requests whose call raised
            - current_tokens: Current number of tokens in the bucket
            - max_concurrent_calls: Maximum concurrent calls allowed
            - tokens_per_second: Rate of token refill
        """
        return {
            "total_requests": self._total_requests,
            "waited_requests": self._waited_requests,
            "failed_requests": self._failed_requests,
            "current_tokens": round(self._tokens, 2),
            "max_concurrent_calls": self.max_concurrent_calls,
            "tokens_per_second": self.tokens_per_second,
        }


# Global singleton instance
_global_throttler: GlobalThrottler | None = None


def get_global_throttler() -> GlobalThrottler:
    """Get the global throttler singleton instance.

    Returns:
        The global GlobalThrottler instance, creating it if necessary.
    """
    global _global_throttler  # noqa: PLW0603
    if _global_throttler is None:
        _global_throttler = GlobalThrottler()
    return _global_throttler


def reset_global_throttler() -> None:
    """Drop the singleton so the next call rebuilds it from current settings."""
    global _global_throttler  # noqa: PLW0603
    _global_throttler = None


def throttled_aws_call(operation_name: str = "aws_api_call") -> AbstractAsyncContextManager[None]:
    """Convenience context manager for throttled AWS API calls.

    Args:
        operation_name: Name of the operation for logging. Defaults to "aws_api_call".

    Returns:
        Async context manager for throttled AWS requests.

    Example:
        >>> async with throttled_aws_call("ec2:describe_key_pairs"):
        ...     result = await call()
    """
    return get_global_throttler().throttled_request(operation_name)
