"""Utility modules for ec2kit.

This package provides AWS API throttling and rate limiting shared by
every client wrapper in the process.
"""

from ec2kit.utils.throttling import (
    GlobalThrottler,
    get_global_throttler,
    reset_global_throttler,
    throttled_aws_call,
)

__all__ = [
    "GlobalThrottler",
    "get_global_throttler",
    "reset_global_throttler",
    "throttled_aws_call",
]
