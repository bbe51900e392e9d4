"""Custom exceptions for AWS operations.

This module defines a hierarchy of exceptions for EC2 operations,
providing clear error categorization and context for error handling.
The original botocore exception is always chained as ``__cause__``.
"""

from typing import Any


class AWSError(Exception):
    """Base exception for all AWS-related errors.

    Attributes:
        message: Human-readable error message.
        service: AWS service name (e.g., 'ec2').
        operation: AWS operation name (e.g., 'describe_instances').
        error_code: AWS error code if available (e.g., 'InvalidInstanceID.NotFound').
        details: Additional error context as dictionary.
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        operation: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize AWS error with context.

        Args:
            message: Human-readable error message.
            service: AWS service name (e.g., 'ec2'). Defaults to None.
            operation: AWS operation name. Defaults to None.
            error_code: AWS error code if available. Defaults to None.
            details: Additional error context. Defaults to None.
        """
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error string with context."""
        parts = [self.message]
        if self.service:
            parts.append(f"Service: {self.service}")
        if self.operation:
            parts.append(f"Operation: {self.operation}")
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        return " | ".join(parts)


class EC2Error(AWSError):
    """Exception raised for EC2 service errors.

    Raised when an EC2 call fails with an error code that does not fall
    into one of the more specific categories below.
    """


class ThrottlingError(AWSError):
    """Exception raised when AWS API rate limits are exceeded.

    ec2kit does not retry; callers that want backoff wrap the operation
    themselves.
    """


class ValidationError(AWSError):
    """Exception raised for input validation errors.

    Raised for invalid parameters, either detected locally before any
    call is made (e.g. an empty instance list) or reported by EC2
    (``InvalidParameterValue``, ``MissingParameter``, ``Invalid*``).
    """


class ResourceNotFoundError(AWSError):
    """Exception raised when an AWS resource is not found.

    Raised for ``*NotFound`` error codes, such as an unknown instance ID,
    key pair name or security group name.
    """


class PermissionError(AWSError):
    """Exception raised for AWS permission/authorization errors."""


class TimeoutError(AWSError):
    """Exception raised when an AWS operation times out.

    Raised for botocore connect/read timeouts and when waiting for
    launched instances exceeds the caller's timeout.
    """
