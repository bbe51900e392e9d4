"""AWS client wrapper with throttling and error handling.

This module provides a wrapper around boto3 clients that routes every call
through the global throttler and translates botocore errors into the
ec2kit exception hierarchy. Calls are never retried.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Final

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from ec2kit.aws.exceptions import (
    AWSError,
    EC2Error,
    PermissionError,
    ResourceNotFoundError,
    ThrottlingError,
    TimeoutError,
    ValidationError,
)
from ec2kit.utils import throttled_aws_call

logger: Final = logging.getLogger(__name__)

THROTTLING_CODES: Final = frozenset(
    {"Throttling", "ThrottlingException", "RequestLimitExceeded", "TooManyRequestsException"}
)
PERMISSION_CODES: Final = frozenset(
    {"UnauthorizedOperation", "AccessDenied", "AccessDeniedException", "AuthFailure"}
)
VALIDATION_CODES: Final = frozenset(
    {"ValidationError", "InvalidParameterValue", "InvalidParameterCombination", "MissingParameter"}
)


class AWSClientWrapper:
    """Wrapper for boto3 clients with throttling and error handling.

    This class wraps a boto3 service client to provide:
    - Automatic integration with GlobalThrottler for rate limiting
    - Consistent error handling with custom exception types
    - Async/await support for all operations
    - Logging of every AWS operation

    boto3 is synchronous, so each call runs in the event loop's default
    executor.

    Example:
        >>> wrapper = AWSClientWrapper("ec2", region="us-east-1")
        >>> result = await wrapper.call("describe_instances", InstanceIds=["i-123"])
    """

    def __init__(self, service_name: str, region: str | None = None, **kwargs: Any) -> None:
        """Initialize AWS client wrapper.

        Args:
            service_name: AWS service name (e.g., 'ec2').
            region: AWS region name. If None, uses default from environment/config.
                Defaults to None.
            **kwargs: Additional arguments passed to boto3.client(), such as
                ``aws_access_key_id``, ``aws_secret_access_key`` or ``endpoint_url``.

        Example:
            >>> client = AWSClientWrapper("ec2", region="us-west-2")
            >>> client = AWSClientWrapper("ec2", region="eu-west-1", endpoint_url="...")
        """
        self.service_name = service_name
        self.region = region
        self._client_kwargs = kwargs
        self._client: BaseClient = boto3.client(  # type: ignore[call-overload]
            service_name, region_name=region, **kwargs
        )
        logger.info(f"Initialized AWS {service_name} client for region {region or 'default'}")

    def for_region(self, region: str) -> "AWSClientWrapper":
        """Create a wrapper for the same service and credentials in another region.

        Args:
            region: AWS region name.

        Returns:
            A new AWSClientWrapper bound to ``region``.
        """
        return AWSClientWrapper(self.service_name, region, **self._client_kwargs)

    async def call(self, operation: str, **kwargs: Any) -> Any:
        """Execute AWS operation with throttling and error handling.

        Args:
            operation: boto3 operation name (e.g., 'describe_instances').
            **kwargs: Operation-specific parameters, passed through unchanged.

        Returns:
            The response from the AWS operation.

        Raises:
            ValidationError: For invalid parameters or input validation errors.
            ResourceNotFoundError: When requested resource doesn't exist.
            PermissionError: For IAM permission/authorization errors.
            ThrottlingError: When AWS rate limits are exceeded.
            TimeoutError: When the connection or read times out.
            EC2Error: For other EC2 errors.

        Example:
            >>> wrapper = AWSClientWrapper("ec2")
            >>> result = await wrapper.call("describe_key_pairs")
            >>> names = [kp["KeyName"] for kp in result["KeyPairs"]]
        """
        operation_name = f"{self.service_name}:{operation}"

        logger.debug(f"Calling {operation_name} with params: {list(kwargs.keys())}")

        client_method = getattr(self._client, operation)
        try:
            async with throttled_aws_call(operation_name):
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(None, partial(client_method, **kwargs))

                logger.debug(f"Successfully completed {operation_name}")
                return result

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))

            logger.warning(f"{operation_name} failed with {error_code}: {error_message}")

            raise self._convert_client_error(e, operation, error_code, error_message) from e

        except BotoCoreError as e:
            logger.error(f"{operation_name} failed with BotoCoreError: {e}")

            if "timed out" in str(e).lower() or "timeout" in str(e).lower():
                raise TimeoutError(
                    f"Operation {operation} timed out",
                    service=self.service_name,
                    operation=operation,
                ) from e

            raise EC2Error(
                f"AWS operation failed: {e}",
                service=self.service_name,
                operation=operation,
            ) from e

    def _convert_client_error(
        self, error: ClientError, operation: str, error_code: str, error_message: str
    ) -> AWSError:
        """Convert boto3 ClientError to appropriate custom exception.

        Args:
            error: The original ClientError from boto3.
            operation: The AWS operation name.
            error_code: AWS error code from the response.
            error_message: AWS error message from the response.

        Returns:
            Custom exception instance matching the error type.
        """
        details = {
            "error_code": error_code,
            "http_status": error.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
            "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
        }

        error_class: type[AWSError]
        if error_code in THROTTLING_CODES:
            error_class = ThrottlingError
        elif error_code in PERMISSION_CODES:
            error_class = PermissionError
        # NotFound must win over the generic Invalid* prefix below
        elif error_code.endswith("NotFound"):
            error_class = ResourceNotFoundError
        elif error_code in VALIDATION_CODES or error_code.startswith("Invalid"):
            error_class = ValidationError
        else:
            error_class = EC2Error

        return error_class(
            error_message,
            service=self.service_name,
            operation=operation,
            error_code=error_code,
            details=details,
        )

    def get_client(self) -> BaseClient:
        """Get the underlying boto3 client for advanced use cases.

        Warning:
            Direct use of the boto3 client bypasses throttling and error
            translation.

        Returns:
            The underlying boto3 BaseClient instance.
        """
        logger.warning(f"Direct access to {self.service_name} client requested - bypassing wrapper")
        return self._client


def create_aws_client(
    service_name: str, region: str | None = None, **kwargs: Any
) -> AWSClientWrapper:
    """Factory function to create AWS client wrapper.

    Args:
        service_name: AWS service name (e.g., 'ec2').
        region: AWS region name. Defaults to None (uses default region).
        **kwargs: Additional arguments for boto3.client().

    Returns:
        Configured AWSClientWrapper instance.

    Example:
        >>> ec2_client = create_aws_client("ec2", region="us-east-1")
        >>> result = await ec2_client.call("describe_instances")
    """
    return AWSClientWrapper(service_name, region, **kwargs)
