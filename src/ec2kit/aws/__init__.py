"""AWS integration modules for ec2kit.

This package provides:
- A boto3 client wrapper with automatic throttling
- A custom exception hierarchy for AWS errors
- Async/await support for all AWS operations
- A pagination sequencer for NextToken list operations
- The EC2Manager facade

Example:
    >>> from ec2kit.aws import EC2Manager
    >>>
    >>> ec2 = EC2Manager(region="us-east-1")
    >>> key_pair = await ec2.create_key_pair("deploy")
    >>> instances = await ec2.run_and_await("ami-0abcdef1234567890", key_pair)
    >>> await ec2.stop(*instances)
"""

from ec2kit.aws.client import AWSClientWrapper, create_aws_client
from ec2kit.aws.ec2 import EC2Manager
from ec2kit.aws.exceptions import (
    AWSError,
    EC2Error,
    PermissionError,
    ResourceNotFoundError,
    ThrottlingError,
    TimeoutError,
    ValidationError,
)
from ec2kit.aws.sequencer import Sequencer, TokenSequencer

__all__ = [
    "AWSClientWrapper",
    "AWSError",
    "EC2Error",
    "EC2Manager",
    "PermissionError",
    "ResourceNotFoundError",
    "Sequencer",
    "ThrottlingError",
    "TimeoutError",
    "TokenSequencer",
    "ValidationError",
    "create_aws_client",
]
