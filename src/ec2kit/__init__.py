"""ec2kit - convenience facade over the AWS EC2 client.

This package wraps boto3's EC2 client with read-only wrapper types
(instances, key pairs, security groups), a pagination sequencer for
``NextToken`` list APIs, and a "run and wait until running" helper.
"""

from ec2kit.version import __version__

__author__ = "ec2kit Contributors"
__license__ = "MIT"

__all__ = ["__author__", "__license__", "__version__"]
