"""Read-only wrapper types over EC2 API responses."""

from ec2kit.models.instance import Instance
from ec2kit.models.instance_status import InstanceStatus
from ec2kit.models.key_pair import KeyPair
from ec2kit.models.reserved_offering import ReservedInstancesOffering
from ec2kit.models.security_group import IpPermission, SecurityGroup
from ec2kit.models.tag import TagDescription, tags_to_dict

__all__ = [
    "Instance",
    "InstanceStatus",
    "IpPermission",
    "KeyPair",
    "ReservedInstancesOffering",
    "SecurityGroup",
    "TagDescription",
    "tags_to_dict",
]
