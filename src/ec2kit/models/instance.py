"""Instance wrapper model.

This module provides the read-only :class:`Instance` projection of an EC2
instance description.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ec2kit.constants import (
    INSTANCE_STATE_PENDING,
    INSTANCE_STATE_RUNNING,
    INSTANCE_STATES,
    NAME_TAG,
)
from ec2kit.models.tag import tags_to_dict


class Instance(BaseModel):
    """Model representing an EC2 instance with validated data.

    This Pydantic model validates and structures instance data from
    ``DescribeInstances`` and ``RunInstances`` responses. It is a snapshot:
    it never refreshes itself.

    Attributes:
        instance_id: EC2 instance ID (e.g., 'i-1234567890abcdef0').
        instance_type: EC2 instance type (e.g., 't3.micro').
        state: Current instance state name.
        image_id: AMI the instance was launched from.
        key_name: Name of the key pair the instance was launched with.
        availability_zone: Availability zone of the instance.
        private_ip: Private IPv4 address.
        public_ip: Public IPv4 address.
        private_dns_name: Private DNS name.
        public_dns_name: Public DNS name.
        vpc_id: VPC the instance runs in.
        subnet_id: Subnet the instance runs in.
        architecture: CPU architecture (e.g., 'x86_64', 'arm64').
        platform: Platform, only set for Windows instances.
        launch_time: Launch timestamp.
        security_groups: Names of the attached security groups.
        tags: Dictionary of instance tags.
    """

    model_config = ConfigDict(frozen=True)

    instance_id: str = Field(..., pattern=r"^i-[a-f0-9]{8,17}$")
    instance_type: str
    state: str
    image_id: str | None = None
    key_name: str | None = None
    availability_zone: str | None = None
    private_ip: str | None = None
    public_ip: str | None = None
    private_dns_name: str | None = None
    public_dns_name: str | None = None
    vpc_id: str | None = None
    subnet_id: str | None = None
    architecture: str | None = None
    platform: str | None = None
    launch_time: datetime | None = None
    security_groups: list[str] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        """Validate instance state against known EC2 states.

        Raises:
            ValueError: If state is not a valid EC2 instance state.
        """
        if v not in INSTANCE_STATES:
            raise ValueError(f"Invalid instance state: {v}. Must be one of {sorted(INSTANCE_STATES)}")
        return v

    @property
    def name(self) -> str | None:
        """Value of the ``Name`` tag, if any."""
        return self.tags.get(NAME_TAG)

    @property
    def is_pending(self) -> bool:
        return self.state == INSTANCE_STATE_PENDING

    @property
    def is_running(self) -> bool:
        return self.state == INSTANCE_STATE_RUNNING

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "Instance":
        """Build from one entry of a reservation's ``Instances`` list.

        Args:
            data: Raw instance data from the AWS API.

        Returns:
            Validated Instance.
        """
        # Empty DNS names are reported as "" until the instance gets one
        return cls(
            instance_id=data["InstanceId"],
            instance_type=data["InstanceType"],
            state=data["State"]["Name"],
            image_id=data.get("ImageId"),
            key_name=data.get("KeyName"),
            availability_zone=data.get("Placement", {}).get("AvailabilityZone"),
            private_ip=data.get("PrivateIpAddress"),
            public_ip=data.get("PublicIpAddress"),
            private_dns_name=data.get("PrivateDnsName") or None,
            public_dns_name=data.get("PublicDnsName") or None,
            vpc_id=data.get("VpcId"),
            subnet_id=data.get("SubnetId"),
            architecture=data.get("Architecture"),
            platform=data.get("Platform"),
            launch_time=data.get("LaunchTime"),
            security_groups=[group["GroupName"] for group in data.get("SecurityGroups", [])],
            tags=tags_to_dict(data.get("Tags")),
        )
