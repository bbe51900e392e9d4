"""Security group wrapper models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ec2kit.models.tag import tags_to_dict


class IpPermission(BaseModel):
    """One ingress or egress rule of a security group.

    Attributes:
        ip_protocol: Protocol name or number; '-1' means all protocols.
        from_port: Start of the port range (None when all protocols).
        to_port: End of the port range (None when all protocols).
        cidr_ranges: IPv4 CIDR blocks the rule applies to.
        ipv6_cidr_ranges: IPv6 CIDR blocks the rule applies to.
        source_group_ids: Security groups the rule applies to.
    """

    model_config = ConfigDict(frozen=True)

    ip_protocol: str
    from_port: int | None = None
    to_port: int | None = None
    cidr_ranges: list[str] = Field(default_factory=list)
    ipv6_cidr_ranges: list[str] = Field(default_factory=list)
    source_group_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "IpPermission":
        return cls(
            ip_protocol=data["IpProtocol"],
            from_port=data.get("FromPort"),
            to_port=data.get("ToPort"),
            cidr_ranges=[r["CidrIp"] for r in data.get("IpRanges", [])],
            ipv6_cidr_ranges=[r["CidrIpv6"] for r in data.get("Ipv6Ranges", [])],
            source_group_ids=[
                pair["GroupId"] for pair in data.get("UserIdGroupPairs", []) if "GroupId" in pair
            ],
        )


class SecurityGroup(BaseModel):
    """Model representing an EC2 security group.

    Attributes:
        group_id: Security group ID (e.g., 'sg-0123456789abcdef0').
        group_name: Security group name.
        description: Description given at creation.
        owner_id: Owning AWS account ID.
        vpc_id: VPC of the group, None for EC2-Classic groups.
        ip_permissions: Ingress rules.
        ip_permissions_egress: Egress rules.
        tags: Dictionary of group tags.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., pattern=r"^sg-[a-f0-9]{8,17}$")
    group_name: str
    description: str = ""
    owner_id: str | None = None
    vpc_id: str | None = None
    ip_permissions: list[IpPermission] = Field(default_factory=list)
    ip_permissions_egress: list[IpPermission] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "SecurityGroup":
        """Build from one entry of a ``DescribeSecurityGroups`` response."""
        return cls(
            group_id=data["GroupId"],
            group_name=data["GroupName"],
            description=data.get("Description", ""),
            owner_id=data.get("OwnerId"),
            vpc_id=data.get("VpcId"),
            ip_permissions=[IpPermission.from_response(p) for p in data.get("IpPermissions", [])],
            ip_permissions_egress=[
                IpPermission.from_response(p) for p in data.get("IpPermissionsEgress", [])
            ],
            tags=tags_to_dict(data.get("Tags")),
        )
