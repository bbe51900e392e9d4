"""Tag models.

EC2 returns tags as ``[{"Key": ..., "Value": ...}]`` lists. Wrapper types
expose them as plain dictionaries, and ``describe_tags`` results as
:class:`TagDescription` rows.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def tags_to_dict(raw_tags: Iterable[dict[str, Any]] | None) -> dict[str, str]:
    """Convert an EC2 tag list into a key/value dictionary.

    Args:
        raw_tags: Tag list from an EC2 response, or None.

    Returns:
        Dictionary mapping tag keys to values.
    """
    return {tag["Key"]: tag.get("Value", "") for tag in raw_tags or []}


class TagDescription(BaseModel):
    """One tag on one resource, as returned by ``describe_tags``.

    Attributes:
        resource_id: ID of the tagged resource (e.g., 'i-1234567890abcdef0').
        resource_type: Resource type (e.g., 'instance', 'security-group').
        key: Tag key.
        value: Tag value.
    """

    model_config = ConfigDict(frozen=True)

    resource_id: str
    resource_type: str
    key: str = Field(..., min_length=1, max_length=128)
    value: str = Field("", max_length=256)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "TagDescription":
        """Build from one entry of a ``DescribeTags`` response."""
        return cls(
            resource_id=data["ResourceId"],
            resource_type=data["ResourceType"],
            key=data["Key"],
            value=data.get("Value", ""),
        )
