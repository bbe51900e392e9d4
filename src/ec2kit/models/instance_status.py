"""Instance status model for ``describe_instance_status`` results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InstanceStatus(BaseModel):
    """Status checks and scheduled events of one instance.

    Attributes:
        instance_id: EC2 instance ID.
        availability_zone: Availability zone of the instance.
        state: Instance state name (e.g., 'running').
        system_status: Summary of the system status checks ('ok', 'impaired', ...).
        instance_status: Summary of the instance status checks.
        events: Codes of scheduled events (e.g., 'system-reboot').
    """

    model_config = ConfigDict(frozen=True)

    instance_id: str
    availability_zone: str | None = None
    state: str
    system_status: str | None = None
    instance_status: str | None = None
    events: list[str] = Field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        """True when both status check summaries report 'ok'."""
        return self.system_status == "ok" and self.instance_status == "ok"

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "InstanceStatus":
        return cls(
            instance_id=data["InstanceId"],
            availability_zone=data.get("AvailabilityZone"),
            state=data["InstanceState"]["Name"],
            system_status=data.get("SystemStatus", {}).get("Status"),
            instance_status=data.get("InstanceStatus", {}).get("Status"),
            events=[event["Code"] for event in data.get("Events", [])],
        )
