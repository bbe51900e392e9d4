"""Reserved instances offering model."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ReservedInstancesOffering(BaseModel):
    """One purchasable reserved instances offering.

    Attributes:
        offering_id: Offering ID.
        instance_type: Instance type covered by the reservation.
        availability_zone: Zone the offering is scoped to, None for regional offerings.
        duration: Term length in seconds.
        fixed_price: Upfront price.
        usage_price: Hourly usage price.
        currency_code: Currency of the prices (e.g., 'USD').
        product_description: Platform (e.g., 'Linux/UNIX').
        offering_type: Payment option (e.g., 'No Upfront').
        instance_tenancy: Tenancy ('default', 'dedicated').
        marketplace: True for Reserved Instance Marketplace offerings.
    """

    model_config = ConfigDict(frozen=True)

    offering_id: str
    instance_type: str
    availability_zone: str | None = None
    duration: int | None = None
    fixed_price: float | None = None
    usage_price: float | None = None
    currency_code: str | None = None
    product_description: str | None = None
    offering_type: str | None = None
    instance_tenancy: str | None = None
    marketplace: bool = False

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "ReservedInstancesOffering":
        return cls(
            offering_id=data["ReservedInstancesOfferingId"],
            instance_type=data["InstanceType"],
            availability_zone=data.get("AvailabilityZone"),
            duration=data.get("Duration"),
            fixed_price=data.get("FixedPrice"),
            usage_price=data.get("UsagePrice"),
            currency_code=data.get("CurrencyCode"),
            product_description=data.get("ProductDescription"),
            offering_type=data.get("OfferingType"),
            instance_tenancy=data.get("InstanceTenancy"),
            marketplace=data.get("Marketplace", False),
        )
