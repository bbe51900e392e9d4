"""EC2 facade: instances, key pairs, security groups and paginated lists.

This module provides :class:`EC2Manager`, a thin convenience layer over the
boto3 EC2 client. Every operation delegates to one EC2 API call (or one
call per page) through the AWSClientWrapper and maps the response into the
read-only wrapper types of :mod:`ec2kit.models`.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Final

from pydantic import ValidationError as PydanticValidationError

from ec2kit.aws.client import AWSClientWrapper, create_aws_client
from ec2kit.aws.exceptions import (
    ResourceNotFoundError,
    TimeoutError,
    ValidationError,
)
from ec2kit.aws.sequencer import TokenSequencer
from ec2kit.config.settings import Settings, get_settings
from ec2kit.constants import DEFAULT_INSTANCE_TYPE
from ec2kit.models import (
    Instance,
    InstanceStatus,
    KeyPair,
    ReservedInstancesOffering,
    SecurityGroup,
    TagDescription,
)

logger: Final = logging.getLogger(__name__)

Filters = Sequence[dict[str, Any]]


def _parse_instance(data: dict[str, Any]) -> Instance:
    """Parse AWS API instance data into an Instance.

    Raises:
        ValidationError: If instance data doesn't match the model.
    """
    try:
        return Instance.from_response(data)
    except (KeyError, PydanticValidationError) as e:
        logger.error(f"Failed to parse instance data: {e}")
        raise ValidationError(
            f"Invalid instance data: {e}",
            service="ec2",
            operation="parse_instance",
        ) from e


def _parse_reservation(data: dict[str, Any]) -> list[Instance]:
    return [_parse_instance(instance) for instance in data.get("Instances", [])]


def _instance_ids(instances: Iterable[Instance | str]) -> list[str]:
    return [i.instance_id if isinstance(i, Instance) else i for i in instances]


def _state_changes(response: dict[str, Any], key: str) -> dict[str, str]:
    """Map instance IDs to their previous state from a start/stop/terminate response."""
    return {
        change["InstanceId"]: change["PreviousState"]["Name"] for change in response.get(key, [])
    }


class EC2Manager:
    """Convenience facade over the EC2 API with automatic throttling.

    Example:
        >>> ec2 = EC2Manager(region="us-east-1")
        >>> key_pair = await ec2.create_key_pair("deploy")
        >>> instances = await ec2.run_and_await("ami-0abcdef1234567890", key_pair)
        >>> await ec2.terminate(*instances)
    """

    def __init__(
        self,
        region: str | None = None,
        client: AWSClientWrapper | None = None,
        *,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize EC2 manager.

        Args:
            region: AWS region name. Defaults to ``settings.aws_region``.
            client: Optional pre-configured AWSClientWrapper. If None, creates a new one.
                Defaults to None.
            access_key_id: Explicit access key ID, overriding settings.
            secret_access_key: Explicit secret access key, overriding settings.
            settings: Settings to use. Defaults to the cached settings.

        Raises:
            ValidationError: If only one of the explicit credentials is given.

        Example:
            >>> manager = EC2Manager(region="us-west-2")
            >>> # Or with existing client:
            >>> client = create_aws_client("ec2", region="eu-west-1")
            >>> manager = EC2Manager(client=client)
        """
        self.settings = settings or get_settings()

        if client is None:
            self.region = region or self.settings.aws_region
            client = create_aws_client(
                "ec2",
                region=self.region,
                **self._client_kwargs(access_key_id, secret_access_key),
            )
        else:
            self.region = region or client.region

        self.client = client
        logger.info(f"Initialized EC2Manager for region {self.region}")

    def _client_kwargs(
        self, access_key_id: str | None, secret_access_key: str | None
    ) -> dict[str, str]:
        kwargs = self.settings.client_kwargs()
        if access_key_id or secret_access_key:
            if not (access_key_id and secret_access_key):
                raise ValidationError(
                    "access_key_id and secret_access_key must be given together", service="ec2"
                )
            kwargs["aws_access_key_id"] = access_key_id
            kwargs["aws_secret_access_key"] = secret_access_key
        return kwargs

    @classmethod
    def from_credentials(
        cls, access_key_id: str, secret_access_key: str, region: str | None = None
    ) -> "EC2Manager":
        """Create a manager authenticated with an explicit access key pair.

        Args:
            access_key_id: AWS access key ID.
            secret_access_key: AWS secret access key.
            region: AWS region name. Defaults to ``settings.aws_region``.

        Returns:
            A new EC2Manager.
        """
        return cls(region, access_key_id=access_key_id, secret_access_key=secret_access_key)

    def at(self, region: str) -> "EC2Manager":
        """Rebind this manager to another region.

        The credentials and endpoint of the current client are kept.

        Args:
            region: AWS region name.

        Returns:
            This manager, now bound to ``region``.

        Example:
            >>> ec2 = EC2Manager().at("ap-northeast-1")
        """
        self.client = self.client.for_region(region)
        self.region = region
        logger.info(f"EC2Manager now bound to region {region}")
        return self

    # =========================================================================
    # Instances
    # =========================================================================

    async def describe_instances(
        self,
        instance_ids: Sequence[str] | None = None,
        filters: Filters | None = None,
    ) -> list[Instance]:
        """Describe EC2 instances with optional filtering.

        Every page of every reservation is collected.

        Args:
            instance_ids: Specific instance IDs to describe. If None, describes all
                instances matching filters. Defaults to None.
            filters: AWS API filters in the format [{"Name": "...", "Values": [...]}].
                Defaults to None.

        Returns:
            List of Instance objects, in response order.

        Raises:
            ResourceNotFoundError: If one of ``instance_ids`` does not exist.
            ValidationError: If instance IDs are malformed.
            EC2Error: If AWS API call fails.

        Example:
            >>> filters = [{"Name": "instance-state-name", "Values": ["running"]}]
            >>> instances = await manager.describe_instances(filters=filters)
        """
        logger.debug(f"Describing instances: ids={instance_ids}, filters={filters is not None}")

        params: dict[str, Any] = {}
        if instance_ids:
            params["InstanceIds"] = list(instance_ids)
        if filters:
            params["Filters"] = list(filters)

        reservations = await TokenSequencer(
            self.client, "describe_instances", "Reservations", _parse_reservation, params
        ).sequence()
        instances = [instance for reservation in reservations for instance in reservation]

        logger.info(f"Described {len(instances)} instance(s)")
        return instances

    async def instances(self, *instance_ids: str) -> list[Instance]:
        """List all instances, or only the given ones.

        Args:
            *instance_ids: Instance IDs to describe. None means all instances.

        Returns:
            List of Instance objects.

        Example:
            >>> everything = await ec2.instances()
            >>> two = await ec2.instances("i-1234567890abcdef0", "i-0fedcba0987654321")
        """
        return await self.describe_instances(instance_ids=list(instance_ids) or None)

    async def instance(self, instance_id: str) -> Instance | None:
        """Describe a single instance.

        Args:
            instance_id: EC2 instance ID.

        Returns:
            The Instance, or None if it does not exist.
        """
        try:
            found = await self.describe_instances(instance_ids=[instance_id])
        except ResourceNotFoundError:
            return None
        return found[0] if found else None

    async def get_instance_state(self, instance_id: str) -> str:
        """Get the current state of a specific instance.

        Args:
            instance_id: EC2 instance ID.

        Returns:
            Current state name (e.g., 'running', 'stopped').

        Raises:
            ResourceNotFoundError: If instance doesn't exist.
            EC2Error: If AWS API call fails.
        """
        logger.debug(f"Getting state for instance {instance_id}")

        found = await self.instance(instance_id)
        if found is None:
            raise ResourceNotFoundError(
                f"Instance {instance_id} not found",
                service="ec2",
                operation="describe_instances",
            )
        return found.state

    async def run_instances(
        self,
        image_id: str,
        key_pair: KeyPair | str | None = None,
        instance_type: str = DEFAULT_INSTANCE_TYPE,
        min_count: int = 1,
        max_count: int = 1,
        **params: Any,
    ) -> list[Instance]:
        """Launch instances.

        Args:
            image_id: AMI ID to launch.
            key_pair: Key pair (or key pair name) to launch with. Defaults to None.
            instance_type: Instance type. Defaults to 't1.micro'.
            min_count: Minimum number of instances to launch. Defaults to 1.
            max_count: Maximum number of instances to launch. Defaults to 1.
            **params: Further ``RunInstances`` parameters (e.g. ``SecurityGroupIds``,
                ``SubnetId``, ``TagSpecifications``), passed through unchanged.

        Returns:
            The launched instances as reported at launch (usually 'pending').

        Raises:
            ValidationError: If the counts are inconsistent or EC2 rejects a parameter.
            EC2Error: If AWS API call fails.
        """
        if min_count < 1 or max_count < min_count:
            raise ValidationError(
                f"Invalid instance counts: min={min_count}, max={max_count}", service="ec2"
            )

        request: dict[str, Any] = {
            "ImageId": image_id,
            "MinCount": min_count,
            "MaxCount": max_count,
            "InstanceType": instance_type,
        }
        if key_pair is not None:
            request["KeyName"] = key_pair.name if isinstance(key_pair, KeyPair) else key_pair
        request.update(params)

        logger.info(f"Launching {min_count}-{max_count} {instance_type} instance(s) from {image_id}")

        response = await self.client.call("run_instances", **request)
        launched = [_parse_instance(data) for data in response.get("Instances", [])]

        logger.info(f"Launched {len(launched)} instance(s): {_instance_ids(launched)}")
        return launched

    async def run_and_await(
        self,
        image_id: str,
        key_pair: KeyPair | str | None = None,
        instance_type: str = DEFAULT_INSTANCE_TYPE,
        min_count: int = 1,
        max_count: int = 1,
        timeout: float | None = None,
        **params: Any,
    ) -> list[Instance]:
        """Launch instances and wait until none of them is pending.

        Takes the same arguments as :meth:`run_instances`, plus ``timeout``.

        Args:
            image_id: AMI ID to launch.
            key_pair: Key pair (or key pair name) to launch with. Defaults to None.
            instance_type: Instance type. Defaults to 't1.micro'.
            min_count: Minimum number of instances to launch. Defaults to 1.
            max_count: Maximum number of instances to launch. Defaults to 1.
            timeout: Seconds to wait before giving up. Defaults to None (wait forever).
            **params: Further ``RunInstances`` parameters.

        Returns:
            The launched instances as last observed, in launch order.

        Raises:
            TimeoutError: If ``timeout`` elapses while an instance is still pending.

        Example:
            >>> instances = await ec2.run_and_await(
            ...     "ami-0abcdef1234567890",
            ...     key_pair,
            ...     instance_type="t3.micro",
            ...     SecurityGroupIds=["sg-0123456789abcdef0"],
            ... )
            >>> [i.state for i in instances]
            ['running']
        """
        launched = await self.run_instances(
            image_id, key_pair, instance_type, min_count, max_count, **params
        )
        return await self.await_instances(launched, timeout=timeout)

    async def await_instances(
        self,
        instances: Sequence[Instance],
        timeout: float | None = None,
        check_interval: float | None = None,
    ) -> list[Instance]:
        """Poll until none of the given instances is pending.

        While any instance is pending, sleeps ``check_interval`` seconds and
        describes the instances again. An instance missing from a describe
        result (EC2 is eventually consistent right after a launch) keeps its
        previous snapshot.

        Args:
            instances: Instances to watch.
            timeout: Seconds to wait before giving up. Defaults to None (wait forever).
            check_interval: Seconds between polls. Defaults to
                ``settings.check_interval_seconds``.

        Returns:
            The instances as last observed, in the given order.

        Raises:
            TimeoutError: If ``timeout`` elapses while an instance is still pending.
        """
        interval = (
            check_interval if check_interval is not None else self.settings.check_interval_seconds
        )
        current = list(instances)
        ids = _instance_ids(current)

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        while any(instance.is_pending for instance in current):
            delay = interval
            if timeout is not None:
                remaining = timeout - (loop.time() - start_time)
                if remaining <= 0:
                    raise TimeoutError(
                        f"Instances {ids} still pending after {timeout}s",
                        service="ec2",
                        operation="await_instances",
                    )
                # Never sleep past the deadline
                delay = min(interval, remaining)

            pending = [i.instance_id for i in current if i.is_pending]
            logger.debug(f"Waiting {delay:.2f}s for pending instance(s): {pending}")
            await asyncio.sleep(delay)

            observed = {
                instance.instance_id: instance
                for instance in await self.describe_instances(
                    filters=[{"Name": "instance-id", "Values": ids}]
                )
            }
            current = [observed.get(i.instance_id, i) for i in current]

        logger.info(f"Instance(s) no longer pending: {[(i.instance_id, i.state) for i in current]}")
        return current

    async def start_instances(
        self, instance_ids: Sequence[str], dry_run: bool = False
    ) -> dict[str, str]:
        """Start one or more EC2 instances.

        Args:
            instance_ids: Sequence of instance IDs to start.
            dry_run: If True, perform a dry run without actually starting instances.
                Defaults to False.

        Returns:
            Dictionary mapping instance IDs to their previous states.

        Raises:
            ValidationError: If instance IDs list is empty or malformed.
            EC2Error: If AWS API call fails.
        """
        if not instance_ids:
            raise ValidationError("instance_ids cannot be empty", service="ec2")

        logger.info(f"Starting {len(instance_ids)} instance(s): {instance_ids}")

        response = await self.client.call(
            "start_instances", InstanceIds=list(instance_ids), DryRun=dry_run
        )
        state_changes = _state_changes(response, "StartingInstances")

        logger.info(f"Successfully started {len(state_changes)} instance(s)")
        return state_changes

    async def stop_instances(
        self, instance_ids: Sequence[str], dry_run: bool = False, force: bool = False
    ) -> dict[str, str]:
        """Stop one or more EC2 instances.

        Args:
            instance_ids: Sequence of instance IDs to stop.
            dry_run: If True, perform a dry run without actually stopping instances.
                Defaults to False.
            force: If True, force stop the instances. Defaults to False.

        Returns:
            Dictionary mapping instance IDs to their previous states.

        Raises:
            ValidationError: If instance IDs list is empty or malformed.
            EC2Error: If AWS API call fails.
        """
        if not instance_ids:
            raise ValidationError("instance_ids cannot be empty", service="ec2")

        logger.info(f"Stopping {len(instance_ids)} instance(s): {instance_ids} (force={force})")

        response = await self.client.call(
            "stop_instances", InstanceIds=list(instance_ids), DryRun=dry_run, Force=force
        )
        state_changes = _state_changes(response, "StoppingInstances")

        logger.info(f"Successfully stopped {len(state_changes)} instance(s)")
        return state_changes

    async def reboot_instances(self, instance_ids: Sequence[str], dry_run: bool = False) -> None:
        """Reboot one or more EC2 instances.

        Args:
            instance_ids: Sequence of instance IDs to reboot.
            dry_run: If True, perform a dry run without actually rebooting instances.
                Defaults to False.

        Raises:
            ValidationError: If instance IDs list is empty or malformed.
            EC2Error: If AWS API call fails.
        """
        if not instance_ids:
            raise ValidationError("instance_ids cannot be empty", service="ec2")

        logger.info(f"Rebooting {len(instance_ids)} instance(s): {instance_ids}")

        await self.client.call("reboot_instances", InstanceIds=list(instance_ids), DryRun=dry_run)
        logger.info(f"Successfully rebooted {len(instance_ids)} instance(s)")

    async def terminate_instances(
        self, instance_ids: Sequence[str], dry_run: bool = False
    ) -> dict[str, str]:
        """Terminate one or more EC2 instances.

        Warning:
            This operation is destructive and cannot be undone.

        Args:
            instance_ids: Sequence of instance IDs to terminate.
            dry_run: If True, perform a dry run without actually terminating instances.
                Defaults to False.

        Returns:
            Dictionary mapping instance IDs to their previous states.

        Raises:
            ValidationError: If instance IDs list is empty or malformed.
            EC2Error: If AWS API call fails.
        """
        if not instance_ids:
            raise ValidationError("instance_ids cannot be empty", service="ec2")

        logger.warning(
            f"Terminating {len(instance_ids)} instance(s): {instance_ids} - THIS IS DESTRUCTIVE"
        )

        response = await self.client.call(
            "terminate_instances", InstanceIds=list(instance_ids), DryRun=dry_run
        )
        state_changes = _state_changes(response, "TerminatingInstances")

        logger.info(f"Successfully terminated {len(state_changes)} instance(s)")
        return state_changes

    async def start(self, *instances: Instance | str) -> dict[str, str]:
        """Start the given instances. See :meth:`start_instances`."""
        return await self.start_instances(_instance_ids(instances))

    async def stop(self, *instances: Instance | str) -> dict[str, str]:
        """Stop the given instances. See :meth:`stop_instances`."""
        return await self.stop_instances(_instance_ids(instances))

    async def terminate(self, *instances: Instance | str) -> dict[str, str]:
        """Terminate the given instances. See :meth:`terminate_instances`."""
        return await self.terminate_instances(_instance_ids(instances))

    async def reboot(self, *instances: Instance | str) -> None:
        """Reboot the given instances. See :meth:`reboot_instances`."""
        await self.reboot_instances(_instance_ids(instances))

    # =========================================================================
    # Key Pairs
    # =========================================================================

    async def key_pairs(self) -> list[KeyPair]:
        """List every key pair in the region."""
        response = await self.client.call("describe_key_pairs")
        return [KeyPair.from_response(data) for data in response.get("KeyPairs", [])]

    async def key_pair(self, name: str) -> KeyPair | None:
        """Look up a key pair by name.

        Args:
            name: Key pair name.

        Returns:
            The KeyPair, or None if no key pair has that name.
        """
        try:
            response = await self.client.call("describe_key_pairs", KeyNames=[name])
        except ResourceNotFoundError:
            logger.debug(f"Key pair {name} not found")
            return None

        found = [KeyPair.from_response(data) for data in response.get("KeyPairs", [])]
        return found[0] if found else None

    async def create_key_pair(self, name: str) -> KeyPair:
        """Create a key pair.

        The returned KeyPair carries the private key material, which EC2
        never returns again; see :meth:`KeyPair.save`.

        Args:
            name: Key pair name.

        Returns:
            The new KeyPair, including its private key.

        Raises:
            ValidationError: If a key pair with that name already exists.
        """
        logger.info(f"Creating key pair {name}")
        response = await self.client.call("create_key_pair", KeyName=name)
        return KeyPair.from_response(response)

    async def delete_key_pair(self, key_pair: KeyPair | str) -> None:
        """Delete a key pair, given as a KeyPair or by name."""
        name = key_pair.name if isinstance(key_pair, KeyPair) else key_pair
        logger.info(f"Deleting key pair {name}")
        await self.client.call("delete_key_pair", KeyName=name)

    # =========================================================================
    # Security Groups
    # =========================================================================

    async def security_groups(self, filters: Filters | None = None) -> list[SecurityGroup]:
        """List security groups, every page.

        Args:
            filters: AWS API filters. Defaults to None.

        Returns:
            List of SecurityGroup objects.
        """
        params: dict[str, Any] = {"Filters": list(filters)} if filters else {}
        return await TokenSequencer(
            self.client,
            "describe_security_groups",
            "SecurityGroups",
            SecurityGroup.from_response,
            params,
        ).sequence()

    async def security_group(self, name: str, vpc_id: str | None = None) -> SecurityGroup | None:
        """Look up a security group by name.

        Args:
            name: Security group name.
            vpc_id: Restrict the lookup to one VPC. Defaults to None.

        Returns:
            The first matching SecurityGroup, or None.
        """
        filters: list[dict[str, Any]] = [{"Name": "group-name", "Values": [name]}]
        if vpc_id:
            filters.append({"Name": "vpc-id", "Values": [vpc_id]})

        found = await self.security_groups(filters=filters)
        return found[0] if found else None

    async def create_security_group(
        self, name: str, description: str, vpc_id: str | None = None
    ) -> SecurityGroup | None:
        """Create a security group, then look it up by the ID EC2 assigned.

        Args:
            name: Security group name.
            description: Security group description.
            vpc_id: VPC to create the group in. Defaults to the default VPC.

        Returns:
            The new SecurityGroup, or None if the lookup does not see it yet.
        """
        request: dict[str, Any] = {"GroupName": name, "Description": description}
        if vpc_id:
            request["VpcId"] = vpc_id

        logger.info(f"Creating security group {name}")
        response = await self.client.call("create_security_group", **request)
        group_id = response["GroupId"]

        # Names are only unique per VPC
        found = await self.security_groups(filters=[{"Name": "group-id", "Values": [group_id]}])
        return next((group for group in found if group.group_id == group_id), None)

    async def delete_security_group(self, group: SecurityGroup | str) -> None:
        """Delete a security group, given as a SecurityGroup or by name.

        A SecurityGroup is deleted by ID, which also works outside the
        default VPC; a bare name is deleted by name.
        """
        if isinstance(group, SecurityGroup):
            logger.info(f"Deleting security group {group.group_name} ({group.group_id})")
            await self.client.call("delete_security_group", GroupId=group.group_id)
        else:
            logger.info(f"Deleting security group {group}")
            await self.client.call("delete_security_group", GroupName=group)

    async def delete(self, resource: KeyPair | SecurityGroup) -> None:
        """Delete a key pair or a security group.

        Raises:
            TypeError: If ``resource`` is neither.
        """
        if isinstance(resource, KeyPair):
            await self.delete_key_pair(resource)
        elif isinstance(resource, SecurityGroup):
            await self.delete_security_group(resource)
        else:
            raise TypeError(f"Cannot delete {type(resource).__name__}")

    # =========================================================================
    # Paginated Lists
    # =========================================================================

    async def tags(self, filters: Filters = ()) -> list[TagDescription]:
        """List tags across resources, every page.

        Args:
            filters: AWS API filters (e.g. ``resource-type``, ``key``). Defaults to none.

        Returns:
            List of TagDescription rows.

        Example:
            >>> rows = await ec2.tags([{"Name": "resource-type", "Values": ["instance"]}])
        """
        params: dict[str, Any] = {"Filters": list(filters)} if filters else {}
        return await TokenSequencer(
            self.client, "describe_tags", "Tags", TagDescription.from_response, params
        ).sequence()

    async def instance_statuses(
        self,
        include_all: bool = False,
        instance_ids: Sequence[str] = (),
        filters: Filters = (),
    ) -> list[InstanceStatus]:
        """List instance status checks, every page.

        Args:
            include_all: Include instances that are not running. Defaults to False.
            instance_ids: Restrict to these instances. Defaults to all.
            filters: AWS API filters. Defaults to none.

        Returns:
            List of InstanceStatus objects.
        """
        params: dict[str, Any] = {"IncludeAllInstances": include_all}
        if instance_ids:
            params["InstanceIds"] = list(instance_ids)
        if filters:
            params["Filters"] = list(filters)

        return await TokenSequencer(
            self.client,
            "describe_instance_status",
            "InstanceStatuses",
            InstanceStatus.from_response,
            params,
        ).sequence()

    async def reserved_instance_offerings(
        self,
        availability_zone: str | None = None,
        filters: Filters = (),
    ) -> list[ReservedInstancesOffering]:
        """List reserved instances offerings, every page.

        Args:
            availability_zone: Restrict to one zone. Defaults to None (any zone).
            filters: AWS API filters (e.g. ``instance-type``). Defaults to none.

        Returns:
            List of ReservedInstancesOffering objects.
        """
        params: dict[str, Any] = {}
        if availability_zone is not None:
            params["AvailabilityZone"] = availability_zone
        if filters:
            params["Filters"] = list(filters)

        return await TokenSequencer(
            self.client,
            "describe_reserved_instances_offerings",
            "ReservedInstancesOfferings",
            ReservedInstancesOffering.from_response,
            params,
        ).sequence()
