"""Constants used throughout ec2kit.

This module contains values that do not depend on runtime configuration
or environment variables. For environment-based configuration, see the
config module.
"""

from typing import Final

# =============================================================================
# Instance Launching
# =============================================================================

DEFAULT_INSTANCE_TYPE: Final[str] = "t1.micro"
"""Instance type used by run_instances/run_and_await when none is given."""

DEFAULT_CHECK_INTERVAL: Final[float] = 5.0
"""Seconds between describe calls while waiting for launched instances."""

# =============================================================================
# Instance States
# =============================================================================

INSTANCE_STATE_PENDING: Final[str] = "pending"
INSTANCE_STATE_RUNNING: Final[str] = "running"

INSTANCE_STATES: Final[frozenset[str]] = frozenset(
    {
        "pending",
        "running",
        "shutting-down",
        "terminated",
        "stopping",
        "stopped",
    }
)
"""Every state name EC2 reports for an instance."""

# =============================================================================
# Tags
# =============================================================================

NAME_TAG: Final[str] = "Name"
"""Tag key the EC2 console displays as the resource name."""

# =============================================================================
# Logging
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
