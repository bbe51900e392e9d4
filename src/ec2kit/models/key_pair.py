"""Key pair wrapper model."""

import logging
import os
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

logger: Final = logging.getLogger(__name__)


class KeyPair(BaseModel):
    """Model representing an EC2 key pair.

    ``material`` (the private key) is only present on the key pair returned
    by ``create_key_pair``; EC2 never returns it again.

    Attributes:
        name: Key pair name.
        fingerprint: Key fingerprint.
        key_pair_id: Key pair ID (e.g., 'key-0123456789abcdef0').
        material: Unencrypted PEM-encoded private key, if known.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=255)
    fingerprint: str | None = None
    key_pair_id: str | None = None
    material: str | None = Field(default=None, repr=False)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "KeyPair":
        """Build from a ``DescribeKeyPairs`` entry or a ``CreateKeyPair`` response."""
        return cls(
            name=data["KeyName"],
            fingerprint=data.get("KeyFingerprint"),
            key_pair_id=data.get("KeyPairId"),
            material=data.get("KeyMaterial"),
        )

    def save(self, directory: str | os.PathLike[str]) -> Path:
        """Write the private key to ``<directory>/<name>.pem``.

        The file is readable by its owner only; ssh refuses keys with wider
        permissions.

        Args:
            directory: Target directory, created if missing.

        Returns:
            Path of the written key file.

        Raises:
            ValueError: If this key pair carries no private key material.
        """
        if self.material is None:
            raise ValueError(f"Key pair {self.name} has no private key material")

        target_dir = Path(directory).expanduser()
        target_dir.mkdir(parents=True, exist_ok=True)
        key_file = target_dir / f"{self.name}.pem"
        fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            # O_CREAT leaves the mode of an existing file untouched
            os.fchmod(handle.fileno(), 0o600)
            handle.write(self.material)

        logger.info(f"Saved private key for {self.name} to {key_file}")
        return key_file
