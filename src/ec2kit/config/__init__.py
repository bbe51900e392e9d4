"""Configuration management for ec2kit.

This module exports the main Settings class and configuration utilities.
"""

from ec2kit.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
