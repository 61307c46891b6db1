"""
Road module for the SafeSpeed system.

Defines the closed set of road surfaces an administrator can configure.
"""

from enum import Enum


class Surface(str, Enum):
    """Road surface type. Values match the stored JSON representation."""

    ASPHALT = "asphalt"
    GRAVEL = "gravel"
    DIRT = "dirt"
