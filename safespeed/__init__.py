"""
SafeSpeed: fleet-safety speed recommendations.

This package computes a maximum safe speed from an administrator-configured
base limit and independent safety factors (road surface, time of day,
precipitation and wind), and provides the storage, weather, authentication
and history collaborators used by the web dashboard.
"""

from .speed_rule import evaluate

__all__ = ['evaluate']
