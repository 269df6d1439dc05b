"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import CeremonyProfile, ImporterConfig

__all__ = [
    "CeremonyProfile",
    "ConfigLocator",
    "ConfigRepository",
    "ImporterConfig",
]
