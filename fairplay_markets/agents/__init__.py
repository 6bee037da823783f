"""Staker implementations for no-loss market simulation."""

from .base import Staker, Position
from .informed import InformedStaker
from .noise import NoiseStaker, NoiseStakerType

__all__ = [
    # Base classes
    "Staker",
    "Position",
    # Staker types
    "InformedStaker",
    "NoiseStaker",
    "NoiseStakerType",
]
