"""Dispute resolution, reward distribution, and restaking."""

from .disputes import DisputeResolver
from .rewards import RewardDistributor
from .restake import RestakeBridge

__all__ = [
    "DisputeResolver",
    "RewardDistributor",
    "RestakeBridge",
]
