"""
Platform configuration.

Fee split, bond minimums, and dispute windows. All amounts are integers in
base units; all periods are seconds.
"""

from dataclasses import dataclass

UNIT = 10**18  # Base units per whole token
DAY = 86400


@dataclass
class PlatformConfig:
    """
    Configuration for a FairplayPlatform.

    Attributes:
        owner: Privileged principal allowed to resolve challenged proposals
        protocol_account: Account credited with the protocol share (default: owner)
        platform_fee_percent: Fee taken from every stake into the reward pool
        creator_share_percent: Share of the reward pool paid to the market creator
        protocol_share_percent: Share of the reward pool paid to the protocol
        min_proposal_bond: Minimum bond attached to a proposal
        min_challenge_bond: Minimum bond attached to a challenge
        min_seed: Minimum creator deposit; split evenly across YES and NO
        liveness_period: Seconds a proposal stays open to challenge
        challenge_period: Seconds after resolution_time before rewards distribute
    """
    owner: str = "owner"
    protocol_account: str | None = None
    platform_fee_percent: int = 1
    creator_share_percent: int = 10
    protocol_share_percent: int = 10
    min_proposal_bond: int = UNIT // 10
    min_challenge_bond: int = UNIT // 10
    min_seed: int = 2
    liveness_period: int = DAY
    challenge_period: int = 3 * DAY

    def __post_init__(self):
        for name in ("platform_fee_percent", "creator_share_percent", "protocol_share_percent"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be in [0, 100], got {value}")
        if self.creator_share_percent + self.protocol_share_percent > 100:
            raise ValueError("creator and protocol shares cannot exceed 100 percent")
        if self.min_proposal_bond <= 0 or self.min_challenge_bond <= 0:
            raise ValueError("bond minimums must be positive")
        if self.min_seed < 2:
            raise ValueError("min_seed must be at least 2 so both sides are seeded")
        if self.liveness_period <= 0 or self.challenge_period <= 0:
            raise ValueError("liveness_period and challenge_period must be positive")
        if self.protocol_account is None:
            self.protocol_account = self.owner

    @property
    def staker_share_percent(self) -> int:
        """Share of the reward pool left for winning stakers."""
        return 100 - self.creator_share_percent - self.protocol_share_percent
