"""Fee tier to tick spacing resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

import structlog

from quote_engine.errors import UnknownFeeTier

logger = structlog.get_logger()

# Fee tiers in Uniswap units (hundredths of a basis point)
# Fee = units / 1,000,000 (e.g., 3000 = 0.3%)
FEE_LOW = 500  # 0.05% - stable pairs
FEE_MEDIUM = 3000  # 0.30% - most pairs
FEE_HIGH = 10000  # 1.00% - exotic pairs

FEE_TIERS = [FEE_LOW, FEE_MEDIUM, FEE_HIGH]

# Tick spacing per fee tier
DEFAULT_TICK_SPACINGS: Mapping[int, int] = MappingProxyType(
    {
        FEE_LOW: 10,
        FEE_MEDIUM: 60,
        FEE_HIGH: 200,
    }
)

# Spacing used for any fee not in the table (the 0.3% tier's)
FALLBACK_TICK_SPACING = 60


@dataclass(frozen=True)
class TickSpacingResolution:
    """Outcome of resolving a fee tier.

    ``known`` is False when the fee was not in the registry and the
    fallback spacing was substituted.
    """

    fee: int
    tick_spacing: int
    known: bool


class FeeTierRegistry:
    """Static mapping from fee tier to tick spacing.

    Unknown fees silently resolve to ``FALLBACK_TICK_SPACING`` unless the
    registry is strict. A caller that mistypes a fee tier therefore gets the
    0.3% tier's spacing and a pool id that most likely does not exist.
    """

    def __init__(
        self,
        extra_tiers: Mapping[int, int] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        """Initialize the registry.

        Args:
            extra_tiers: Additional fee -> tick spacing entries. These override
                the defaults for the same fee.
            strict: If True, ``resolve`` raises UnknownFeeTier for fees not in
                the table instead of falling back.
        """
        tiers = dict(DEFAULT_TICK_SPACINGS)
        if extra_tiers:
            tiers.update(extra_tiers)
        self._tiers: Mapping[int, int] = MappingProxyType(tiers)
        self.strict = strict

    @property
    def tiers(self) -> Mapping[int, int]:
        """Read-only view of the fee -> tick spacing table."""
        return self._tiers

    def tick_spacing(self, fee: int) -> int:
        """Tick spacing for a fee tier. Total: never raises."""
        return self._tiers.get(fee, FALLBACK_TICK_SPACING)

    def is_known(self, fee: int) -> bool:
        return fee in self._tiers

    def resolve(self, fee: int) -> TickSpacingResolution:
        """Resolve a fee tier, flagging (and logging) the fallback case.

        Raises:
            UnknownFeeTier: If the registry is strict and the fee is unknown
        """
        if fee in self._tiers:
            return TickSpacingResolution(fee=fee, tick_spacing=self._tiers[fee], known=True)

        if self.strict:
            raise UnknownFeeTier(
                f"Unknown fee tier {fee}; known tiers: {sorted(self._tiers)}"
            )

        logger.warning(
            "unknown_fee_tier",
            fee=fee,
            fallback_tick_spacing=FALLBACK_TICK_SPACING,
            known_tiers=sorted(self._tiers),
        )
        return TickSpacingResolution(fee=fee, tick_spacing=FALLBACK_TICK_SPACING, known=False)


__all__ = [
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "DEFAULT_TICK_SPACINGS",
    "FALLBACK_TICK_SPACING",
    "TickSpacingResolution",
    "FeeTierRegistry",
]
