"""
Zone Model

Intensity bands anchored to a single scalar:
- pace zones (running): 6 bands as multipliers of the 5K-equivalent pace
- power zones (cycling): 6 bands as fractions of FTP
- heart-rate zones: 5 bands as fractions of max HR (secondary target)

Bands are ordered by intensity and never overlap. For pace zones the
numbers fall as intensity rises (faster pace = fewer min/km).

When history gives no anchor the model falls back to tier defaults so
downstream synthesis always has targets.

Usage:
    zones = build_zone_model(Sport.RUNNING, tier, anchor_pace=profile.best_pace)
    zones.describe("Z4")  # "4:48-5:14 /km"
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_ANCHOR_PACE,
    DEFAULT_MAX_HEART_RATE,
    DEFAULT_WEIGHT_KG,
    FTP_WATTS_PER_KG,
    FitnessTier,
    HEART_RATE_ZONE_MULTIPLIERS,
    PACE_ZONE_MULTIPLIERS,
    POWER_ZONE_MULTIPLIERS,
    Sport,
    ZoneKind,
)
from .formatting import format_pace

logger = logging.getLogger(__name__)

SOURCE_HISTORY = "history"
SOURCE_TIER_DEFAULT = "tier_default"
SOURCE_USER = "user"
SOURCE_WEIGHT_ESTIMATE = "weight_estimate"


@dataclass(frozen=True)
class ZoneBand:
    name: str
    label: str
    low: float
    high: float


@dataclass
class ZoneModel:
    kind: ZoneKind
    anchor: float
    bands: List[ZoneBand] = field(default_factory=list)
    source: str = SOURCE_HISTORY

    def band(self, name: str) -> ZoneBand:
        """Look up a band; zones above the model's top band clamp to it."""
        for band in self.bands:
            if band.name == name:
                return band
        return self.bands[-1]

    def describe(self, name: str) -> str:
        band = self.band(name)
        if self.kind == ZoneKind.PACE:
            # faster bound first
            return f"{format_pace(band.low)}-{format_pace(band.high)} /km"
        if self.kind == ZoneKind.POWER:
            return f"{int(band.low)}-{int(band.high)} W"
        return f"{int(band.low)}-{int(band.high)} bpm"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "anchor": self.anchor,
            "source": self.source,
            "bands": [
                {"name": b.name, "label": b.label, "low": b.low, "high": b.high}
                for b in self.bands
            ],
        }


def _bands(
    anchor: float,
    multipliers: List[Tuple[str, str, float, float]],
    digits: Optional[int],
) -> List[ZoneBand]:
    bands = []
    for name, label, a, b in multipliers:
        low, high = sorted((anchor * a, anchor * b))
        bands.append(ZoneBand(
            name=name,
            label=label,
            low=round(low, digits) if digits else round(low),
            high=round(high, digits) if digits else round(high),
        ))
    return bands


def pace_zones(anchor_pace: float, source: str = SOURCE_HISTORY) -> ZoneModel:
    """Pace zones from a 5K-equivalent pace in min/km."""
    if anchor_pace <= 0:
        raise ValueError("anchor pace must be positive")
    return ZoneModel(
        kind=ZoneKind.PACE,
        anchor=round(anchor_pace, 4),
        bands=_bands(anchor_pace, PACE_ZONE_MULTIPLIERS, digits=2),
        source=source,
    )


def power_zones(ftp_watts: float, source: str = SOURCE_USER) -> ZoneModel:
    """Power zones from Functional Threshold Power."""
    if ftp_watts <= 0:
        raise ValueError("FTP must be positive")
    return ZoneModel(
        kind=ZoneKind.POWER,
        anchor=round(ftp_watts),
        bands=_bands(ftp_watts, POWER_ZONE_MULTIPLIERS, digits=None),
        source=source,
    )


def heart_rate_zones(max_heart_rate: Optional[int]) -> ZoneModel:
    """Heart-rate zones; uses a population default without a max HR."""
    source = SOURCE_HISTORY
    if not max_heart_rate:
        max_heart_rate = DEFAULT_MAX_HEART_RATE
        source = SOURCE_TIER_DEFAULT
    return ZoneModel(
        kind=ZoneKind.HEART_RATE,
        anchor=max_heart_rate,
        bands=_bands(max_heart_rate, HEART_RATE_ZONE_MULTIPLIERS, digits=None),
        source=source,
    )


def estimate_ftp(weight_kg: Optional[float], tier: FitnessTier) -> int:
    """FTP from body weight and the tier's typical W/kg."""
    weight = weight_kg if weight_kg and weight_kg > 0 else DEFAULT_WEIGHT_KG
    return round(weight * FTP_WATTS_PER_KG[tier])


def build_zone_model(
    sport: Sport,
    tier: FitnessTier,
    anchor_pace: Optional[float] = None,
    ftp_watts: Optional[float] = None,
    weight_kg: Optional[float] = None,
) -> ZoneModel:
    """
    Primary zone model for a sport.

    Running anchors on the supplied pace, else the tier default pace.
    Cycling anchors on the supplied FTP, else an estimate from weight.
    """
    if sport == Sport.CYCLING:
        if ftp_watts and ftp_watts > 0:
            return power_zones(ftp_watts, source=SOURCE_USER)
        ftp = estimate_ftp(weight_kg, tier)
        logger.info(f"No FTP supplied; estimated {ftp}W for {tier.value}")
        return power_zones(ftp, source=SOURCE_WEIGHT_ESTIMATE)

    if anchor_pace and anchor_pace > 0:
        return pace_zones(anchor_pace, source=SOURCE_HISTORY)
    logger.info(f"No pace anchor; using {tier.value} default zones")
    return pace_zones(DEFAULT_ANCHOR_PACE[tier], source=SOURCE_TIER_DEFAULT)
