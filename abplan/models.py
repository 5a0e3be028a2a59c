from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class MetricType(str, Enum):
    BINARY = "Binary"
    CONTINUOUS = "Continuous"


class CalculationMode(str, Enum):
    MDE_TO_SAMPLE_SIZE = "mdeToSampleSize"
    SAMPLE_SIZE_TO_MDE = "sampleSizeToMde"


class ResolutionSource(str, Enum):
    HISTORICAL = "historical"
    BASELINE = "baseline"


class RowStatus(str, Enum):
    OK = "ok"
    ERROR = "Error"


@dataclass(frozen=True)
class MetricObservation:
    """A historical data point for one metric on one surface over a lookback window."""

    metric: str
    real_estate: str
    metric_type: MetricType
    lookback_days: int
    mean: float
    variance: float
    total_users: int

    @property
    def daily_traffic(self) -> float:
        return self.total_users / self.lookback_days if self.lookback_days > 0 else 0.0


@dataclass(frozen=True)
class ByMde:
    """Input side: relative MDE as a fraction (0.02 == 2%)."""

    value: float


@dataclass(frozen=True)
class BySampleSize:
    """Input side: users per variant."""

    value: int


Target = Union[ByMde, BySampleSize]


@dataclass(frozen=True)
class CalculationRequest:
    metric: str
    real_estate: str
    metric_type: MetricType
    target: Target
    mean: Optional[float] = None
    # None on a Binary metric means "derive p*(1-p)".
    variance: Optional[float] = None
    statistical_power: float = 0.8
    significance_level: float = 0.05
    number_of_variants: int = 2
    target_duration_days: int = 14
    total_users_in_selected_duration: Optional[int] = None
    daily_traffic: Optional[float] = None

    @property
    def mode(self) -> CalculationMode:
        if isinstance(self.target, BySampleSize):
            return CalculationMode.SAMPLE_SIZE_TO_MDE
        return CalculationMode.MDE_TO_SAMPLE_SIZE


@dataclass(frozen=True)
class CalculationResult:
    mode: CalculationMode
    sample_size_per_variant: Optional[int]
    minimum_detectable_effect: Optional[float]
    total_sample_size_for_experiment: Optional[int]
    exposure_needed: Optional[float]
    confidence_level: float
    power_level: float
    warnings: List[str] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        """True when the output side of the calculation was produced."""
        if self.mode is CalculationMode.MDE_TO_SAMPLE_SIZE:
            return self.sample_size_per_variant is not None
        return self.minimum_detectable_effect is not None

    @property
    def minimum_detectable_effect_percent(self) -> Optional[float]:
        if self.minimum_detectable_effect is None:
            return None
        return self.minimum_detectable_effect * 100

    @property
    def exposure_needed_percent(self) -> Optional[float]:
        if self.exposure_needed is None:
            return None
        return self.exposure_needed * 100


@dataclass(frozen=True)
class Resolution:
    """Inputs picked for one duration, tagged with where they came from."""

    source: ResolutionSource
    mean: Optional[float]
    variance: Optional[float]
    total_users: Optional[int]
    observation: Optional[MetricObservation] = None
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DurationSweepRow:
    duration_days: int
    mean_used: Optional[float]
    variance_used: Optional[float]
    total_users_available: Optional[int]
    source: ResolutionSource
    result: Optional[CalculationResult]
    warnings: List[str] = field(default_factory=list)
    status: RowStatus = RowStatus.OK

    @property
    def is_error(self) -> bool:
        return self.status is RowStatus.ERROR
