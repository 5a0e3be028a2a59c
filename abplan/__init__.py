"""Sample-size and MDE planning for A/B tests."""

from .models import (
    ByMde,
    BySampleSize,
    CalculationMode,
    CalculationRequest,
    CalculationResult,
    DurationSweepRow,
    MetricObservation,
    MetricType,
    Resolution,
    ResolutionSource,
    RowStatus,
)
from .critical_values import lookup_z_scores, z_alpha_over_2, z_beta
from .formulas import (
    exposure_needed,
    mde_for_z,
    mde_from_sample_size,
    required_duration_days,
    sample_size_for_z,
    sample_size_from_mde,
    variance_for_binary,
)
from .resolver import resolve, resolve_inputs
from .calculator import compute_mde_or_sample_size
from .sweep import DEFAULT_SWEEP_DURATIONS, compute_duration_row, compute_duration_sweep, sweep_to_frame
from .catalog import DEFAULT_CATALOG, catalog_from_frame
from .enrichment import enrich_warnings
from .settings import PlannerSettings, load_settings
