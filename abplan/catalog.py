from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import pandas as pd

from .formulas import variance_for_binary
from .models import MetricObservation, MetricType

logger = logging.getLogger(__name__)

CATALOG_COLUMNS: Sequence[str] = (
    "metric",
    "real_estate",
    "metric_type",
    "lookback_days",
    "mean",
    "variance",
    "total_users",
)


def _binary(metric: str, real_estate: str, lookback_days: int, p: float, users: int) -> MetricObservation:
    return MetricObservation(metric, real_estate, MetricType.BINARY, lookback_days, p, variance_for_binary(p), users)


def _continuous(
    metric: str, real_estate: str, lookback_days: int, mean: float, variance: float, users: int
) -> MetricObservation:
    return MetricObservation(metric, real_estate, MetricType.CONTINUOUS, lookback_days, mean, variance, users)


DEFAULT_CATALOG: Tuple[MetricObservation, ...] = (
    _binary("Conversion Rate", "Homepage Banner", 7, 0.05, 70_000),
    _binary("Conversion Rate", "Homepage Banner", 14, 0.052, 145_000),
    _binary("Conversion Rate", "Homepage Banner", 21, 0.053, 220_000),
    _binary("Conversion Rate", "Homepage Banner", 30, 0.055, 310_000),
    _continuous("Average Order Value", "Product Detail Page", 7, 150, 2500, 50_000),
    _continuous("Average Order Value", "Product Detail Page", 14, 155, 2600, 105_000),
    _continuous("Average Order Value", "Product Detail Page", 21, 152, 2550, 160_000),
    _continuous("Average Order Value", "Product Detail Page", 30, 158, 2700, 230_000),
    _binary("Click-Through Rate", "Search Results", 7, 0.10, 200_000),
    _binary("Click-Through Rate", "Search Results", 14, 0.105, 410_000),
    _binary("Click-Through Rate", "Search Results", 21, 0.102, 600_000),
    _binary("Click-Through Rate", "Search Results", 30, 0.11, 850_000),
    # platform-wide
    _continuous("Revenue Per Visitor", "platform", 7, 5.25, 10.5, 1_000_000),
    _continuous("Revenue Per Visitor", "platform", 14, 5.30, 10.8, 2_050_000),
    _continuous("Revenue Per Visitor", "platform", 21, 5.28, 10.6, 3_000_000),
    _continuous("Revenue Per Visitor", "platform", 30, 5.35, 11.0, 4_200_000),
)


def catalog_from_frame(df: pd.DataFrame) -> List[MetricObservation]:
    """Build observations from an already-mapped table.

    Expects the columns in ``CATALOG_COLUMNS`` (``metric_type`` and ``variance``
    may be missing). Rows whose mean, total users or lookback are not numeric
    are skipped, as are non-Binary rows without a numeric variance. Binary rows
    without a variance get p * (1 - p).
    """
    if df is None or len(df) == 0:
        return []

    missing = [c for c in ("metric", "real_estate", "lookback_days", "mean", "total_users") if c not in df.columns]
    if missing:
        raise ValueError(f"Catalog table is missing columns: {', '.join(missing)}")

    out = df.copy()
    if "metric_type" not in out.columns:
        out["metric_type"] = MetricType.CONTINUOUS.value
    if "variance" not in out.columns:
        out["variance"] = float("nan")
    for c in ("lookback_days", "mean", "variance", "total_users"):
        out[c] = pd.to_numeric(out[c], errors="coerce")

    observations: List[MetricObservation] = []
    skipped = 0
    for r in out.itertuples(index=False):
        if pd.isna(r.mean) or pd.isna(r.total_users) or pd.isna(r.lookback_days) or r.lookback_days <= 0:
            skipped += 1
            continue

        try:
            metric_type = MetricType(str(r.metric_type).strip())
        except ValueError:
            skipped += 1
            continue

        variance = r.variance
        if pd.isna(variance):
            if metric_type is not MetricType.BINARY:
                skipped += 1
                continue
            variance = variance_for_binary(float(r.mean))

        observations.append(
            MetricObservation(
                metric=str(r.metric),
                real_estate=str(r.real_estate),
                metric_type=metric_type,
                lookback_days=int(r.lookback_days),
                mean=float(r.mean),
                variance=float(variance),
                total_users=int(r.total_users),
            )
        )

    if skipped:
        logger.warning("Skipped %d catalog rows with missing or invalid statistics", skipped)
    return observations


def catalog_to_frame(catalog: Sequence[MetricObservation]) -> pd.DataFrame:
    rows = [
        {
            "metric": o.metric,
            "real_estate": o.real_estate,
            "metric_type": o.metric_type.value,
            "lookback_days": o.lookback_days,
            "mean": o.mean,
            "variance": o.variance,
            "total_users": o.total_users,
        }
        for o in catalog
    ]
    return pd.DataFrame(rows, columns=list(CATALOG_COLUMNS))


def list_metrics(catalog: Sequence[MetricObservation]) -> List[str]:
    return sorted({o.metric for o in catalog})


def list_real_estates(catalog: Sequence[MetricObservation], metric: str) -> List[str]:
    return sorted({o.real_estate for o in catalog if o.metric == metric})


def list_lookback_days(catalog: Sequence[MetricObservation], metric: str, real_estate: str) -> List[int]:
    return sorted({o.lookback_days for o in catalog if o.metric == metric and o.real_estate == real_estate})
