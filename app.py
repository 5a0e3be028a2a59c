from __future__ import annotations

import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from abplan import (
    DEFAULT_CATALOG,
    ByMde,
    BySampleSize,
    CalculationRequest,
    MetricType,
    ResolutionSource,
    compute_duration_row,
    compute_duration_sweep,
    load_settings,
    sweep_to_frame,
)
from abplan.catalog import catalog_to_frame, list_metrics, list_real_estates
from abplan.sweep import sweep_output_column

logging.basicConfig(level=logging.INFO)

st.set_page_config(page_title="A/B Sample Size Planner", layout="wide")

st.title("A/B Sample Size Planner")
st.caption("Sample size and MDE planning from historical metric statistics.")

settings = load_settings("planner.yaml")
catalog = list(DEFAULT_CATALOG)


with st.sidebar:
    st.header("Experiment setup")

    mode = st.radio("Mode", ["Fixed duration", "Duration sweep"], index=0)

    metric = st.selectbox("Metric", list_metrics(catalog))
    real_estate = st.selectbox("Real estate", list_real_estates(catalog, metric))
    known_type = next(o.metric_type for o in catalog if o.metric == metric)
    type_options = [t.value for t in MetricType]
    metric_type = MetricType(
        st.radio("Metric type", type_options, index=type_options.index(known_type.value), horizontal=True)
    )

    solve_for = st.radio("Solve for", ["Sample size", "MDE"], index=0, horizontal=True)
    if solve_for == "Sample size":
        mde_pct = st.number_input("MDE (%)", min_value=0.01, max_value=100.0, value=2.0, step=0.5)
        target = ByMde(float(mde_pct) / 100)
    else:
        n = st.number_input("Sample size per variant", min_value=1, max_value=50_000_000, value=10_000, step=1000)
        target = BySampleSize(int(n))

    power = st.select_slider("Statistical power", options=[0.80, 0.90, 0.95], value=settings.default_power)
    alpha = st.select_slider("Significance level", options=[0.01, 0.05, 0.10], value=settings.default_significance)
    variants = st.number_input("Number of variants", min_value=2, max_value=10, value=settings.default_variants)

    if mode == "Fixed duration":
        duration = st.number_input("Target duration (days)", min_value=1, max_value=365, value=14)
    else:
        durations = st.multiselect("Durations (days)", [7, 14, 21, 30, 45, 60], default=list(settings.sweep_durations))
    st.subheader("Baseline (used when no historical match)")
    baseline_mean = st.number_input("Baseline mean", value=0.05, format="%.6f")
    baseline_variance = st.number_input("Baseline variance (0 = derive for Binary)", min_value=0.0, value=0.0, format="%.6f")
    daily_traffic = st.number_input("Baseline daily traffic (0 = unknown)", min_value=0, value=0, step=1000)

    run = st.button("Calculate", type="primary")


def _baseline_variance():
    if baseline_variance == 0 and metric_type is MetricType.BINARY:
        return None
    return float(baseline_variance)


def render_warnings(warnings):
    if not warnings:
        return
    with st.expander(f"Warnings ({len(warnings)})", expanded=True):
        for w in warnings:
            st.write(f"- {w}")


def _baseline_request(**kwargs):
    return CalculationRequest(
        metric=metric,
        real_estate=real_estate,
        metric_type=metric_type,
        target=target,
        mean=float(baseline_mean),
        variance=_baseline_variance(),
        statistical_power=float(power),
        significance_level=float(alpha),
        number_of_variants=int(variants),
        daily_traffic=float(daily_traffic) or None,
        **kwargs,
    )


def render_fixed_duration():
    row = compute_duration_row(catalog, _baseline_request(target_duration_days=int(duration)), int(duration), settings)
    if row.source is ResolutionSource.HISTORICAL:
        st.info(f"Using historical data for {row.duration_days} days ({row.total_users_available:,} users).")
    else:
        st.warning("No historical data for this duration; using the sidebar baseline.")

    res = row.result
    st.subheader("Results")
    if res is None:
        st.error("No result for this duration.")
    else:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Sample size per variant", f"{res.sample_size_per_variant:,}" if res.sample_size_per_variant else "—")
        c2.metric("Total sample size", f"{res.total_sample_size_for_experiment:,}" if res.total_sample_size_for_experiment else "—")
        c3.metric("MDE", f"{res.minimum_detectable_effect_percent:.2f}%" if res.minimum_detectable_effect else "—")
        c4.metric("Exposure needed", f"{res.exposure_needed_percent:.1f}%" if res.exposure_needed is not None else "—")
        st.write(f"Confidence {res.confidence_level:.0%} · power {res.power_level:.0%}")
    render_warnings(row.warnings)


def render_sweep():
    baseline = _baseline_request()
    rows = compute_duration_sweep(catalog, baseline, durations, settings=settings, max_workers=4)
    df = sweep_to_frame(rows)

    st.subheader("Predictions across durations")
    st.dataframe(df.drop(columns=["warnings"]), use_container_width=True, hide_index=True)

    col = sweep_output_column(baseline.mode)
    chart = df[df["status"] == "ok"][["duration_days", col]].copy()
    if len(chart):
        chart[col] = pd.to_numeric(chart[col])
        fig = px.line(chart, x="duration_days", y=col, markers=True)
        fig.update_layout(height=360, xaxis_title="Duration (days)")
        st.plotly_chart(fig, use_container_width=True)

    for row in rows:
        render_warnings([f"{row.duration_days}-day: {w}" for w in row.warnings])


if run:
    if mode == "Fixed duration":
        render_fixed_duration()
    else:
        render_sweep()
else:
    st.markdown("#### Historical catalog")
    st.dataframe(catalog_to_frame(catalog), use_container_width=True, hide_index=True)
