"""
Metric registry using prometheus_client.

Tracks how often wrappers flush, why, and how much each flush carries.
Exposes metrics in Prometheus text format.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Dedicated registry so embedding applications decide where these are exported.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Flushes
# -----------------------------------------------------------------------------

flushes = Counter(
    "nagle_flushes_total",
    "Flushes that transferred bytes to the underlying stream",
    ["reason"],
    registry=REGISTRY,
)

bytes_flushed = Counter(
    "nagle_bytes_flushed_total",
    "Bytes transferred to the underlying stream",
    registry=REGISTRY,
)

flush_size = Histogram(
    "nagle_flush_size_bytes",
    "Bytes transferred per flush",
    buckets=(64, 256, 512, 1024, 1460, 4096, 16384, 65536),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Failures
# -----------------------------------------------------------------------------

partial_writes = Counter(
    "nagle_partial_writes_total",
    "Flushes where the underlying stream accepted only part of the buffer",
    registry=REGISTRY,
)

flush_errors = Counter(
    "nagle_flush_errors_total",
    "Flushes that failed with an underlying stream error",
    ["reason"],
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
