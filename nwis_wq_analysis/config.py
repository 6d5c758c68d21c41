"""Run configuration, input validation and logging setup."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

# =============================================================================
# ERRORS
# =============================================================================

class InvalidInputError(ValueError):
    """Raised for malformed query inputs, before any remote call is made."""


# =============================================================================
# CONFIGURATION
# =============================================================================

# Site-type categories reported in every output table
WATER_TABLE_WELL = "water-table well"
WELL_CLUSTER = "well cluster"
MULTILEVEL_SAMPLER = "multilevel sampler (MLS)"
SURFACE_WATER_POND = "surface-water pond"


@dataclass
class AnalysisConfig:
    """Configuration settings for the monitoring data pipeline."""

    # Study area as (west, south, east, north) in decimal degrees
    bbox: tuple = (-70.62, 41.55, -70.45, 41.70)

    # Parameters requested from the chemistry service
    parameter_codes: list = field(default_factory=lambda: [
        "00010", "00095", "00400", "00300",
        "00608", "00613", "00618", "00631", "62854",
        "00671", "82082", "82085",
    ])

    # Point-in-time window: start < sample date < end
    window_start: str = "2022-03-01"
    window_end: str = "2022-04-15"

    # Output
    output_dir: Path = Path("nwis_wq_output")

    # Plotting settings
    figure_dpi: int = 150
    figure_format: str = "png"
    color_palette: str = "viridis"

    # Site classification
    mls_marker: str = "MLS"
    cluster_markers: list = field(default_factory=lambda: ["CLUSTER", "NEST"])
    type_code_map: dict = field(default_factory=lambda: {
        "GW": WATER_TABLE_WELL,
        "LK": SURFACE_WATER_POND,
    })

    # Number of leading name characters shared by every well at one location
    short_id_length: int = 10

    # Display-name fix-ups keyed by site identifier
    name_overrides: dict = field(default_factory=dict)

    # Site names left out of vertical-profile views
    profile_exclusions: list = field(default_factory=list)

    # Trend settings
    min_samples_for_trend: int = 6
    significance_level: float = 0.05


def validate_bbox(bbox) -> tuple[float, float, float, float]:
    """Return the bounding box as four floats or raise InvalidInputError."""
    try:
        west, south, east, north = (float(v) for v in bbox)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Bounding box must be four numbers (west, south, east, north): {bbox!r}") from e

    if not all(math.isfinite(v) for v in (west, south, east, north)):
        raise InvalidInputError(f"Bounding box contains non-finite values: {bbox!r}")
    if not (-180 <= west <= 180 and -180 <= east <= 180):
        raise InvalidInputError(f"Longitudes out of range: {west}, {east}")
    if not (-90 <= south <= 90 and -90 <= north <= 90):
        raise InvalidInputError(f"Latitudes out of range: {south}, {north}")
    if west >= east or south >= north:
        raise InvalidInputError(f"Bounding box corners out of order: {bbox!r}")

    return west, south, east, north


_PARAMETER_CODE = re.compile(r"^\d{5}$")


def validate_parameter_codes(codes) -> list[str]:
    """Return parameter codes as 5-digit strings or raise InvalidInputError."""
    if isinstance(codes, str):
        codes = [codes]
    codes = [str(c).strip() for c in codes]
    if not codes:
        raise InvalidInputError("At least one parameter code is required")
    bad = [c for c in codes if not _PARAMETER_CODE.match(c)]
    if bad:
        raise InvalidInputError(f"Malformed parameter code(s): {', '.join(bad)}")
    return codes


def validate_window(start, end) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Parse the point-in-time window bounds."""
    try:
        start_ts, end_ts = pd.Timestamp(start), pd.Timestamp(end)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Unparseable date window: {start!r} to {end!r}") from e
    if pd.isna(start_ts) or pd.isna(end_ts) or start_ts >= end_ts:
        raise InvalidInputError(f"Date window must have start before end: {start!r} to {end!r}")
    return start_ts, end_ts


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(output_dir: Path) -> logging.Logger:
    """Configure logging to both file and console."""
    output_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("nwis_wq_analysis")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # File handler - detailed logging
    fh = logging.FileHandler(output_dir / "analysis.log", mode='w')
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    # Console handler - info and above
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter('%(levelname)-8s | %(message)s'))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger
