"""
NWIS Water Quality Analysis
===========================
Groundwater and surface-water monitoring data for a fixed bounding box:
site lookup, chemistry and water-level retrieval, enrichment, and summary
tables for mapping and charting.

License: MIT
"""

from nwis_wq_analysis.config import AnalysisConfig, InvalidInputError, setup_logging
from nwis_wq_analysis.pipeline import PipelineResults, run_pipeline

__all__ = [
    "AnalysisConfig",
    "InvalidInputError",
    "PipelineResults",
    "run_pipeline",
    "setup_logging",
]

__version__ = "1.0.0"
