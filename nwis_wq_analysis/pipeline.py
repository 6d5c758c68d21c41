"""End-to-end run: locate, classify, fetch, enrich, aggregate, render."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import pandas as pd

from nwis_wq_analysis.aggregate import SummaryAggregator
from nwis_wq_analysis.client import NWISClient
from nwis_wq_analysis.config import (
    AnalysisConfig,
    setup_logging,
    validate_bbox,
    validate_parameter_codes,
)
from nwis_wq_analysis.enrich import ObservationEnricher
from nwis_wq_analysis.observations import ObservationFetcher
from nwis_wq_analysis.report import ReportGenerator
from nwis_wq_analysis.sites import SiteLocator, classify_sites
from nwis_wq_analysis.visualize import WaterQualityVisualizer


@dataclass
class PipelineResults:
    """Tables produced by one run, in the shape the presentation layer reads."""

    sites: pd.DataFrame
    chemistry: pd.DataFrame
    levels: pd.DataFrame
    observations: pd.DataFrame
    tables: dict = field(default_factory=dict)


def run_pipeline(config: AnalysisConfig, client=None,
                 logger: logging.Logger | None = None) -> PipelineResults:
    """Run every data stage in order and return the output tables."""
    logger = logger or logging.getLogger("nwis_wq_analysis")
    client = client or NWISClient(logger)

    # Fail on malformed inputs before any remote call
    validate_bbox(config.bbox)
    validate_parameter_codes(config.parameter_codes)
    aggregator = SummaryAggregator(config, logger)

    logger.info("=" * 60)
    logger.info("SITES")
    logger.info("=" * 60)
    raw_sites = SiteLocator(client, config, logger).locate()
    enricher = ObservationEnricher(config, logger)
    sites = enricher.prepare_sites(classify_sites(raw_sites, config))
    for site_type, n in sites['site_type'].value_counts().items():
        logger.info(f"  {site_type}: {n:,}")

    logger.info("=" * 60)
    logger.info("OBSERVATIONS")
    logger.info("=" * 60)
    chemistry_raw, levels_raw = ObservationFetcher(client, config, logger).fetch(sites['site_no'].tolist())
    chemistry = enricher.enrich_chemistry(chemistry_raw, sites)
    levels = enricher.enrich_levels(levels_raw, sites)

    tables = aggregator.run_all(chemistry, levels)

    return PipelineResults(
        sites=sites,
        chemistry=chemistry,
        levels=levels,
        observations=enricher.observation_table(chemistry),
        tables=tables,
    )


# =============================================================================
# MAIN EXECUTION
# =============================================================================

def main() -> None:
    """Main execution function."""
    config = AnalysisConfig()
    logger = setup_logging(config.output_dir)

    logger.info("=" * 60)
    logger.info("NWIS WATER QUALITY ANALYSIS")
    logger.info(f"Bounding box: {config.bbox}")
    logger.info("=" * 60)

    warnings.filterwarnings('ignore', category=FutureWarning)

    try:
        results = run_pipeline(config, logger=logger)

        visualizer = WaterQualityVisualizer(config, logger)
        visualizer.create_all_visualizations(results.sites, results.tables)

        reporter = ReportGenerator(config, logger)
        reporter.generate_reports(results.sites, results.observations, results.tables)

        logger.info("=" * 60)
        logger.info("ANALYSIS COMPLETE")
        logger.info(f"Results saved to: {config.output_dir.absolute()}")
        logger.info("=" * 60)

    except Exception as e:
        logger.exception(f"Analysis failed: {e}")
        raise


if __name__ == "__main__":
    main()
