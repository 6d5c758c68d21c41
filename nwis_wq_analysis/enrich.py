"""Join observations onto site metadata and derive grouping keys."""

from __future__ import annotations

import logging

import pandas as pd

from nwis_wq_analysis.config import AnalysisConfig
from nwis_wq_analysis.parameters import code_to_name

SITE_META_COLUMNS = [
    "site_no", "name", "site_type", "short_id", "n_sample_depths",
    "lat", "lon", "elevation", "well_depth", "sample_altitude",
]

# Long-format table handed to the presentation layer
OBSERVATION_COLUMNS = [
    "site_no", "short_id", "name", "lat", "lon",
    "parameter", "value", "date", "year_month",
]


def apply_name_overrides(sites: pd.DataFrame, overrides: dict) -> pd.DataFrame:
    """Replace display names for the site ids listed in ``overrides``.

    Only exact site ids are matched; other names are never touched.
    """
    out = sites.copy()
    if not overrides:
        return out
    replacement = out['site_no'].map(overrides)
    out['name'] = replacement.where(replacement.notna(), out['name'])
    return out


def year_month(dates: pd.Series) -> pd.Series:
    """'YYYY-MM' bucket for each date; missing dates stay missing."""
    return pd.to_datetime(dates, errors='coerce').dt.strftime('%Y-%m')


class ObservationEnricher:
    """Merges site metadata onto chemistry and water-level rows."""

    def __init__(self, config: AnalysisConfig, logger: logging.Logger):
        self.config = config
        self.logger = logger

    def prepare_sites(self, sites: pd.DataFrame) -> pd.DataFrame:
        """Apply name fix-ups and add short id, depth count and sample altitude."""
        out = apply_name_overrides(sites, self.config.name_overrides)
        out['short_id'] = out['name'].str.slice(0, self.config.short_id_length).str.strip()
        out['n_sample_depths'] = out.groupby('short_id', dropna=False)['site_no'].transform('count')
        out['sample_altitude'] = out['elevation'] - out['well_depth']
        return out

    def enrich_chemistry(self, chemistry: pd.DataFrame, sites: pd.DataFrame) -> pd.DataFrame:
        """Right-join chemistry rows onto prepared site metadata."""
        self.logger.info("Joining chemistry onto site metadata...")
        df = sites[SITE_META_COLUMNS].merge(chemistry, on='site_no', how='right')

        df['date'] = pd.to_datetime(df['sample_dt'], errors='coerce')
        df['year_month'] = year_month(df['date'])
        df['parameter_name'] = df['parm_cd'].map(code_to_name)
        # Unmapped codes keep their numeric label so no rows vanish from counts
        df['parameter'] = df['parameter_name'].fillna(df['parm_cd'])
        df = df.rename(columns={'result_va': 'value'})

        unnamed = df['parameter_name'].isna().sum()
        if unnamed > 0:
            self.logger.warning(f"  {unnamed:,} rows carry parameter codes with no name mapping")
        orphans = df['name'].isna().sum()
        if orphans > 0:
            self.logger.warning(f"  {orphans:,} rows from sites outside the site table")

        self.logger.info(f"  Enriched chemistry rows: {len(df):,}")
        return df

    def enrich_levels(self, levels: pd.DataFrame, sites: pd.DataFrame) -> pd.DataFrame:
        """Drop readings without a depth, then right-join onto site metadata."""
        self.logger.info("Joining water levels onto site metadata...")
        missing = levels['lev_va'].isna()
        if missing.any():
            self.logger.warning(f"  Excluding {missing.sum():,} water-level rows with no depth value")
        levels = levels[~missing]

        df = sites[SITE_META_COLUMNS].merge(levels, on='site_no', how='right')
        df['date'] = pd.to_datetime(df['lev_dt'], errors='coerce')
        df['year_month'] = year_month(df['date'])
        df = df.rename(columns={'lev_va': 'depth_to_water'})
        df['water_table_altitude'] = df['elevation'] - df['depth_to_water']

        self.logger.info(f"  Enriched water-level rows: {len(df):,}")
        return df

    @staticmethod
    def observation_table(enriched: pd.DataFrame) -> pd.DataFrame:
        """Long-format observation table for the presentation layer."""
        return enriched[OBSERVATION_COLUMNS].copy()
