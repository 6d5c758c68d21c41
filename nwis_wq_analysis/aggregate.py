"""Grouped summary tables built from the enriched observation rows."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats

from nwis_wq_analysis.config import AnalysisConfig, validate_window
from nwis_wq_analysis.parameters import AMMONIA_N, NITRITE_NITRATE_N, TOTAL_NITROGEN

GROUP_KEYS = ["short_id", "parameter"]

# Representative site metadata carried onto every summary row
_SITE_AGG = {
    "name": ("name", "first"),
    "lat": ("lat", "median"),
    "lon": ("lon", "median"),
    "well_depth": ("well_depth", "mean"),
}


class SummaryAggregator:
    """Builds the coverage, point-in-time, time-series and nitrogen tables."""

    def __init__(self, config: AnalysisConfig, logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.window_start, self.window_end = validate_window(config.window_start, config.window_end)

    def run_all(self, chemistry: pd.DataFrame, levels: pd.DataFrame) -> dict[str, pd.DataFrame]:
        """Every summary table, keyed by name."""
        self.logger.info("=" * 60)
        self.logger.info("AGGREGATION")
        self.logger.info("=" * 60)

        tables: dict[str, pd.DataFrame] = {}
        tables['coverage'] = self.coverage(chemistry)
        tables['window_mean'] = self.window_mean(chemistry)
        tables['window_max'] = self.window_max(chemistry)
        tables['monthly_mean'] = self.monthly_mean(chemistry)
        tables['nitrogen_composition'] = self.nitrogen_composition(tables['window_mean'])
        tables['vertical_profile'] = self.vertical_profile(chemistry)
        tables['water_level_monthly'] = self.water_level_monthly(levels)
        tables['trends'] = self.trends(tables['monthly_mean'])

        for name, table in tables.items():
            self.logger.info(f"  {name}: {len(table):,} rows")
        return tables

    # -------------------------------------------------------------------------
    # Coverage
    # -------------------------------------------------------------------------

    def coverage(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        """Observation count per site x parameter, one column per parameter.

        ``n_depths`` counts the distinct well depths that have observations.
        """
        self.logger.info("Counting observations per site and parameter...")
        # Rows from sites outside the site table are counted under their site id
        df = chemistry.assign(short_id=chemistry['short_id'].fillna(chemistry['site_no']))

        no_code = df['parameter'].isna()
        if no_code.any():
            self.logger.warning(f"  Excluding {no_code.sum():,} rows with no parameter code from coverage")

        counts = (
            df[~no_code].groupby(GROUP_KEYS)
            .size()
            .unstack('parameter')
            .astype('Int64')
        )
        counts.columns.name = None

        depths = (
            df.groupby('short_id')['well_depth']
            .nunique()
            .rename('n_depths')
        )
        out = counts.join(depths, how='left').reset_index()
        return out

    # -------------------------------------------------------------------------
    # Point-in-time views
    # -------------------------------------------------------------------------

    def in_window(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        """Rows sampled strictly after the window start and before its end."""
        dates = chemistry['date']
        return chemistry[(dates > self.window_start) & (dates < self.window_end)]

    def window_mean(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        self.logger.info(f"Window mean for {self.window_start.date()} to {self.window_end.date()}")
        out = self._summarize(self.in_window(chemistry), GROUP_KEYS, 'mean')
        return out.round({'value': 3, 'well_depth': 3})

    def window_max(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        self.logger.info(f"Window max for {self.window_start.date()} to {self.window_end.date()}")
        return self._summarize(self.in_window(chemistry), GROUP_KEYS, 'max')

    def monthly_mean(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        """Mean value per site x parameter x year-month."""
        self.logger.info("Monthly mean time series...")
        out = self._summarize(chemistry, GROUP_KEYS + ['year_month'], 'mean')
        return out.round({'value': 3, 'well_depth': 3})

    @staticmethod
    def _summarize(df: pd.DataFrame, keys: list[str], how: str) -> pd.DataFrame:
        out = (
            df.groupby(keys)
            .agg(**_SITE_AGG, value=('value', how), n_samples=('value', 'count'))
            .reset_index()
        )
        return out[keys + ['name', 'lat', 'lon', 'well_depth', 'value', 'n_samples']]

    # -------------------------------------------------------------------------
    # Nitrogen composition
    # -------------------------------------------------------------------------

    def nitrogen_composition(self, summary: pd.DataFrame) -> pd.DataFrame:
        """Organic-N and nitrite+nitrate-N as percentages of total nitrogen.

        ``summary`` is a long table with one value per site x parameter.
        Sites without a nonzero total nitrogen value are dropped. Negative
        percentages are kept; they come from inorganic forms measuring
        above TN.
        """
        self.logger.info("Nitrogen composition...")
        species = [AMMONIA_N, NITRITE_NITRATE_N, TOTAL_NITROGEN]
        columns = ['short_id', 'name', 'lat', 'lon'] + species + ['organic_n_pct', 'nitrite_nitrate_n_pct']
        if len(summary) == 0:
            return pd.DataFrame(columns=columns)

        wide = summary.pivot_table(
            index='short_id', columns='parameter', values='value', aggfunc='first'
        )
        wide.columns.name = None
        for col in species:
            if col not in wide.columns:
                wide[col] = np.nan
        wide = wide[species]

        meta = summary.groupby('short_id').agg(
            name=('name', 'first'), lat=('lat', 'median'), lon=('lon', 'median')
        )
        out = meta.join(wide, how='inner')

        tn = out[TOTAL_NITROGEN]
        keep = tn.notna() & (tn != 0)
        dropped = (~keep).sum()
        if dropped > 0:
            self.logger.warning(f"  Excluding {dropped:,} sites with no usable total nitrogen value")
        out = out[keep].copy()

        inorganic = out[AMMONIA_N] + out[NITRITE_NITRATE_N]
        out['organic_n_pct'] = (100 * (1 - inorganic / out[TOTAL_NITROGEN])).round(1)
        out['nitrite_nitrate_n_pct'] = (100 * out[NITRITE_NITRATE_N] / out[TOTAL_NITROGEN]).round(1)
        out.index.name = 'short_id'
        return out.reset_index()[columns]

    # -------------------------------------------------------------------------
    # Profiles and water levels
    # -------------------------------------------------------------------------

    def vertical_profile(self, chemistry: pd.DataFrame) -> pd.DataFrame:
        """Window mean per individual well, with its sample altitude."""
        df = self.in_window(chemistry)
        excluded = df['name'].isin(self.config.profile_exclusions)
        if excluded.any():
            self.logger.info(f"  Profile view excludes {excluded.sum():,} rows from listed sites")
        df = df[~excluded]

        out = (
            df.groupby(['site_no', 'parameter'])
            .agg(
                short_id=('short_id', 'first'),
                name=('name', 'first'),
                well_depth=('well_depth', 'first'),
                sample_altitude=('sample_altitude', 'first'),
                value=('value', 'mean'),
            )
            .reset_index()
        )
        return out.round({'value': 3})

    def water_level_monthly(self, levels: pd.DataFrame) -> pd.DataFrame:
        """Mean depth to water and water-table altitude per site x year-month."""
        self.logger.info("Monthly water levels...")
        return (
            levels.groupby(['short_id', 'year_month'])
            .agg(
                name=('name', 'first'),
                lat=('lat', 'median'),
                lon=('lon', 'median'),
                depth_to_water=('depth_to_water', 'mean'),
                water_table_altitude=('water_table_altitude', 'mean'),
                n_readings=('depth_to_water', 'count'),
            )
            .reset_index()
            .round({'depth_to_water': 3, 'water_table_altitude': 3})
        )

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------

    def trends(self, monthly: pd.DataFrame) -> pd.DataFrame:
        """Kendall tau of monthly means against time, per site x parameter."""
        self.logger.info("Trend analysis...")
        rows: list[dict[str, Any]] = []

        for (short_id, parameter), group in monthly.dropna(subset=['value']).groupby(GROUP_KEYS):
            if len(group) < self.config.min_samples_for_trend:
                continue

            group = group.sort_values('year_month')
            months = pd.PeriodIndex(group['year_month'], freq='M')
            x = np.array([p.ordinal for p in months])
            tau, p_value = stats.kendalltau(x, group['value'].values)

            if np.isnan(tau) or tau == 0:
                direction = 'no trend'
            else:
                direction = 'increasing' if tau > 0 else 'decreasing'

            rows.append({
                'short_id': short_id,
                'parameter': parameter,
                'n_months': len(group),
                'first_month': group['year_month'].iloc[0],
                'last_month': group['year_month'].iloc[-1],
                'kendall_tau': tau,
                'p_value': p_value,
                'direction': direction,
                'significant': bool(p_value < self.config.significance_level) if not np.isnan(p_value) else False,
            })

            if rows[-1]['significant']:
                self.logger.info(f"  {short_id} {parameter}: {direction} (tau={tau:.2f}, p={p_value:.4f})")

        columns = ['short_id', 'parameter', 'n_months', 'first_month', 'last_month',
                   'kendall_tau', 'p_value', 'direction', 'significant']
        return pd.DataFrame(rows, columns=columns)
