"""Chemistry and water-level retrieval for a set of sites."""

from __future__ import annotations

import logging

import pandas as pd

from nwis_wq_analysis.client import LEVEL_COLUMNS, QW_COLUMNS
from nwis_wq_analysis.config import AnalysisConfig, InvalidInputError, validate_parameter_codes
from nwis_wq_analysis.parameters import CODE_TO_NAME, normalize_code


class ObservationFetcher:
    """Retrieves chemistry samples and water-level readings for sites."""

    def __init__(self, client, config: AnalysisConfig, logger: logging.Logger):
        self.client = client
        self.config = config
        self.logger = logger

    def fetch(self, site_ids, parameter_codes=None) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Return ``(chemistry, levels)`` for the given sites."""
        site_ids = self._validate_sites(site_ids)
        codes = validate_parameter_codes(
            self.config.parameter_codes if parameter_codes is None else parameter_codes
        )

        unknown = [c for c in codes if c not in CODE_TO_NAME]
        if unknown:
            self.logger.warning(f"Parameter codes without a name mapping: {', '.join(unknown)}")

        if not site_ids:
            self.logger.warning("No sites to fetch observations for")
            return (self._tidy_chemistry(pd.DataFrame(columns=QW_COLUMNS)),
                    self._tidy_levels(pd.DataFrame(columns=LEVEL_COLUMNS)))

        chemistry = self.fetch_chemistry(site_ids, codes)
        levels = self.fetch_water_levels(site_ids)
        return chemistry, levels

    def fetch_chemistry(self, site_ids: list[str], codes: list[str]) -> pd.DataFrame:
        self.logger.info(f"Fetching chemistry for {len(site_ids):,} sites, {len(codes)} parameters")
        df = self._tidy_chemistry(self.client.get_chemistry(site_ids, codes))
        self.logger.info(f"  Chemistry rows: {len(df):,} from {df['site_no'].nunique():,} sites")
        return df

    def fetch_water_levels(self, site_ids: list[str]) -> pd.DataFrame:
        self.logger.info(f"Fetching water levels for {len(site_ids):,} sites")
        df = self._tidy_levels(self.client.get_water_levels(site_ids))
        self.logger.info(f"  Water-level rows: {len(df):,} from {df['site_no'].nunique():,} sites")
        return df

    @staticmethod
    def _validate_sites(site_ids) -> list[str]:
        if isinstance(site_ids, str):
            site_ids = [site_ids]
        ids = [str(s).strip() for s in site_ids]
        if any(not s for s in ids):
            raise InvalidInputError("Site identifiers must be non-empty")
        # Preserve order, drop repeats
        return list(dict.fromkeys(ids))

    @staticmethod
    def _tidy_chemistry(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df['site_no'] = df['site_no'].astype(str)
        df['parm_cd'] = df['parm_cd'].map(normalize_code).astype(object)
        df['result_va'] = pd.to_numeric(df['result_va'], errors='coerce').astype(float)
        return df.reset_index(drop=True)

    @staticmethod
    def _tidy_levels(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df['site_no'] = df['site_no'].astype(str)
        df['lev_va'] = pd.to_numeric(df['lev_va'], errors='coerce').astype(float)
        return df.reset_index(drop=True)
