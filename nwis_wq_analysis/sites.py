"""Site lookup by bounding box and site-type classification."""

from __future__ import annotations

import logging
from typing import Callable

import pandas as pd

from nwis_wq_analysis.config import (
    MULTILEVEL_SAMPLER,
    WELL_CLUSTER,
    AnalysisConfig,
    validate_bbox,
)

# raw NWIS column -> site table column
SITE_RENAME = {
    "site_no": "site_no",
    "station_nm": "name",
    "site_tp_cd": "type_code",
    "dec_lat_va": "lat",
    "dec_long_va": "lon",
    "dec_coord_datum_cd": "coord_datum",
    "alt_va": "elevation",
    "alt_datum_cd": "elevation_datum",
    "well_depth_va": "well_depth",
}

Rule = tuple[Callable[[str, str], bool], str]


# =============================================================================
# SITE LOCATOR
# =============================================================================

class SiteLocator:
    """Finds monitoring sites inside the study bounding box."""

    def __init__(self, client, config: AnalysisConfig, logger: logging.Logger):
        self.client = client
        self.config = config
        self.logger = logger

    def locate(self, bbox=None) -> pd.DataFrame:
        """Return the site table for ``bbox`` (defaults to the configured box)."""
        bbox = validate_bbox(self.config.bbox if bbox is None else bbox)
        self.logger.info(f"Locating sites in bounding box {bbox}")

        raw = self.client.get_sites(bbox)
        sites = self._tidy(raw)

        if len(sites) == 0:
            self.logger.warning("No sites found in bounding box")
        else:
            self.logger.info(f"Found {len(sites):,} sites")
        return sites

    def _tidy(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Rename to site-table columns and coerce types."""
        sites = raw.rename(columns=SITE_RENAME)[list(SITE_RENAME.values())].copy()
        sites['site_no'] = sites['site_no'].astype(str).str.strip()
        sites['name'] = sites['name'].astype('string').str.strip()
        for col in ['lat', 'lon', 'elevation', 'well_depth']:
            sites[col] = pd.to_numeric(sites[col], errors='coerce').astype(float)
        sites = sites.drop_duplicates(subset='site_no').reset_index(drop=True)
        sites['site_type'] = sites['type_code']
        return sites


# =============================================================================
# SITE CLASSIFIER
# =============================================================================

def build_rules(config: AnalysisConfig) -> list[Rule]:
    """Ordered (predicate, category) pairs; the first match wins.

    The multilevel-sampler rule sits above the cluster rule: a sampler
    installed at a cluster location is reported as a sampler.
    """
    mls = config.mls_marker.upper()
    clusters = [m.upper() for m in config.cluster_markers]

    rules: list[Rule] = [
        (lambda name, _: mls in name, MULTILEVEL_SAMPLER),
        (lambda name, _: any(m in name for m in clusters), WELL_CLUSTER),
    ]
    for code, category in config.type_code_map.items():
        rules.append((lambda _, site_type, code=code: site_type == code, category))
    return rules


def classify_site_type(name, site_type, rules: list[Rule]):
    """Category for one site; unmatched types pass through unchanged."""
    name = "" if pd.isna(name) else str(name).upper()
    for predicate, category in rules:
        if predicate(name, site_type):
            return category
    return site_type


def classify_sites(sites: pd.DataFrame, config: AnalysisConfig) -> pd.DataFrame:
    """Return a copy of ``sites`` with ``site_type`` rewritten."""
    rules = build_rules(config)
    out = sites.copy()
    out['site_type'] = [
        classify_site_type(name, site_type, rules)
        for name, site_type in zip(out['name'], out['site_type'])
    ]
    return out
