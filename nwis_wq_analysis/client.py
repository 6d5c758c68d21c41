"""Thin wrapper over the ``dataretrieval`` NWIS and WQP services.

Each call returns a frame with a fixed raw column layout so the rest of the
pipeline never depends on which service or library version produced it.
Errors from the services propagate unchanged; only the "no sites found"
response is turned into an empty frame.
"""

from __future__ import annotations

import logging

import pandas as pd
from dataretrieval import nwis, waterdata, wqp
from dataretrieval.exceptions import NoSitesError

SITE_COLUMNS = [
    "site_no", "station_nm", "site_tp_cd",
    "dec_lat_va", "dec_long_va", "dec_coord_datum_cd",
    "alt_va", "alt_datum_cd", "well_depth_va",
]
QW_COLUMNS = ["site_no", "parm_cd", "result_va", "sample_dt", "sample_tm"]
LEVEL_COLUMNS = ["site_no", "lev_dt", "lev_va"]

# WQP column -> raw column
_WQP_RENAME = {
    "MonitoringLocationIdentifier": "site_no",
    "USGSPCode": "parm_cd",
    "ResultMeasureValue": "result_va",
    "ActivityStartDate": "sample_dt",
    "ActivityStartTime/Time": "sample_tm",
}

# Field-measurement column -> raw column
_FIELD_RENAME = {
    "monitoring_location_id": "site_no",
    "time": "lev_dt",
    "value": "lev_va",
}

# Depth to water level, feet below land surface
DEPTH_TO_WATER_CODE = "72019"

# Site ids per request; long id lists overflow the query string
_CHUNK = 100


class NWISClient:
    """Remote query interface backed by USGS web services."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("nwis_wq_analysis")

    def get_sites(self, bbox: tuple[float, float, float, float]) -> pd.DataFrame:
        """Site records inside (west, south, east, north)."""
        bbox_str = ",".join(f"{v:.6f}" for v in bbox)
        self.logger.debug(f"NWIS site query bBox={bbox_str}")
        try:
            df, _ = nwis.get_info(bBox=bbox_str, siteOutput="expanded")
        except NoSitesError:
            return pd.DataFrame(columns=SITE_COLUMNS)
        return _conform(df, SITE_COLUMNS)

    def get_chemistry(self, sites: list[str], parameter_codes: list[str]) -> pd.DataFrame:
        """Discrete water-quality results for the given sites and parameters."""
        frames = []
        for i in range(0, len(sites), _CHUNK):
            chunk = sites[i:i + _CHUNK]
            self.logger.debug(f"WQP result query for {len(chunk)} sites")
            df, _ = wqp.get_results(
                siteid=[f"USGS-{s}" for s in chunk],
                pCode=list(parameter_codes),
            )
            if len(df) > 0:
                frames.append(df.rename(columns=_WQP_RENAME))

        if not frames:
            return pd.DataFrame(columns=QW_COLUMNS)

        df = pd.concat(frames, ignore_index=True)
        df['site_no'] = df['site_no'].astype(str).str.replace(r'^USGS-', '', regex=True)
        return _conform(df, QW_COLUMNS)

    def get_water_levels(self, sites: list[str]) -> pd.DataFrame:
        """Field depth-to-water measurements for the given sites."""
        frames = []
        for i in range(0, len(sites), _CHUNK):
            chunk = sites[i:i + _CHUNK]
            self.logger.debug(f"Field measurement query for {len(chunk)} sites")
            try:
                df, _ = waterdata.get_field_measurements(
                    monitoring_location_id=[f"USGS-{s}" for s in chunk],
                    parameter_code=DEPTH_TO_WATER_CODE,
                )
            except NoSitesError:
                continue
            if len(df) > 0:
                frames.append(pd.DataFrame(df).rename(columns=_FIELD_RENAME))

        if not frames:
            return pd.DataFrame(columns=LEVEL_COLUMNS)

        df = pd.concat(frames, ignore_index=True)
        df['site_no'] = df['site_no'].astype(str).str.replace(r'^USGS-', '', regex=True)
        return _conform(df, LEVEL_COLUMNS)


def _conform(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Keep the expected columns, adding any the service omitted as NA."""
    df = df.reset_index(drop=True).copy()
    for col in columns:
        if col not in df.columns:
            df[col] = pd.NA
    return df[columns]
