import logging

import matplotlib
import pandas as pd
import pytest

matplotlib.use("Agg")

from nwis_wq_analysis.client import LEVEL_COLUMNS, QW_COLUMNS, SITE_COLUMNS  # noqa: E402
from nwis_wq_analysis.config import AnalysisConfig  # noqa: E402

SITE_ROWS = [
    ("411500070300001", "FSW 100-0040", "GW", 41.6000, -70.5500, "NAD83", 45.0, "NAVD88", 40.0),
    ("411500070300002", "FSW 100-0080", "GW", 41.6001, -70.5501, "NAD83", 45.0, "NAVD88", 80.0),
    ("411600070310001", "FSW 200 MLS 3", "GW", 41.6100, -70.5600, "NAD83", 50.0, "NAVD88", 60.0),
    ("411700070320001", "ASHUMET POND", "LK", 41.6200, -70.5700, "NAD83", 42.0, "NAVD88", None),
    ("411800070330001", "FSW 300 NEST", "GW", 41.6300, -70.5800, "NAD83", 48.0, "NAVD88", 30.0),
]

QW_ROWS = [
    ("411500070300001", "00608", 0.5, "2022-03-17", "10:00"),
    ("411500070300001", "00631", 0.3, "2022-03-17", "10:00"),
    ("411500070300001", "62854", 2.0, "2022-03-17", "10:00"),
    ("411500070300001", "00010", 12.0, "2022-03-17", "10:00"),
    ("411500070300001", "00010", 11.0, "2021-06-02", "09:30"),
    ("411500070300002", "00010", 10.0, "2022-03-20", "11:15"),
    ("411600070310001", "62854", 0.0, "2022-03-18", None),
    ("411600070310001", "00631", 0.4, "2022-03-18", None),
    ("411700070320001", "00400", 7.1, "2022-04-01", "13:00"),
    ("411700070320001", "99999", 1.0, "2022-04-01", "13:00"),
    ("411700070320001", "00095", "150", "2022-04-01", "13:00"),
    ("999999999999999", "00010", 5.0, "2022-03-10", None),
]

LEVEL_ROWS = [
    ("411500070300001", "2022-03-17", 10.5),
    ("411500070300001", "2022-04-17", None),
    ("411500070300002", "2022-03-20", 11.0),
]


class FakeClient:
    """Stands in for NWISClient with fixed responses."""

    def __init__(self, sites=None, chemistry=None, levels=None):
        self.sites = pd.DataFrame(SITE_ROWS, columns=SITE_COLUMNS) if sites is None else sites
        self.chemistry = pd.DataFrame(QW_ROWS, columns=QW_COLUMNS) if chemistry is None else chemistry
        self.levels = pd.DataFrame(LEVEL_ROWS, columns=LEVEL_COLUMNS) if levels is None else levels
        self.calls = []

    def get_sites(self, bbox):
        self.calls.append(("sites", bbox))
        return self.sites.copy()

    def get_chemistry(self, sites, parameter_codes):
        self.calls.append(("chemistry", list(sites), list(parameter_codes)))
        return self.chemistry.copy()

    def get_water_levels(self, sites):
        self.calls.append(("levels", list(sites)))
        return self.levels.copy()


@pytest.fixture
def logger():
    return logging.getLogger("nwis_wq_analysis.tests")


@pytest.fixture
def config(tmp_path):
    return AnalysisConfig(output_dir=tmp_path / "out")


@pytest.fixture
def client():
    return FakeClient()
