import pandas as pd
from dataretrieval.exceptions import NoSitesError

from nwis_wq_analysis import client as client_module
from nwis_wq_analysis.client import LEVEL_COLUMNS, QW_COLUMNS, SITE_COLUMNS, NWISClient


def test_get_sites_formats_bbox_and_keeps_site_columns(monkeypatch):
    seen = {}

    def fake_get_info(**kwargs):
        seen.update(kwargs)
        df = pd.DataFrame({
            "agency_cd": ["USGS"],
            "site_no": ["411500070300001"],
            "station_nm": ["FSW 100-0040"],
            "site_tp_cd": ["GW"],
            "dec_lat_va": [41.6],
            "dec_long_va": [-70.55],
            "dec_coord_datum_cd": ["NAD83"],
            "alt_va": [45.0],
            "alt_datum_cd": ["NAVD88"],
        })
        return df, None

    monkeypatch.setattr(client_module.nwis, "get_info", fake_get_info)

    sites = NWISClient().get_sites((-70.6, 41.5, -70.4, 41.7))

    assert seen["bBox"] == "-70.600000,41.500000,-70.400000,41.700000"
    assert seen["siteOutput"] == "expanded"
    assert list(sites.columns) == SITE_COLUMNS
    assert pd.isna(sites["well_depth_va"].item())


def test_get_sites_no_sites_is_empty(monkeypatch):
    def fake_get_info(**kwargs):
        raise NoSitesError("https://waterservices.usgs.gov/nwis/site")

    monkeypatch.setattr(client_module.nwis, "get_info", fake_get_info)

    sites = NWISClient().get_sites((-70.6, 41.5, -70.4, 41.7))
    assert len(sites) == 0
    assert list(sites.columns) == SITE_COLUMNS


def test_get_chemistry_renames_wqp_columns(monkeypatch):
    seen = {}

    def fake_get_results(**kwargs):
        seen.update(kwargs)
        df = pd.DataFrame({
            "MonitoringLocationIdentifier": ["USGS-411500070300001"],
            "USGSPCode": ["00631"],
            "ResultMeasureValue": [0.3],
            "ActivityStartDate": ["2022-03-17"],
            "ActivityStartTime/Time": ["10:00:00"],
            "CharacteristicName": ["Inorganic nitrogen (nitrate and nitrite)"],
        })
        return df, None

    monkeypatch.setattr(client_module.wqp, "get_results", fake_get_results)

    chemistry = NWISClient().get_chemistry(["411500070300001"], ["00631"])

    assert seen["siteid"] == ["USGS-411500070300001"]
    assert seen["pCode"] == ["00631"]
    assert list(chemistry.columns) == QW_COLUMNS
    assert chemistry["site_no"].item() == "411500070300001"


def test_get_chemistry_chunks_long_site_lists(monkeypatch):
    batches = []

    def fake_get_results(**kwargs):
        batches.append(len(kwargs["siteid"]))
        return pd.DataFrame(), None

    monkeypatch.setattr(client_module.wqp, "get_results", fake_get_results)

    chemistry = NWISClient().get_chemistry([str(i) for i in range(250)], ["00010"])
    assert batches == [100, 100, 50]
    assert len(chemistry) == 0
    assert list(chemistry.columns) == QW_COLUMNS


def test_get_water_levels_maps_field_measurement_columns(monkeypatch):
    seen = {}

    def fake_get_field_measurements(**kwargs):
        seen.update(kwargs)
        df = pd.DataFrame({
            "id": ["a1", "a2"],
            "monitoring_location_id": ["USGS-411500070300001", "USGS-411500070300001"],
            "parameter_code": ["72019", "72019"],
            "time": pd.to_datetime(["2022-03-17T14:00:00Z", "2022-04-17T15:30:00Z"]),
            "value": ["10.5", "10.9"],
            "unit_of_measure": ["ft", "ft"],
        })
        return df, None

    monkeypatch.setattr(client_module.waterdata, "get_field_measurements", fake_get_field_measurements)

    levels = NWISClient().get_water_levels(["411500070300001"])

    assert seen["monitoring_location_id"] == ["USGS-411500070300001"]
    assert seen["parameter_code"] == "72019"
    assert list(levels.columns) == LEVEL_COLUMNS
    assert levels["site_no"].tolist() == ["411500070300001", "411500070300001"]
    assert levels["lev_va"].tolist() == ["10.5", "10.9"]
    assert levels["lev_dt"].iloc[0] == pd.Timestamp("2022-03-17T14:00:00Z")


def test_get_water_levels_no_sites_is_empty(monkeypatch):
    def fake_get_field_measurements(**kwargs):
        raise NoSitesError("https://api.waterdata.usgs.gov/ogcapi/v0/collections/field-measurements")

    monkeypatch.setattr(client_module.waterdata, "get_field_measurements", fake_get_field_measurements)

    levels = NWISClient().get_water_levels(["411500070300001"])
    assert len(levels) == 0
    assert list(levels.columns) == LEVEL_COLUMNS
