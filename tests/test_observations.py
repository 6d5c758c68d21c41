import pandas as pd
import pytest

from nwis_wq_analysis.client import QW_COLUMNS
from nwis_wq_analysis.config import InvalidInputError
from nwis_wq_analysis.observations import ObservationFetcher

from conftest import FakeClient


def test_fetch_returns_chemistry_and_levels(client, config, logger):
    chemistry, levels = ObservationFetcher(client, config, logger).fetch(["411500070300001", "411500070300002"])

    assert list(chemistry.columns) == QW_COLUMNS
    assert chemistry["result_va"].dtype.kind == "f"
    assert chemistry.loc[chemistry["parm_cd"] == "00095", "result_va"].item() == 150.0
    assert len(levels) == 3
    assert [c[0] for c in client.calls] == ["chemistry", "levels"]


def test_default_parameter_codes_are_requested(client, config, logger):
    ObservationFetcher(client, config, logger).fetch(["411500070300001"])
    assert client.calls[0][2] == config.parameter_codes


def test_repeated_site_ids_are_collapsed(client, config, logger):
    ObservationFetcher(client, config, logger).fetch(["1", "2", "1"])
    assert client.calls[0][1] == ["1", "2"]


def test_malformed_code_fails_before_query(client, config, logger):
    with pytest.raises(InvalidInputError):
        ObservationFetcher(client, config, logger).fetch(["411500070300001"], ["631"])
    assert client.calls == []


def test_unmapped_code_is_allowed(client, config, logger, caplog):
    with caplog.at_level("WARNING", logger=logger.name):
        ObservationFetcher(client, config, logger).fetch(["411500070300001"], ["00010", "99999"])
    assert client.calls[0][2] == ["00010", "99999"]
    assert "99999" in caplog.text


def test_no_sites_means_no_query(client, config, logger):
    chemistry, levels = ObservationFetcher(client, config, logger).fetch([])
    assert len(chemistry) == 0 and len(levels) == 0
    assert client.calls == []


def test_site_without_records_contributes_zero_rows(config, logger):
    client = FakeClient(chemistry=pd.DataFrame(columns=QW_COLUMNS))
    chemistry, _ = ObservationFetcher(client, config, logger).fetch(["411800070330001"])
    assert len(chemistry) == 0


def test_remote_failure_propagates(config, logger):
    class Broken(FakeClient):
        def get_chemistry(self, sites, parameter_codes):
            raise ConnectionError("service unavailable")

    with pytest.raises(ConnectionError):
        ObservationFetcher(Broken(), config, logger).fetch(["411500070300001"])
