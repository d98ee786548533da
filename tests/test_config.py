import json

import pytest

from wallstats.common.config import load_settings
from wallstats.common.errors import ConfigError


def write_config(tmp_path, **values):
    config = {
        "pureCloudRegion": "mypurecloud.ie",
        "pureCloudClientId": "client-id",
        "pureCloudClientSecret": "client-secret",
        "granularity": "PT30M",
        "pollFrequencySeconds": 5,
        "queues": ["Q1", "Q2"],
        "databaseUrl": "sqlite://",
    }
    config.update(values)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return str(path)


def test_loads_camel_case_config_file(tmp_path):
    settings = load_settings(write_config(tmp_path))

    assert settings.pure_cloud_region == "mypurecloud.ie"
    assert settings.pure_cloud_client_id == "client-id"
    assert settings.granularity == "PT30M"
    assert settings.poll_frequency_seconds == 5
    assert settings.queues == ["Q1", "Q2"]
    assert settings.database_url == "sqlite://"


def test_unknown_keys_are_ignored(tmp_path):
    settings = load_settings(write_config(tmp_path, agents=["a1"]))
    assert settings.queues == ["Q1", "Q2"]


@pytest.mark.parametrize("granularity", ["PT30M", "PT60M", "PT1H"])
def test_supported_granularities(tmp_path, granularity):
    assert load_settings(write_config(tmp_path, granularity=granularity)).granularity == granularity


@pytest.mark.parametrize("granularity", ["PT15M", "PT1D", "30", ""])
def test_rejects_unsupported_granularity(tmp_path, granularity):
    with pytest.raises(ConfigError, match="granularity"):
        load_settings(write_config(tmp_path, granularity=granularity))


@pytest.mark.parametrize("frequency", [0, 0.5, 61, -5])
def test_rejects_poll_frequency_outside_one_to_sixty(tmp_path, frequency):
    with pytest.raises(ConfigError):
        load_settings(write_config(tmp_path, pollFrequencySeconds=frequency))


def test_rejects_empty_queue_list(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(write_config(tmp_path, queues=[]))


def test_rejects_duplicate_queue_ids(tmp_path):
    with pytest.raises(ConfigError, match="unique"):
        load_settings(write_config(tmp_path, queues=["Q1", "Q1"]))


def test_missing_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_settings(str(tmp_path / "missing.json"))


def test_malformed_json_is_config_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_settings(str(path))


def test_snake_case_keyword_arguments(make_settings):
    settings = make_settings(granularity="PT1H", queues=["A", "B"])
    assert settings.granularity == "PT1H"
    assert settings.queues == ["A", "B"]
    assert settings.max_filter_predicates == 100
