"""Tests for the parameter store and its loaders."""

import logging

import pytest
import yaml

from pcareg.config import (
    Configuration,
    ParameterCastError,
    list_available_presets,
    load_configuration,
    load_parameter_file,
    load_preset,
)


@pytest.fixture
def configuration():
    return Configuration({
        "SubtractMean": True,
        "NumAdditionalSamplesFixed": [0, 2, 4],
        "MovingImageDerivativeScales": [1.0, 1.0, 0.0],
        "Metric1": {
            "SubtractMean": "false",
            "NumAdditionalSamplesFixed": 8,
        },
    })


def test_read_scalar(configuration):
    assert configuration.read_parameter("SubtractMean", "Metric0", default=False) == (True, True)


def test_read_entry_by_index(configuration):
    assert configuration.read_parameter("NumAdditionalSamplesFixed", "Metric0", 2, 0, default=0) == (True, 4)


def test_missing_entry_falls_back_to_default_entry(configuration):
    assert configuration.read_parameter("NumAdditionalSamplesFixed", "Metric0", 5, 0, default=0) == (True, 0)


def test_missing_entry_without_fallback_is_not_found(configuration):
    found, value = configuration.read_parameter(
        "MovingImageDerivativeScales", "Metric0", 3, -1, default=0.0, lenient=True
    )
    assert not found
    assert value == 0.0


def test_labelled_section_takes_precedence(configuration):
    assert configuration.read_parameter("SubtractMean", "Metric1", default=True) == (True, False)
    assert configuration.read_parameter("NumAdditionalSamplesFixed", "Metric1", 2, 0, default=0) == (True, 8)
    # Not in the section: top level is used
    found, _ = configuration.read_parameter("MovingImageDerivativeScales", "Metric1", 0, -1, default=0.0)
    assert found


def test_section_is_not_a_parameter(configuration):
    found, value = configuration.read_parameter("Metric1", None, default=0, lenient=True)
    assert not found
    assert value == 0


def test_missing_parameter_warns_unless_lenient(configuration, caplog):
    with caplog.at_level(logging.WARNING, logger="pcareg"):
        assert configuration.read_parameter("ReducedDimensionIndex", "Metric0", default=0) == (False, 0)
    assert any("ReducedDimensionIndex" in r.getMessage() for r in caplog.records)

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="pcareg"):
        configuration.read_parameter("ReducedDimensionIndex", "Metric0", default=0, lenient=True)
    assert caplog.records == []


def test_values_are_cast_to_default_type():
    config = Configuration({"A": "3", "B": 2.0, "C": "0.25", "D": 1, "E": "TRUE"})
    assert config.read_parameter("A", default=0) == (True, 3)
    assert config.read_parameter("B", default=0) == (True, 2)
    assert config.read_parameter("C", default=0.0) == (True, 0.25)
    assert config.read_parameter("D", default=0.0) == (True, 1.0)
    assert config.read_parameter("E", default=False) == (True, True)
    assert config.read_parameter("D", default="") == (True, "1")


@pytest.mark.parametrize("value, default", [("yes", False), (1, False), ("2.5", 0), (True, 0), ("abc", 0.0)])
def test_unreadable_values_raise(value, default):
    config = Configuration({"Key": value})
    with pytest.raises(ParameterCastError):
        config.read_parameter("Key", default=default)


def test_number_of_entries(configuration):
    assert configuration.number_of_entries("NumAdditionalSamplesFixed") == 3
    assert configuration.number_of_entries("NumAdditionalSamplesFixed", "Metric1") == 1
    assert configuration.number_of_entries("Missing") == 0
    assert configuration.has_parameter("SubtractMean")
    assert not configuration.has_parameter("Missing")


def test_parameters_are_copied(configuration):
    params = configuration.parameters
    params["SubtractMean"] = False
    assert configuration.read_parameter("SubtractMean", default=False) == (True, True)


def test_invalid_mapping_rejected():
    with pytest.raises(ValueError):
        Configuration(["not", "a", "mapping"])
    with pytest.raises(ValueError):
        Configuration({1: "numeric key"})


def test_load_parameter_file(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(yaml.safe_dump({"SubtractMean": True, "Metric0": {"ReducedDimensionIndex": 2}}))
    config = load_parameter_file(path)
    assert config.read_parameter("ReducedDimensionIndex", "Metric0", default=0) == (True, 2)


def test_load_parameter_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_parameter_file(tmp_path / "missing.yaml")


def test_load_parameter_file_not_a_mapping(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_parameter_file(path)


def test_load_configuration_defaults():
    config = load_configuration()
    assert config.read_parameter("NumberOfResolutions", default=0) == (True, 4)
    assert config.read_parameter("Metric", default="") == (True, "PCAMetric3")


def test_load_configuration_layering(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(yaml.safe_dump({"NumberOfResolutions": 2, "Metric0": {"NumAdditionalSamplesFixed": [1, 1]}}))
    config = load_configuration(path, preset="pca_metric3_groupwise", overrides={"SubtractMean": False})

    # user file over preset
    assert config.read_parameter("NumberOfResolutions", default=0) == (True, 2)
    assert config.read_parameter("NumAdditionalSamplesFixed", "Metric0", 1, 0, default=0) == (True, 1)
    # preset section keys survive the merge
    assert config.read_parameter("MovingImageDerivativeScales", "Metric0", 2, -1, default=1.0) == (True, 0.0)
    # overrides over everything
    assert config.read_parameter("SubtractMean", default=True) == (True, False)


def test_load_configuration_missing_user_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_configuration(tmp_path / "missing.yaml")


def test_presets():
    assert "pca_metric3_groupwise" in list_available_presets()
    assert "default" not in list_available_presets()
    assert load_preset("pca_metric3_groupwise.yaml")["SubtractMean"] is True
    with pytest.raises(FileNotFoundError, match="Available presets"):
        load_preset("does_not_exist")


def test_empty_entry_in_section_counts_as_missing():
    config = Configuration({"SubtractMean": True, "Metric0": {"SubtractMean": None}})
    # falls through to the top level
    assert config.read_parameter("SubtractMean", "Metric0", default=False) == (True, True)

    config = Configuration({"Metric0": {"SubtractMean": None}})
    assert config.read_parameter("SubtractMean", "Metric0", default=False, lenient=True) == (False, False)
    assert not config.has_parameter("SubtractMean", "Metric0")


def test_missing_parameter_with_composite_default(caplog):
    with caplog.at_level(logging.WARNING, logger="pcareg"):
        found, value = Configuration({}).read_parameter("GridSpacing", "Metric0", default=[1.0, 1.0])
    assert not found
    assert value == [1.0, 1.0]
    assert any("[1, 1]" in r.getMessage() for r in caplog.records)
