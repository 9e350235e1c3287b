"""
Test configuration parser module
"""

import json
import logging
import os

import numpy as np
import pytest
from hyperdimensional.config_parser import (
    parse_config_file, validate_config, apply_environment_overrides, extract_vector_options,
    extract_logging_options, process_config_file, configure, create_vector_factory
)
from hyperdimensional.error_handling import ConfigurationError, is_error, is_success, get_value, get_error
from hyperdimensional.hypervectors import BinaryHV, RealHV
from hyperdimensional.vector_operations import bundle

ENV_VARIABLES = ["HDC_DIMENSION", "HDC_VECTOR_TYPE", "HDC_SEED", "HDC_LOG_LEVEL"]

SAMPLE_CONFIG = {
    "vectors": {
        "dimension": 512,
        "vector_type": "real",
        "seed": 7
    },
    "similarity": {
        "method": "cosine"
    },
    "logging": {
        "log_level": "debug"
    }
}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Make sure no override leaks in from, or out to, the environment"""
    for variable in ENV_VARIABLES:
        monkeypatch.setenv(variable, "")
        monkeypatch.delenv(variable)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(SAMPLE_CONFIG))
    return str(path)


def test_parse_config_file(config_path):
    """Test parsing a JSON configuration"""
    result = parse_config_file(config_path)
    assert is_success(result)
    assert get_value(result) == SAMPLE_CONFIG


def test_parse_config_file_errors(tmp_path):
    """Test missing and malformed files are reported as errors"""
    result = parse_config_file(str(tmp_path / "missing.json"))
    assert is_error(result)
    assert "not found" in get_error(result)

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert "Invalid JSON" in get_error(parse_config_file(str(broken)))

    array = tmp_path / "array.json"
    array.write_text("[1, 2, 3]")
    assert is_error(parse_config_file(str(array)))


def test_validate_config_defaults():
    """Test defaults are filled in for an empty configuration"""
    config = get_value(validate_config({}))
    assert config["vectors"] == {"dimension": 10_000, "vector_type": "binary", "seed": None}
    assert config["similarity"]["method"] is None
    assert config["similarity"]["bootstrap_samples"] == 500
    assert config["store"]["index_type"] == "flat"
    assert config["logging"]["log_level"] == "info"
    assert config["logging"]["log_path"] is None
    assert config["logging"]["include_vector_operations"] is False


def test_validate_config_keeps_values():
    """Test explicit values win over defaults without mutating the input"""
    config = get_value(validate_config(SAMPLE_CONFIG))
    assert config["vectors"]["dimension"] == 512
    assert config["vectors"]["vector_type"] == "real"
    assert config["similarity"]["method"] == "cosine"
    assert "store" not in SAMPLE_CONFIG


@pytest.mark.parametrize("invalid", [
    {"vectors": {"dimension": 0}},
    {"vectors": {"dimension": "large"}},
    {"vectors": {"vector_type": "quaternion"}},
    {"similarity": {"method": "euclidean"}},
    {"store": {"index_type": "ivf"}},
    {"logging": {"log_level": "verbose"}},
])
def test_validate_config_errors(invalid):
    """Test schema violations are reported as errors"""
    result = validate_config(invalid)
    assert is_error(result)
    assert get_error(result).startswith("Invalid configuration")


def test_environment_overrides(monkeypatch):
    """Test environment variables override the configuration"""
    config = get_value(validate_config(SAMPLE_CONFIG))
    monkeypatch.setenv("HDC_DIMENSION", "256")
    monkeypatch.setenv("HDC_VECTOR_TYPE", "bipolar")
    monkeypatch.setenv("HDC_LOG_LEVEL", "warning")

    overridden = apply_environment_overrides(config)
    assert overridden["vectors"]["dimension"] == 256
    assert overridden["vectors"]["vector_type"] == "bipolar"
    assert overridden["vectors"]["seed"] == 7
    assert overridden["logging"]["log_level"] == "warning"
    # The input is not modified
    assert config["vectors"]["dimension"] == 512


def test_environment_overrides_from_env_file(tmp_path, monkeypatch):
    """Test overrides loaded from a .env file"""
    env_file = tmp_path / ".env"
    env_file.write_text("HDC_SEED=99\nHDC_VECTOR_TYPE=ternary\n")
    config = get_value(validate_config({}))

    overridden = apply_environment_overrides(config, str(env_file))
    assert overridden["vectors"]["seed"] == 99
    assert overridden["vectors"]["vector_type"] == "ternary"


@pytest.mark.parametrize("variable,value", [
    ("HDC_DIMENSION", "abc"),
    ("HDC_DIMENSION", "-3"),
    ("HDC_VECTOR_TYPE", "quaternion"),
])
def test_environment_override_errors(monkeypatch, variable, value):
    """Test invalid overrides raise configuration errors"""
    monkeypatch.setenv(variable, value)
    with pytest.raises(ConfigurationError):
        apply_environment_overrides(get_value(validate_config({})))


def test_extract_options():
    """Test option extraction from configuration sections"""
    config = get_value(validate_config(SAMPLE_CONFIG))
    assert extract_vector_options(config)["vector_type"] == "real"
    assert extract_logging_options(config)["log_level"] == "debug"
    assert extract_vector_options({}) == {}
    assert extract_logging_options({}) == {}


def test_process_config_file(config_path, monkeypatch):
    """Test the full configuration pipeline"""
    monkeypatch.setenv("HDC_DIMENSION", "128")
    config = process_config_file(config_path)
    assert config["vectors"]["dimension"] == 128
    assert config["vectors"]["vector_type"] == "real"
    assert config["store"]["index_type"] == "flat"


def test_process_config_file_errors(tmp_path):
    """Test pipeline failures raise configuration errors"""
    with pytest.raises(ConfigurationError):
        process_config_file(str(tmp_path / "missing.json"))

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"vectors": {"dimension": -1}}))
    with pytest.raises(ConfigurationError):
        process_config_file(str(invalid))


def test_configure_seeds_default_generator(tmp_path):
    """Test configure seeds the default generator and sets up logging"""
    config = get_value(validate_config({
        "vectors": {"seed": 42},
        "logging": {"log_path": str(tmp_path / "logs"), "log_level": "warning"}
    }))
    try:
        configured = configure(config)
        assert configured["logger"].name == "hyperdimensional"
        assert configured["logger"].level == logging.WARNING
        assert os.listdir(str(tmp_path / "logs"))

        first = BinaryHV.random(100)
        assert first == BinaryHV.random(100, np.random.default_rng(42))
    finally:
        configure(get_value(validate_config({})))


def test_configure_vector_operation_logging(caplog):
    """Test vector operation records follow the configuration"""
    rng = np.random.default_rng(0)
    vectors = [RealHV.random(10, rng) for _ in range(3)]
    try:
        configure(get_value(validate_config({"logging": {"include_vector_operations": True}})))
        with caplog.at_level(logging.DEBUG):
            bundle(vectors)
        assert any("bundle" in record.getMessage() for record in caplog.records
                   if record.name == "hyperdimensional.operations")
    finally:
        configure(get_value(validate_config({})))

    caplog.clear()
    with caplog.at_level(logging.INFO):
        bundle(vectors)
    assert not [record for record in caplog.records if record.name == "hyperdimensional.operations"]

    # A debug log level alone does not switch the records on
    try:
        configure(get_value(validate_config({
            "logging": {"log_level": "debug", "include_vector_operations": False}
        })))
        caplog.clear()
        with caplog.at_level(logging.DEBUG):
            bundle(vectors)
        assert not [record for record in caplog.records if record.name == "hyperdimensional.operations"]
    finally:
        configure(get_value(validate_config({})))


def test_configure_similarity_settings():
    """Test configure binds the similarity settings"""
    config = get_value(validate_config({
        "similarity": {"method": "hamming", "ptol": 0.05, "bootstrap_samples": 50}
    }))
    try:
        configured = configure(config)
        assert configured["similarity"](RealHV([1.0, 0.0]), RealHV([1.0, 0.0])) == 2.0
        assert configured["similarity"](RealHV([1.0, 0.0]), RealHV([0.0, 0.0])) == 1.0

        collection = {"near": RealHV([1.0, 0.5]), "far": RealHV([-1.0, -1.0])}
        score, key, _ = configured["nearest_neighbor"](RealHV([1.0, 0.0]), collection)
        assert key == "near"
        assert score == 1.5

        assert configured["is_approx"].keywords == {"ptol": 0.05, "n_bootstrap": 50}
        hv = BinaryHV.random(1000, np.random.default_rng(0))
        assert configured["is_approx"](hv, hv.copy())
    finally:
        configure(get_value(validate_config({})))

    # Defaults keep the per-variant methods
    configured = configure(get_value(validate_config({})))
    assert configured["similarity"](RealHV([1.0, 0.0]), RealHV([1.0, 0.0])) == pytest.approx(1.0)
    assert configured["is_approx"].keywords == {"ptol": None, "n_bootstrap": 500}


def test_create_vector_factory():
    """Test the configured hypervector factory"""
    config = get_value(validate_config({"vectors": {"dimension": 64, "vector_type": "real"}}))
    factory = create_vector_factory(config)

    hv = factory()
    assert isinstance(hv, RealHV)
    assert len(hv) == 64
    assert factory("apple") == RealHV.from_seed("apple", 64)
