"""
Configuration Parser for the Hyperdimensional package.

This module handles parsing, validation and extraction of configuration
elements from a JSON file: default hypervector type, dimension and seed,
similarity settings, item memory options and logging. Environment variables
(optionally loaded from a .env file) override the file.
"""

import json
from functools import partial
import os
import logging
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv
from jsonschema import validate, ValidationError

from .error_handling import (
    ConfigurationError, Result, success, error, is_error, get_value, get_error
)
from .hypervectors import AbstractHV, VECTOR_TYPES, hypervector_class
from .logging_utils import LEVEL_MAP, initialize_logger
from .randomness import set_default_seed
from .similarity import METHODS, is_approx, nearest_neighbor, similarity
from .vector_store import INDEX_TYPES

# Set up logging
logger = logging.getLogger(__name__)

# Environment variables overriding configuration values
ENV_OVERRIDES = {
    "HDC_DIMENSION": ("vectors", "dimension", int),
    "HDC_VECTOR_TYPE": ("vectors", "vector_type", str),
    "HDC_SEED": ("vectors", "seed", int),
    "HDC_LOG_LEVEL": ("logging", "log_level", str),
}

# Configuration schema for validation
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "vectors": {
            "type": "object",
            "properties": {
                "dimension": {"type": "integer", "minimum": 1},
                "vector_type": {"type": "string", "enum": sorted(VECTOR_TYPES)},
                "seed": {"type": ["integer", "null"]}
            }
        },
        "similarity": {
            "type": "object",
            "properties": {
                "method": {"type": ["string", "null"], "enum": list(METHODS) + [None]},
                "ptol": {"type": ["number", "null"], "exclusiveMinimum": 0},
                "bootstrap_samples": {"type": "integer", "minimum": 2}
            }
        },
        "store": {
            "type": "object",
            "properties": {
                "index_type": {"type": "string", "enum": list(INDEX_TYPES)}
            }
        },
        "logging": {
            "type": "object",
            "properties": {
                "log_level": {"type": "string", "enum": sorted(LEVEL_MAP)},
                "log_path": {"type": ["string", "null"]},
                "include_vector_operations": {"type": "boolean"}
            }
        }
    }
}


def parse_config_file(input_path: str) -> Result[Dict[str, Any], str]:
    """
    Parse a JSON configuration file.

    Args:
        input_path (str): Path to the JSON configuration file.

    Returns:
        Result: The parsed configuration dictionary, or an error message if the
        file is missing or holds invalid JSON.
    """
    if not os.path.exists(input_path):
        return error(f"Configuration file not found: {input_path}")

    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        return error(f"Invalid JSON in configuration file: {str(e)}")
    except OSError as e:
        return error(f"Error reading configuration: {str(e)}")

    if not isinstance(config, dict):
        return error("Configuration root must be a JSON object")

    logger.info(f"Successfully parsed configuration file: {input_path}")
    return success(config)


def validate_config(config_dict: Dict[str, Any]) -> Result[Dict[str, Any], str]:
    """
    Validate a configuration dictionary and provide defaults for missing values.

    Args:
        config_dict (dict): Raw configuration dictionary.

    Returns:
        Result: Validated configuration with defaults applied, or an error message.
    """
    try:
        validate(instance=config_dict, schema=CONFIG_SCHEMA)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e.message}")
        return error(f"Invalid configuration: {e.message}")

    config = json.loads(json.dumps(config_dict))

    config.setdefault("vectors", {})
    config["vectors"].setdefault("dimension", 10_000)
    config["vectors"].setdefault("vector_type", "binary")
    config["vectors"].setdefault("seed", None)

    config.setdefault("similarity", {})
    config["similarity"].setdefault("method", None)
    config["similarity"].setdefault("ptol", None)
    config["similarity"].setdefault("bootstrap_samples", 500)

    config.setdefault("store", {})
    config["store"].setdefault("index_type", "flat")

    config.setdefault("logging", {})
    config["logging"].setdefault("log_level", "info")
    config["logging"].setdefault("log_path", None)
    config["logging"].setdefault("include_vector_operations", False)

    logger.debug("Configuration validated and defaults applied")
    return success(config)


def apply_environment_overrides(config: Dict[str, Any], env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Override configuration values from the environment.

    Args:
        config (dict): Validated configuration dictionary.
        env_file (str, optional): .env file to load first; existing environment
                                  variables take precedence over it.

    Returns:
        dict: New configuration dictionary with overrides applied.

    Raises:
        ConfigurationError: If an override cannot be converted or fails validation.
    """
    if env_file is not None:
        load_dotenv(env_file)

    overridden = json.loads(json.dumps(config))
    for variable, (section, key, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(variable)
        if raw is None or raw == "":
            continue
        try:
            overridden.setdefault(section, {})[key] = convert(raw)
        except ValueError:
            raise ConfigurationError(f"Invalid value for {variable}: {raw!r}")
        logger.debug(f"Configuration {section}.{key} overridden by {variable}")

    result = validate_config(overridden)
    if is_error(result):
        raise ConfigurationError(get_error(result))
    return get_value(result)


def extract_vector_options(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract hypervector options (dimension, vector_type, seed) from configuration.
    """
    if "vectors" not in config_dict:
        logger.warning("No vector options found in configuration")
        return {}
    return dict(config_dict["vectors"])


def extract_similarity_options(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Extract similarity options (method, ptol, bootstrap_samples) from configuration."""
    if "similarity" not in config_dict:
        logger.warning("No similarity options found in configuration")
        return {}
    return dict(config_dict["similarity"])


def extract_logging_options(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Extract logging options from configuration."""
    if "logging" not in config_dict:
        logger.warning("No logging options found in configuration")
        return {}
    return dict(config_dict["logging"])


def process_config_file(input_path: str, env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Process a configuration file from parsing to validation and overrides.

    Args:
        input_path (str): Path to the configuration file.
        env_file (str, optional): .env file with overrides.

    Returns:
        dict: Validated configuration with defaults and overrides applied.

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid.
    """
    raw_config_result = parse_config_file(input_path)
    if is_error(raw_config_result):
        raise ConfigurationError(get_error(raw_config_result))

    validated_config_result = validate_config(get_value(raw_config_result))
    if is_error(validated_config_result):
        raise ConfigurationError(get_error(validated_config_result))

    config = apply_environment_overrides(get_value(validated_config_result), env_file)
    logger.info("Configuration processing complete")
    return config


def configure(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply a validated configuration to the process.

    Seeds the default generator and initializes the package logger; vector
    operation records are only emitted when `include_vector_operations` is set,
    whatever the log level.

    Args:
        config (dict): Validated configuration dictionary.

    Returns:
        dict: The configured "logger" and "generator", plus "similarity",
        "nearest_neighbor" and "is_approx" bound to the similarity settings.
    """
    vector_options = extract_vector_options(config)
    similarity_options = extract_similarity_options(config)
    logging_options = extract_logging_options(config)

    package_logger = initialize_logger(
        logging_options.get("log_path"),
        logging_options.get("log_level", "info")
    )
    operations_logger = logging.getLogger(f"{package_logger.name}.operations")
    if logging_options.get("include_vector_operations", False):
        operations_logger.setLevel(logging.DEBUG)
    else:
        operations_logger.setLevel(logging.INFO)

    generator = set_default_seed(vector_options.get("seed"))

    method = similarity_options.get("method")
    return {
        "logger": package_logger,
        "generator": generator,
        "similarity": partial(similarity, method=method),
        "nearest_neighbor": partial(nearest_neighbor, method=method),
        "is_approx": partial(
            is_approx,
            ptol=similarity_options.get("ptol"),
            n_bootstrap=similarity_options.get("bootstrap_samples", 500)
        )
    }


def create_vector_factory(config: Dict[str, Any]) -> Callable[..., AbstractHV]:
    """
    Create a factory for hypervectors of the configured type and dimension.

    The factory returns the seeded hypervector of `key` when one is given and a
    random hypervector from the default generator otherwise.
    """
    vector_options = extract_vector_options(config)
    cls = hypervector_class(vector_options.get("vector_type", "binary"))
    dimension = vector_options.get("dimension", 10_000)

    def factory(key: Optional[Any] = None) -> AbstractHV:
        if key is not None:
            return cls.from_seed(key, dimension)
        return cls.random(dimension)

    return factory
