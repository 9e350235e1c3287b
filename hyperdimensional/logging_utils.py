"""
Hyperdimensional Logging Utilities

This module provides a functional approach to logging for the hyperdimensional
package. It handles initialization of the package logger, compact summaries of
hypervectors for log records, debug logging of vector operations and timing of
expensive calls.

Vector operation records are only built when DEBUG is enabled on the package
logger, so the algebra pays nothing for them in normal use.
"""

import os
import json
import time
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import numpy as np

from .hypervectors import AbstractHV

PACKAGE_LOGGER = "hyperdimensional"

LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR
}

# Number of leading elements shown in summaries
SAMPLE_SIZE = 3


class HypervectorJSONEncoder(json.JSONEncoder):
    """JSON encoder that summarises hypervectors and large arrays."""

    def default(self, obj):
        if isinstance(obj, AbstractHV):
            return summarize_hypervector(obj)
        if isinstance(obj, np.ndarray):
            if obj.size > 10:
                return f"ndarray(shape={obj.shape}, sample=[{', '.join(map(str, obj.flatten()[:SAMPLE_SIZE]))}...])"
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, (set, tuple)):
            return list(obj)
        return super().default(obj)


def initialize_logger(log_path: Optional[str] = None, log_level: str = "info") -> logging.Logger:
    """
    Initialize the package logger.

    Args:
        log_path (str, optional): Directory for a dated log file. Console only if None.
        log_level (str): Minimum log level to record. Options include:
                         "debug", "info", "warning", "error".

    Returns:
        logging.Logger: Configured package logger.
    """
    level = LEVEL_MAP.get(log_level.lower(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Clear existing handlers
    if logger.handlers:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s',
                                          datefmt='%H:%M:%S')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_path:
        os.makedirs(log_path, exist_ok=True)
        log_file = os.path.join(log_path, f"hyperdimensional_{datetime.now().strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_file)
        file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                                           datefmt='%Y-%m-%d %H:%M:%S')
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.info("Logging system initialized with level: %s", logging.getLevelName(level))
    return logger


def summarize_hypervector(hv: AbstractHV) -> Dict[str, Any]:
    """
    Summarize a hypervector for logging.

    Args:
        hv (AbstractHV): Hypervector to summarize.

    Returns:
        Dict[str, Any]: Variant, dimension, a few leading elements and the mean.
    """
    values = hv.values
    return {
        "type": hv.vector_type,
        "dimension": hv.dimension,
        "sample": values[:SAMPLE_SIZE].tolist(),
        "mean": float(values.mean())
    }


def log_vector_operation(
    operation_type: str,
    inputs: Dict[str, Any],
    outputs: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a vector operation at DEBUG level.

    Args:
        operation_type (str): Type of vector operation (e.g., "bind", "bundle", "shift").
        inputs (Dict[str, Any]): Input hypervectors and parameters.
        outputs (Dict[str, Any]): Output hypervectors and results.
        metadata (Dict[str, Any], optional): Additional metadata about the operation.
        logger (logging.Logger, optional): Logger to use, the operations logger by default.
    """
    logger = logger or logging.getLogger(f"{PACKAGE_LOGGER}.operations")
    if not logger.isEnabledFor(logging.DEBUG):
        return

    log_entry = {
        "operation_type": operation_type,
        "inputs": _prepare_for_logging(inputs),
        "outputs": _prepare_for_logging(outputs),
        "metadata": metadata or {}
    }
    logger.debug(json.dumps(log_entry, cls=HypervectorJSONEncoder))


def log_performance_metrics(
    operation: str,
    execution_time: float,
    metrics: Dict[str, Any],
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log performance metrics for an operation.

    Args:
        operation (str): Name of the operation being measured.
        execution_time (float): Execution time in seconds.
        metrics (Dict[str, Any]): Additional metrics specific to the operation.
        logger (logging.Logger, optional): Logger to use, the package logger by default.
    """
    logger = logger or logging.getLogger(PACKAGE_LOGGER)
    logger.info(
        f"Performance - {operation} - Time: {execution_time:.4f}s - "
        f"Metrics: {json.dumps(metrics, cls=HypervectorJSONEncoder)}"
    )


def timer(operation_name: str, logger: Optional[logging.Logger] = None) -> Callable:
    """
    Function decorator to time and log the execution of functions.

    Args:
        operation_name (str): Name of the operation to log.
        logger (logging.Logger, optional): Logger receiving the metrics.

    Returns:
        Callable: Decorator function that times and logs the execution.
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            start_time = time.time()
            result = func(*args, **kwargs)
            execution_time = time.time() - start_time

            log_performance_metrics(
                operation_name,
                execution_time,
                {"function": func.__name__},
                logger=logger
            )

            return result
        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper
    return decorator


def _prepare_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    result = {}
    for key, value in data.items():
        if isinstance(value, AbstractHV):
            result[key] = summarize_hypervector(value)
        elif isinstance(value, (list, tuple)) and value and all(isinstance(v, AbstractHV) for v in value):
            result[key] = {
                "count": len(value),
                "type": value[0].vector_type,
                "dimension": value[0].dimension
            }
        else:
            result[key] = value
    return result
