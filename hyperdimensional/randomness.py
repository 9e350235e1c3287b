"""
Random number generation shared by the hypervector algebra.

Every randomised operation accepts an explicit generator (or integer seed);
the process-wide default generator is only used when none is given.
"""

import hashlib
import logging
from typing import Any, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

GeneratorLike = Union[None, int, np.random.Generator]

_default_generator = np.random.default_rng()


def get_default_generator() -> np.random.Generator:
    """Return the process-wide default generator."""
    return _default_generator


def set_default_seed(seed: Optional[int]) -> np.random.Generator:
    """
    Replace the process-wide default generator.

    Args:
        seed (int, optional): Seed for the new generator, None for fresh entropy

    Returns:
        np.random.Generator: The new default generator
    """
    global _default_generator
    _default_generator = np.random.default_rng(seed)
    logger.debug(f"Default generator reseeded with {seed}")
    return _default_generator


def resolve_generator(rng: GeneratorLike = None) -> np.random.Generator:
    """
    Turn an optional generator argument into a numpy Generator.

    Args:
        rng: None (use the default generator), an integer seed, or a Generator

    Returns:
        np.random.Generator: Generator to draw from
    """
    if rng is None:
        return _default_generator
    if isinstance(rng, np.random.Generator):
        return rng
    if isinstance(rng, (int, np.integer)) and not isinstance(rng, bool):
        return np.random.default_rng(int(rng))
    raise TypeError(f"Expected None, an integer seed or a numpy Generator, got {type(rng).__name__}")


def seed_from_key(key: Any) -> int:
    """
    Derive a deterministic integer seed from an arbitrary key.

    Strings are hashed as-is, other keys through their repr, so the same key
    yields the same seed in every process.
    """
    text = key if isinstance(key, str) else repr(key)
    return int(hashlib.md5(text.encode()).hexdigest(), 16) % (2**32)


def generator_from_key(key: Any) -> np.random.Generator:
    """Create a fresh generator whose state is a pure function of `key`."""
    return np.random.default_rng(seed_from_key(key))
