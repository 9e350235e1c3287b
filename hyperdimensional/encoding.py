"""
Encoding Module

Structured encoders built purely from bundling, binding, shifting and
perturbation: multisets, sequences, key-value tables, cross products,
n-grams, graphs and level (thermometer) encodings of scalars.
"""

import logging
from typing import Any, Callable, Optional, Sequence, Tuple, Type, Union

import numpy as np

from .error_handling import InsufficientInput
from .hypervectors import AbstractHV, DEFAULT_DIMENSION, hypervector_class
from .randomness import GeneratorLike, resolve_generator
from .similarity import nearest_neighbor
from .vector_operations import bind, bundle, perturbate, shift

logger = logging.getLogger(__name__)


def multiset(vs: Sequence[AbstractHV], rng: GeneratorLike = None) -> AbstractHV:
    """
    Multiset of hypervectors: bundles all of them together.

    Args:
        vs: Hypervectors
        rng: Generator used to break ties of even-sized binary/bipolar bundles

    Returns:
        AbstractHV: ⊕ V_i
    """
    return bundle(vs, rng=rng)


def multibind(vs: Sequence[AbstractHV]) -> AbstractHV:
    """Binds all the hypervectors together: ⊗ V_i."""
    return bind(vs)


def bundlesequence(vs: Sequence[AbstractHV], rng: GeneratorLike = None) -> AbstractHV:
    """
    Bundling-based sequence: ⊕ Π(V_i, i-1).

    The first hypervector is not shifted, the last one is shifted m-1 times.

    Raises:
        InsufficientInput: If fewer than two hypervectors are given
    """
    vs = list(vs)
    if len(vs) < 2:
        raise InsufficientInput("Can't bundle sequence of a single hypervector")
    return bundle([shift(hv, i) for i, hv in enumerate(vs)], rng=rng)


def bindsequence(vs: Sequence[AbstractHV]) -> AbstractHV:
    """
    Binding-based sequence: ⊗ Π(V_i, i-1).

    Raises:
        InsufficientInput: If fewer than two hypervectors are given
    """
    vs = list(vs)
    if len(vs) < 2:
        raise InsufficientInput("Can't bind sequence of a single hypervector")
    return bind([shift(hv, i) for i, hv in enumerate(vs)])


def hashtable(keys: Sequence[AbstractHV], values: Sequence[AbstractHV], rng: GeneratorLike = None) -> AbstractHV:
    """
    Hash table of key-value pairs: ⊕ K_i ⊗ V_i.

    A value is retrieved by binding the table with its key and cleaning up the
    result against the known values.

    Raises:
        InsufficientInput: If the number of keys and values differ
    """
    keys, values = list(keys), list(values)
    if len(keys) != len(values):
        raise InsufficientInput(f"Number of keys ({len(keys)}) and values ({len(values)}) aren't equal")
    return bundle([bind(k, v) for k, v in zip(keys, values)], rng=rng)


def crossproduct(U: Sequence[AbstractHV], V: Sequence[AbstractHV], rng: GeneratorLike = None) -> AbstractHV:
    """
    Cross product of two sets: (⊕ U_i) ⊗ (⊕ V_j).

    Expands to the bundle of every U_i ⊗ V_j. The multisets are not
    renormalised before binding.
    """
    rng = resolve_generator(rng)
    return bind(multiset(U, rng=rng), multiset(V, rng=rng))


def ngrams(vs: Sequence[AbstractHV], n: int = 3, rng: GeneratorLike = None) -> AbstractHV:
    """
    Hypervector holding the n-gram statistics of a sequence.

    Every window of n consecutive hypervectors is encoded as
    V_i ⊗ Π(V_{i+1}, 1) ⊗ ... ⊗ Π(V_{i+n-1}, n-1) and all m-n+1 windows are
    bundled. `ngrams(vs, 1)` equals `multiset(vs)` and `ngrams(vs, len(vs))`
    equals `bindsequence(vs)`.

    Raises:
        InsufficientInput: Unless 1 <= n <= len(vs)
    """
    vs = list(vs)
    m = len(vs)
    if not 1 <= n <= m:
        raise InsufficientInput(f"`n` must be 1 ≤ n ≤ {m}, got {n}")
    windows = [bind([shift(vs[i + j], j) for j in range(n)]) for i in range(m - n + 1)]
    return bundle(windows, rng=rng)


def graph(source: Sequence[AbstractHV], target: Sequence[AbstractHV], directed: bool = False,
          rng: GeneratorLike = None) -> AbstractHV:
    """
    Graph encoded as a hash table of edges.

    Each edge binds its source node with its target node, shifted once for
    directed graphs so that edge direction is preserved.

    Raises:
        InsufficientInput: If source and target differ in length
    """
    source, target = list(source), list(target)
    if len(source) != len(target):
        raise InsufficientInput(f"Number of sources ({len(source)}) and targets ({len(target)}) aren't equal")
    offset = 1 if directed else 0
    return hashtable(source, [shift(hv, offset) for hv in target], rng=rng)


def level(base: Union[AbstractHV, Type[AbstractHV], str], n: Union[int, Sequence[float]],
          rng: GeneratorLike = None, dimension: int = DEFAULT_DIMENSION) -> list:
    """
    Chain of correlated hypervectors representing an ordered range.

    Each level is the previous one perturbed at a fraction 2/n of its
    elements, so neighbouring levels stay strongly correlated while the ends
    of the chain approach chance similarity.

    Args:
        base: First level, or a variant (class or tag) to draw it from
        n: Number of levels, or the numeric values they will represent
        rng: Generator or integer seed
        dimension (int): Dimension of a freshly drawn base

    Returns:
        list: n hypervectors
    """
    rng = resolve_generator(rng)
    count = n if isinstance(n, (int, np.integer)) else len(n)
    if count < 1:
        raise InsufficientInput(f"Need at least one level, got {count}")

    if not isinstance(base, AbstractHV):
        base = hypervector_class(base).random(dimension, rng)

    fraction = min(2 / count, 1.0)
    levels = [base.copy()]
    for _ in range(count - 1):
        levels.append(perturbate(levels[-1], fraction, rng))
    logger.debug(f"Created {count} {base.vector_type} levels with perturbation fraction {fraction:.4f}")
    return levels


def _check_levels(levels: Sequence[AbstractHV], values: Sequence[float]) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    if len(levels) != len(values):
        raise InsufficientInput(f"Number of levels ({len(levels)}) and values ({len(values)}) aren't equal")
    if len(levels) == 0:
        raise InsufficientInput("Need at least one level")
    return values


def level_encoder(levels: Sequence[AbstractHV], values: Sequence[float]) -> Callable[[float], AbstractHV]:
    """
    Encoder mapping a number to the level of the nearest tabulated value.

    Args:
        levels: Level hypervectors, e.g. from `level`
        values: Numeric value represented by each level

    Returns:
        Callable: x -> hypervector
    """
    levels = list(levels)
    table = _check_levels(levels, values)

    def encode(x: float) -> AbstractHV:
        return levels[int(np.argmin(np.abs(table - x)))]

    return encode


def level_decoder(levels: Sequence[AbstractHV], values: Sequence[float],
                  method: Optional[str] = None) -> Callable[[AbstractHV], float]:
    """
    Decoder mapping a hypervector to the value of its most similar level.

    Returns:
        Callable: hypervector -> value
    """
    levels = list(levels)
    table = _check_levels(levels, values)

    def decode(hv: AbstractHV) -> float:
        _, index, _ = nearest_neighbor(hv, levels, method=method)
        return float(table[index])

    return decode


def levels_encoder_decoder(levels: Sequence[AbstractHV], values: Sequence[float],
                           method: Optional[str] = None) -> Tuple[Callable, Callable]:
    """Return the (encoder, decoder) pair for a level chain."""
    return level_encoder(levels, values), level_decoder(levels, values, method)
