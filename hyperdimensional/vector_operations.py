"""
Vector Operations Module

Implementation of the hypervector algebra: bundling, binding, shifting and
perturbation, each with the numeric semantics of the operand's variant.

| Operation   | operator | remark                                                              |
| ----------- | -------- | ------------------------------------------------------------------- |
| Bundling    | `+`      | combines vectors into a new vector similar to all of them           |
| Binding     | `*`      | combines vectors into one dissimilar to both, invertible            |
| Shifting    |          | cyclic permutation, distributes over bundling, conserves distance   |

Operations never mutate their inputs, except the explicit `*_inplace` forms.
"""

from functools import reduce
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from .error_handling import DimensionMismatch, InsufficientInput, VariantMismatch
from .hypervectors import (
    AbstractHV, BinaryHV, BipolarHV, TernaryHV, RealHV, GradedHV, GradedBipolarHV, check_compatible
)
from .logging_utils import log_vector_operation
from .randomness import GeneratorLike, resolve_generator

Selection = Union[float, int, Sequence[int], Sequence[bool], np.ndarray]


# Scalar combinators
# ------------------

def grad2bipol(x):
    """Map a graded number in [0, 1] to the [-1, 1] interval."""
    return 2 * x - 1


def bipol2grad(x):
    """Map a bipolar number in [-1, 1] to the [0, 1] interval."""
    return (x + 1) / 2


def _scalar_or_array(result: np.ndarray):
    return result.item() if result.ndim == 0 else result


def three_pi(x, y):
    """
    Fuzzy aggregation of graded values.

    Returns 0 where the inputs disagree maximally (|x - y| == 1), otherwise
    x*y / (x*y + (1-x)*(1-y)). 0.5 is the neutral element.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    agree = x * y
    denominator = agree + (1.0 - x) * (1.0 - y)
    # the denominator only vanishes where |x - y| == 1
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(np.abs(x - y) == 1, 0.0, agree / denominator)
    return _scalar_or_array(result)


def fuzzy_xor(x, y):
    """Fuzzy exclusive or of graded values: (1-x)*y + x*(1-y)."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    return _scalar_or_array((1.0 - x) * y + x * (1.0 - y))


def three_pi_bipolar(x, y):
    """`three_pi` for values in [-1, 1]."""
    return grad2bipol(three_pi(bipol2grad(x), bipol2grad(y)))


def fuzzy_xor_bipolar(x, y):
    """`fuzzy_xor` for values in [-1, 1], which reduces to -x*y."""
    return grad2bipol(fuzzy_xor(bipol2grad(x), bipol2grad(y)))


# Aggregation
# -----------

def _bundle_majority(vectors, rng, normalize):
    m = len(vectors)
    # count elements whose storage bit is set; for bipolar that counts the -1s
    counts = np.zeros(len(vectors[0]), dtype=np.int64)
    for hv in vectors:
        counts += hv.data
    if m % 2 == 0:
        # break exact ties with an independent coin flip per dimension
        counts += rng.random(counts.shape[0]) < 0.5
    return type(vectors[0])._wrap(counts > m / 2)


def _bundle_ternary(vectors, rng, normalize):
    total = np.zeros(len(vectors[0]), dtype=np.int64)
    for hv in vectors:
        total += hv.data
    if normalize:
        np.clip(total, -1, 1, out=total)
    return TernaryHV._wrap(total)


def _bundle_real(vectors, rng, normalize):
    total = np.zeros(len(vectors[0]), dtype=np.float64)
    for hv in vectors:
        total += hv.data
    return RealHV._wrap(total / np.sqrt(len(vectors)))


def _bundle_graded(vectors, rng, normalize):
    result = reduce(three_pi, (hv.data for hv in vectors[1:]), vectors[0].data.copy())
    return GradedHV._wrap(np.asarray(result, dtype=np.float64))


def _bundle_graded_bipolar(vectors, rng, normalize):
    result = reduce(three_pi_bipolar, (hv.data for hv in vectors[1:]), vectors[0].data.copy())
    return GradedBipolarHV._wrap(np.asarray(result, dtype=np.float64))


_BUNDLE_RULES = {
    BinaryHV.vector_type: _bundle_majority,
    BipolarHV.vector_type: _bundle_majority,
    TernaryHV.vector_type: _bundle_ternary,
    RealHV.vector_type: _bundle_real,
    GradedHV.vector_type: _bundle_graded,
    GradedBipolarHV.vector_type: _bundle_graded_bipolar,
}


def bundle(vectors: Iterable[AbstractHV], rng: GeneratorLike = None, normalize: bool = False) -> AbstractHV:
    """
    Bundle hypervectors into a superposition similar to all of them.

    Binary and bipolar vectors take the element-wise majority; for an even
    number of inputs, ties are broken by an independent coin flip per
    dimension drawn from `rng`. Ternary vectors are summed (clamped to
    [-1, 1] only when `normalize` is set), real vectors are summed and
    divided by sqrt(m), graded vectors are folded left to right with
    `three_pi`.

    Args:
        vectors: Collection of same-variant, same-dimension hypervectors
        rng: Generator or integer seed for tie-breaking
        normalize (bool): Clamp ternary sums to [-1, 1]

    Returns:
        AbstractHV: Bundled hypervector

    Raises:
        InsufficientInput: If the collection is empty
        VariantMismatch, DimensionMismatch: If the inputs are not homogeneous
    """
    vectors = check_compatible(vectors)
    if not vectors:
        raise InsufficientInput("Cannot bundle an empty collection of hypervectors")

    rule = _BUNDLE_RULES[vectors[0].vector_type]
    result = rule(vectors, resolve_generator(rng), normalize)

    log_vector_operation("bundle", {"vectors": vectors}, {"result": result}, {"normalize": normalize})
    return result


# Binding
# -------

def _bind_pair(a: AbstractHV, b: AbstractHV) -> AbstractHV:
    if type(a) is not type(b):
        raise VariantMismatch(f"Cannot bind {type(a).__name__} with {type(b).__name__}")
    if len(a) != len(b):
        raise DimensionMismatch(f"Hypervectors must have same dimension: {len(a)} vs {len(b)}")

    vector_type = a.vector_type
    if vector_type in (BinaryHV.vector_type, BipolarHV.vector_type):
        data = np.logical_xor(a.data, b.data)
    elif vector_type in (TernaryHV.vector_type, RealHV.vector_type):
        data = a.data * b.data
    elif vector_type == GradedHV.vector_type:
        data = np.asarray(fuzzy_xor(a.data, b.data))
    else:
        data = np.asarray(fuzzy_xor_bipolar(a.data, b.data))
    return type(a)._wrap(data)


def bind(vectors: Union[AbstractHV, Iterable[AbstractHV]], other: Optional[AbstractHV] = None) -> AbstractHV:
    """
    Bind hypervectors into a vector dissimilar to its inputs.

    Called either as `bind(a, b)` or `bind(collection)`; a collection is folded
    pairwise in order. Binary and bipolar use XOR of the storage bits, ternary
    and real element-wise multiplication, graded variants `fuzzy_xor`.

    Raises:
        InsufficientInput: If the collection is empty
        VariantMismatch, DimensionMismatch: If the inputs are not homogeneous
    """
    if other is not None:
        result = _bind_pair(vectors, other)
        log_vector_operation("bind", {"a": vectors, "b": other}, {"result": result})
        return result

    vectors = check_compatible(vectors)
    if not vectors:
        raise InsufficientInput("Cannot bind an empty collection of hypervectors")
    result = reduce(_bind_pair, vectors[1:], vectors[0].copy())
    log_vector_operation("bind", {"vectors": vectors}, {"result": result})
    return result


# Shifting
# --------

def shift(hv: AbstractHV, k: int = 1) -> AbstractHV:
    """
    Cyclically rotate the elements by `k` positions into a new hypervector.

    Positive `k` moves element i to position i + k.
    """
    result = type(hv)._wrap(np.roll(hv.data, k))
    log_vector_operation("shift", {"hv": hv, "k": k}, {"result": result})
    return result


def shift_inplace(hv: AbstractHV, k: int = 1) -> AbstractHV:
    """Cyclically rotate the elements of `hv` by `k` positions, in place."""
    hv.data[:] = np.roll(hv.data, k)
    log_vector_operation("shift_inplace", {"k": k}, {"result": hv})
    return hv


# Perturbation
# ------------

def random_mask(n: int, selection: Selection, rng: GeneratorLike = None) -> np.ndarray:
    """
    Turn a perturbation selection into a boolean mask of length `n`.

    Args:
        n (int): Mask length
        selection: A float fraction in [0, 1] (exactly round(p * n) random
            positions), an int count of random positions, a boolean mask, or
            a sequence of indices
        rng: Generator or integer seed for random positions

    Returns:
        np.ndarray: Boolean mask
    """
    if isinstance(selection, (float, np.floating)):
        if not 0 <= selection <= 1:
            raise ValueError(f"Perturbation fraction should be a valid probability, got {selection}")
        selection = int(round(selection * n))

    if isinstance(selection, (int, np.integer)) and not isinstance(selection, (bool, np.bool_)):
        if not 0 <= selection <= n:
            raise ValueError(f"Cannot perturbate {selection} of {n} elements")
        mask = np.zeros(n, dtype=bool)
        mask[:selection] = True
        resolve_generator(rng).shuffle(mask)
        return mask

    selection = np.asarray(selection)
    if selection.dtype == np.bool_:
        if selection.shape != (n,):
            raise DimensionMismatch(f"Mask length {selection.size} doesn't match dimension {n}")
        return selection.copy()

    mask = np.zeros(n, dtype=bool)
    mask[selection.astype(np.int64)] = True
    return mask


def perturbate_inplace(hv: AbstractHV, selection: Selection, rng: GeneratorLike = None) -> AbstractHV:
    """
    Randomly change the selected elements of `hv`, in place.

    Binary and bipolar elements are flipped; the other variants redraw the
    selected elements from their element distribution.

    Args:
        hv (AbstractHV): Hypervector to mutate
        selection: Fraction, count, boolean mask or indices (see `random_mask`)
        rng: Generator or integer seed

    Returns:
        AbstractHV: `hv` itself
    """
    rng = resolve_generator(rng)
    mask = random_mask(len(hv), selection, rng)
    if isinstance(hv, (BinaryHV, BipolarHV)):
        hv.data[mask] ^= True
    else:
        hv.data[mask] = type(hv)._sample(rng, int(np.count_nonzero(mask)))
    log_vector_operation("perturbate", {"changed": int(np.count_nonzero(mask))}, {"result": hv})
    return hv


def perturbate(hv: AbstractHV, selection: Selection, rng: GeneratorLike = None) -> AbstractHV:
    """Return a perturbed copy of `hv`, correlated with the original."""
    return perturbate_inplace(hv.copy(), selection, rng)
