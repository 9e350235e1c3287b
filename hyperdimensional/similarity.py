"""
Similarity and Search Module

Similarity metrics between hypervectors, the per-variant canonical metric,
pairwise similarity matrices, nearest-neighbor search over sequences and
mappings, and a statistical test for "more similar than chance".

Canonical metrics:
- cosine for BipolarHV, TernaryHV, RealHV and GradedBipolarHV
- Jaccard, dot(u, v) / sum(u + v - u*v), for BinaryHV and GradedHV
"""

import heapq
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

import numpy as np
from scipy import stats
from tqdm import tqdm

from .error_handling import DimensionMismatch, InsufficientInput, UnsupportedMethod, VariantMismatch
from .hypervectors import AbstractHV, BinaryHV, BipolarHV, GradedHV
from .randomness import GeneratorLike, resolve_generator

logger = logging.getLogger(__name__)

METHODS = ("cosine", "jaccard", "hamming")

JACCARD_TYPES = (BinaryHV.vector_type, GradedHV.vector_type)


def _as_values(x: Any) -> np.ndarray:
    if isinstance(x, AbstractHV):
        return x.values.astype(np.float64)
    return np.asarray(x, dtype=np.float64)


def cosine_similarity(u: Any, v: Any) -> float:
    """
    Cosine similarity (normalized dot product) of two vectors.

    Returns 0.0 when either vector has zero norm.
    """
    u, v = _as_values(u), _as_values(v)
    norm_u = np.linalg.norm(u)
    norm_v = np.linalg.norm(v)
    if norm_u == 0 or norm_v == 0:
        return 0.0
    return float(np.dot(u, v) / (norm_u * norm_v))


def jaccard_similarity(u: Any, v: Any) -> float:
    """
    Jaccard-like similarity dot(u, v) / sum(u + v - u*v).

    Returns 0.0 when the denominator vanishes (both vectors all zero).
    """
    u, v = _as_values(u), _as_values(v)
    denominator = np.sum(u + v - u * v)
    if denominator == 0:
        return 0.0
    return float(np.dot(u, v) / denominator)


def hamming_similarity(u: Any, v: Any) -> float:
    """Number of elements minus the Hamming (L1) distance of the element values."""
    u, v = _as_values(u), _as_values(v)
    return float(u.shape[0] - np.sum(np.abs(u - v)))


_METHOD_FUNCTIONS = {
    "cosine": cosine_similarity,
    "jaccard": jaccard_similarity,
    "hamming": hamming_similarity,
}


def default_method(hv: AbstractHV) -> str:
    """Canonical similarity method for the variant of `hv`."""
    return "jaccard" if hv.vector_type in JACCARD_TYPES else "cosine"


def _pairwise(u: Any, v: Any, method: Optional[str] = None) -> float:
    if method is None:
        if not isinstance(u, AbstractHV) or type(u) is not type(v):
            raise VariantMismatch(
                f"Similarity without an explicit method needs two hypervectors of the same variant, "
                f"got {type(u).__name__} and {type(v).__name__}"
            )
        method = default_method(u)
    elif method not in _METHOD_FUNCTIONS:
        raise UnsupportedMethod(f"`method` has to be one of {list(METHODS)}, got {method!r}")

    if len(u) != len(v):
        raise DimensionMismatch(f"Vectors have to be of the same length: {len(u)} vs {len(v)}")

    return _METHOD_FUNCTIONS[method](u, v)


def similarity_to(u: AbstractHV, method: Optional[str] = None) -> Callable[[Any], float]:
    """Return the function v -> similarity(u, v)."""
    def similarity_with(v: Any) -> float:
        return _pairwise(u, v, method)
    return similarity_with


def similarity_matrix(vectors: Iterable[Any], method: Optional[str] = None,
                      show_progress: bool = False) -> np.ndarray:
    """
    Symmetric matrix of pairwise similarities.

    Only the upper triangle (with the diagonal) is computed and mirrored.

    Args:
        vectors: Collection of hypervectors
        method (str, optional): Explicit method, the canonical one if None
        show_progress (bool): Report rows with a progress bar

    Returns:
        np.ndarray: n x n similarity matrix
    """
    vectors = list(vectors)
    n = len(vectors)
    matrix = np.zeros((n, n), dtype=np.float64)
    rows = tqdm(range(n), desc="similarity") if show_progress else range(n)
    for i in rows:
        for j in range(i, n):
            matrix[i, j] = _pairwise(vectors[i], vectors[j], method)
            matrix[j, i] = matrix[i, j]
    return matrix


def similarity(u: Any, v: Any = None, method: Optional[str] = None):
    """
    Similarity between hypervectors.

    - `similarity(u, v)` compares two hypervectors with their variant's
      canonical metric, or with `method` in ("cosine", "jaccard", "hamming"),
      which also accepts plain arrays and mixed variants.
    - `similarity(u)` with a single hypervector returns `v -> similarity(u, v)`.
    - `similarity(collection)` returns the pairwise similarity matrix.

    Raises:
        UnsupportedMethod: If `method` is not a known method
        DimensionMismatch: If the vectors differ in length
        VariantMismatch: If no method is given and the variants differ
    """
    if v is None:
        if isinstance(u, AbstractHV):
            return similarity_to(u, method)
        return similarity_matrix(u, method)
    return _pairwise(u, v, method)


def _entries(collection: Union[Mapping, Iterable[Any]]) -> List[Tuple[Any, Any]]:
    if isinstance(collection, Mapping):
        return list(collection.items())
    return list(enumerate(collection))


def nearest_neighbor(query: Any, collection: Union[Mapping, Iterable[Any]], k: Optional[int] = None,
                     method: Optional[str] = None):
    """
    Find the element of `collection` most similar to `query`.

    Args:
        query: Query hypervector
        collection: Sequence (keyed by 0-based index) or mapping of hypervectors
        k (int, optional): Number of neighbors to return
        method (str, optional): Explicit similarity method

    Returns:
        Without `k`, the triple (similarity, key, vector) of the best match,
        the first one in iteration order on ties. With `k`, a list of
        (similarity, key) pairs sorted by descending similarity.

    Raises:
        InsufficientInput: If the collection is empty
        ValueError: If k < 1
    """
    entries = _entries(collection)
    if not entries:
        raise InsufficientInput("Cannot search an empty collection")

    compare = similarity_to(query, method)

    if k is None:
        best_key, best_vector = entries[0]
        best_similarity = compare(best_vector)
        for key, vector in entries[1:]:
            score = compare(vector)
            if score > best_similarity:
                best_similarity, best_key, best_vector = score, key, vector
        return best_similarity, best_key, best_vector

    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    scored = [(compare(vector), key) for key, vector in entries]
    return heapq.nlargest(k, scored, key=lambda item: item[0])


def is_approx(u: AbstractHV, v: AbstractHV, atol: Optional[float] = None, ptol: Optional[float] = None,
              n_bootstrap: int = 500, rng: GeneratorLike = None) -> bool:
    """
    Test whether two hypervectors are more similar than expected by chance.

    For binary and bipolar vectors, the number of mismatches is compared
    against a Binomial(n, 0.5) null: the vectors are similar if seeing that few
    mismatches has probability below `ptol` (default 0.01), or if the number of
    matches exceeds n/2 by more than `atol` (default n/100).

    For other variants, a null distribution of the element-wise distance is
    bootstrapped from `n_bootstrap` random element pairs, approximated by a
    normal, and the observed distance must fall below it with probability
    `ptol` (default 1e-10).

    Raises:
        VariantMismatch, DimensionMismatch: If the vectors are not comparable
    """
    if not isinstance(u, AbstractHV) or type(u) is not type(v):
        raise VariantMismatch(f"Cannot compare {type(u).__name__} with {type(v).__name__}")
    if len(u) != len(v):
        raise DimensionMismatch(f"Vectors have to be of equal length: {len(u)} vs {len(v)}")
    n = len(u)

    if isinstance(u, (BinaryHV, BipolarHV)):
        atol = n / 100 if atol is None else atol
        ptol = 0.01 if ptol is None else ptol
        mismatches = int(np.count_nonzero(u.data != v.data))
        matches = n - mismatches
        # probability of seeing this few mismatches due to chance
        pval = stats.binom.cdf(mismatches, n, 0.5)
        return bool(pval < ptol or matches - n / 2 > atol)

    ptol = 1e-10 if ptol is None else ptol
    rng = resolve_generator(rng)
    u_values, v_values = _as_values(u), _as_values(v)
    samples = np.abs(rng.choice(u_values, n_bootstrap) - rng.choice(v_values, n_bootstrap))
    null_mean = n * samples.mean()
    null_std = np.sqrt(n) * samples.std(ddof=1)
    distance = np.sum(np.abs(u_values - v_values))
    if null_std == 0:
        return bool(distance < null_mean)
    pval = stats.norm.cdf(distance, loc=null_mean, scale=null_std)
    return bool(pval < ptol)
