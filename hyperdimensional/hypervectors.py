"""
Hypervector Types Module

Implements the closed family of hypervector representations used throughout the
package. Every variant wraps a fixed-length numpy array and exposes the same
vector-like interface (length, indexing, iteration, equality, copy), while the
algebra in `vector_operations` dispatches on the `vector_type` tag.

| Variant          | Elements           | Random draw                 |
| ---------------- | ------------------ | --------------------------- |
| BinaryHV         | {False, True}      | Bernoulli(0.5)              |
| BipolarHV        | {-1, +1}           | Bernoulli(0.5) mapped to ±1 |
| TernaryHV        | {-1, 0, +1}        | uniform over {-1, +1}       |
| RealHV           | reals              | standard normal             |
| GradedHV         | [0, 1]             | Beta(1, 1)                  |
| GradedBipolarHV  | [-1, 1]            | 2 * Beta(1, 1) - 1          |
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Type, Union

import numpy as np

from .error_handling import InvalidDimension, InvalidElement, DimensionMismatch, VariantMismatch, UnsupportedVectorType
from .randomness import GeneratorLike, generator_from_key, resolve_generator

DEFAULT_DIMENSION = 10_000

# numpy dtype kinds accepted as explicit element data
_NUMERIC_KINDS = "biuf"


def validate_dimension(dimension: Any) -> int:
    """
    Check that a dimension is a positive integer.

    Args:
        dimension: Candidate dimension

    Returns:
        int: The dimension as a Python int

    Raises:
        InvalidDimension: If the dimension is not a positive integer
    """
    if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)):
        raise InvalidDimension(f"Dimension must be an integer, got {dimension!r}")
    if dimension <= 0:
        raise InvalidDimension(f"Dimension must be positive, got {dimension}")
    return int(dimension)


def _require_numeric(data: np.ndarray, variant: str) -> None:
    if data.dtype.kind not in _NUMERIC_KINDS:
        raise InvalidElement(f"{variant} elements must be numeric, got dtype {data.dtype}")


class AbstractHV:
    """
    Common interface of all hypervector variants.

    Concrete variants only describe how explicit data is validated, how random
    elements are drawn and what their zero element is; everything else lives here.
    """

    vector_type: str = ""

    __slots__ = ("_data",)

    def __init__(self, values: Iterable[Any]):
        data = np.asarray(values)
        if data.ndim != 1 or data.size == 0:
            raise InvalidDimension(
                f"{type(self).__name__} needs non-empty one-dimensional data, got shape {data.shape}"
            )
        self._data = self._coerce(data)

    # Variant hooks

    @classmethod
    def _coerce(cls, data: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @classmethod
    def _sample(cls, rng: np.random.Generator, n: int) -> np.ndarray:
        raise NotImplementedError

    @classmethod
    def _zero(cls, n: int) -> np.ndarray:
        raise NotImplementedError

    @classmethod
    def _to_values(cls, data: np.ndarray) -> np.ndarray:
        return data

    @classmethod
    def _normalized(cls, data: np.ndarray) -> np.ndarray:
        return data.copy()

    # Construction

    @classmethod
    def _wrap(cls, data: np.ndarray) -> "AbstractHV":
        """Wrap storage produced by an operation without re-validating it."""
        hv = cls.__new__(cls)
        hv._data = data
        return hv

    @classmethod
    def random(cls, dimension: int = DEFAULT_DIMENSION, rng: GeneratorLike = None) -> "AbstractHV":
        """
        Draw a random hypervector.

        Args:
            dimension (int): Number of elements
            rng: Generator or integer seed, the default generator if None

        Returns:
            AbstractHV: Fresh hypervector of this variant
        """
        n = validate_dimension(dimension)
        return cls._wrap(cls._sample(resolve_generator(rng), n))

    @classmethod
    def from_seed(cls, key: Any, dimension: int = DEFAULT_DIMENSION) -> "AbstractHV":
        """
        Generate the hypervector associated with a symbol.

        The result is a pure function of `key` and `dimension`, so symbol
        vocabularies can be regenerated without storing them.
        """
        n = validate_dimension(dimension)
        return cls._wrap(cls._sample(generator_from_key(key), n))

    @classmethod
    def zeros(cls, dimension: int) -> "AbstractHV":
        """Hypervector filled with the variant's zero element."""
        return cls._wrap(cls._zero(validate_dimension(dimension)))

    # Vector protocol

    @property
    def data(self) -> np.ndarray:
        """Underlying storage, shared with the hypervector."""
        return self._data

    @property
    def dimension(self) -> int:
        return self._data.shape[0]

    @property
    def values(self) -> np.ndarray:
        """Element values as a fresh numpy array."""
        return np.array(self._to_values(self._data))

    def tolist(self) -> List[Any]:
        return self.values.tolist()

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, index):
        values = self._to_values(self._data[index])
        if np.ndim(values) == 0:
            return values.item()
        return np.array(values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.tolist())

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return np.array_equal(self._data, other._data)

    # mutable through the in-place operations
    __hash__ = None

    def __repr__(self) -> str:
        values = self.values
        return (
            f"{type(self).__name__}(dimension={self.dimension}, "
            f"mean={values.mean():.3f}, std={values.std():.3f})"
        )

    def __add__(self, other: "AbstractHV") -> "AbstractHV":
        if not isinstance(other, AbstractHV):
            return NotImplemented
        from .vector_operations import bundle
        return bundle((self, other))

    def __mul__(self, other: "AbstractHV") -> "AbstractHV":
        if not isinstance(other, AbstractHV):
            return NotImplemented
        from .vector_operations import bind
        return bind(self, other)

    def copy(self) -> "AbstractHV":
        """Deep, independent duplicate."""
        return self._wrap(self._data.copy())

    def similar(self) -> "AbstractHV":
        """Zero hypervector of the same variant and dimension."""
        return self.zeros(self.dimension)

    def sum(self):
        return self.values.sum().item()

    def norm(self) -> float:
        return float(np.linalg.norm(self.values))

    def normalize(self) -> "AbstractHV":
        """Return a copy mapped back into the variant's canonical range."""
        return self._wrap(self._normalized(self._data))

    def normalize_inplace(self) -> "AbstractHV":
        self._data[:] = self._normalized(self._data)
        return self

    def shift(self, k: int = 1) -> "AbstractHV":
        from .vector_operations import shift
        return shift(self, k)


class BinaryHV(AbstractHV):
    """Hypervector of booleans."""

    vector_type = "binary"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        if data.dtype == np.bool_:
            return data.copy()
        _require_numeric(data, "BinaryHV")
        if not np.all(np.isin(data, (0, 1))):
            raise InvalidElement("BinaryHV elements must be 0/1 or booleans")
        return data.astype(bool)

    @classmethod
    def _sample(cls, rng, n):
        return rng.random(n) < 0.5

    @classmethod
    def _zero(cls, n):
        return np.zeros(n, dtype=bool)

    def __repr__(self) -> str:
        n_true = int(np.count_nonzero(self._data))
        return f"BinaryHV(dimension={self.dimension}, true={n_true}, false={self.dimension - n_true})"


class BipolarHV(AbstractHV):
    """
    Hypervector of ±1 values.

    Stored as sign bits (True means -1), so binding is an XOR of the bits and
    the all-False storage, i.e. all +1, is the binding identity.
    """

    vector_type = "bipolar"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        if data.dtype.kind not in "iuf":
            raise InvalidElement(f"BipolarHV elements must be -1 or 1, got dtype {data.dtype}")
        if not np.all(np.isin(data, (-1, 1))):
            raise InvalidElement("BipolarHV elements must be -1 or 1")
        return data < 0

    @classmethod
    def _sample(cls, rng, n):
        return rng.random(n) < 0.5

    @classmethod
    def _zero(cls, n):
        return np.zeros(n, dtype=bool)

    @classmethod
    def _to_values(cls, data):
        return np.where(data, -1, 1).astype(np.int64)

    def __repr__(self) -> str:
        n_negative = int(np.count_nonzero(self._data))
        return (
            f"BipolarHV(dimension={self.dimension}, positives={self.dimension - n_negative}, "
            f"negatives={n_negative})"
        )


class TernaryHV(AbstractHV):
    """
    Hypervector of signed integers.

    Explicit data must lie in {-1, 0, 1}; unnormalised bundles may leave that
    range until `normalize` clamps them back.
    """

    vector_type = "ternary"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        _require_numeric(data, "TernaryHV")
        if not np.all(np.isin(data, (-1, 0, 1))):
            raise InvalidElement("TernaryHV elements must be -1, 0 or 1")
        return data.astype(np.int64)

    @classmethod
    def _sample(cls, rng, n):
        return rng.choice(np.array([-1, 1], dtype=np.int64), size=n)

    @classmethod
    def _zero(cls, n):
        return np.zeros(n, dtype=np.int64)

    @classmethod
    def _normalized(cls, data):
        return np.clip(data, -1, 1)


class RealHV(AbstractHV):
    """Hypervector of real numbers drawn from the standard normal."""

    vector_type = "real"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        _require_numeric(data, "RealHV")
        data = data.astype(np.float64)
        if not np.all(np.isfinite(data)):
            raise InvalidElement("RealHV elements must be finite")
        return data

    @classmethod
    def _sample(cls, rng, n):
        return rng.standard_normal(n)

    @classmethod
    def _zero(cls, n):
        return np.zeros(n, dtype=np.float64)

    @classmethod
    def _normalized(cls, data):
        # rescale to the unit standard deviation of the generating distribution
        if data.shape[0] < 2:
            return data.copy()
        std = data.std(ddof=1)
        if std == 0:
            return data.copy()
        return data / std


class GradedHV(AbstractHV):
    """Hypervector of graded truth values in [0, 1]."""

    vector_type = "graded"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        _require_numeric(data, "GradedHV")
        data = data.astype(np.float64)
        if np.any(np.isnan(data)):
            raise InvalidElement("GradedHV elements must not be NaN")
        return np.clip(data, 0.0, 1.0)

    @classmethod
    def _sample(cls, rng, n):
        return rng.beta(1.0, 1.0, size=n)

    @classmethod
    def _zero(cls, n):
        return np.zeros(n, dtype=np.float64)

    @classmethod
    def _normalized(cls, data):
        return np.clip(data, 0.0, 1.0)


class GradedBipolarHV(AbstractHV):
    """Hypervector of graded values in [-1, 1]."""

    vector_type = "graded_bipolar"

    __slots__ = ()

    @classmethod
    def _coerce(cls, data):
        _require_numeric(data, "GradedBipolarHV")
        data = data.astype(np.float64)
        if np.any(np.isnan(data)):
            raise InvalidElement("GradedBipolarHV elements must not be NaN")
        return np.clip(data, -1.0, 1.0)

    @classmethod
    def _sample(cls, rng, n):
        return 2.0 * rng.beta(1.0, 1.0, size=n) - 1.0

    @classmethod
    def _zero(cls, n):
        return np.full(n, -1.0)

    @classmethod
    def _normalized(cls, data):
        return np.clip(data, -1.0, 1.0)


VECTOR_TYPES: Dict[str, Type[AbstractHV]] = {
    cls.vector_type: cls
    for cls in (BinaryHV, BipolarHV, TernaryHV, RealHV, GradedHV, GradedBipolarHV)
}


def hypervector_class(vector_type: Union[str, Type[AbstractHV]]) -> Type[AbstractHV]:
    """
    Resolve a vector type tag (or variant class) to its class.

    Raises:
        UnsupportedVectorType: If the tag is unknown
    """
    if isinstance(vector_type, type) and vector_type in VECTOR_TYPES.values():
        return vector_type
    if isinstance(vector_type, str) and vector_type.lower() in VECTOR_TYPES:
        return VECTOR_TYPES[vector_type.lower()]
    raise UnsupportedVectorType(
        f"Unsupported vector type: {vector_type!r}, expected one of {sorted(VECTOR_TYPES)}"
    )


def new_hypervector(vector_type: Union[str, Type[AbstractHV]], dimension: int = DEFAULT_DIMENSION,
                    rng: GeneratorLike = None, key: Optional[Any] = None) -> AbstractHV:
    """
    Create a hypervector of the given type.

    Args:
        vector_type: Type tag such as "binary" or a variant class
        dimension (int): Number of elements
        rng: Generator or integer seed for the random draw
        key: If given, generate deterministically from this symbol instead

    Returns:
        AbstractHV: New hypervector
    """
    cls = hypervector_class(vector_type)
    if key is not None:
        return cls.from_seed(key, dimension)
    return cls.random(dimension, rng)


def from_values(vector_type: Union[str, Type[AbstractHV]], data: Iterable[Any]) -> AbstractHV:
    """Wrap explicit data in the given variant, validating or clamping it."""
    return hypervector_class(vector_type)(data)


def check_compatible(vectors: Iterable[AbstractHV]) -> List[AbstractHV]:
    """
    Materialise a collection of hypervectors and check it is homogeneous.

    Returns:
        list: The hypervectors in iteration order

    Raises:
        VariantMismatch: If the collection mixes variants or holds non-hypervectors
        DimensionMismatch: If dimensions differ
    """
    if isinstance(vectors, AbstractHV):
        vectors = [vectors]
    vectors = list(vectors)
    if not vectors:
        return vectors
    first = vectors[0]
    if not isinstance(first, AbstractHV):
        raise VariantMismatch(f"Expected hypervectors, got {type(first).__name__}")
    for hv in vectors[1:]:
        if type(hv) is not type(first):
            raise VariantMismatch(
                f"Cannot combine {type(first).__name__} with {type(hv).__name__}"
            )
        if len(hv) != len(first):
            raise DimensionMismatch(f"Hypervectors must have same dimension: {len(first)} vs {len(hv)}")
    return vectors
