"""
Hyperdimensional: Hyperdimensional Computing in Python

A library for vector symbolic architectures: six hypervector variants, the
bundling/binding/shifting algebra over them, similarity search and encoders
for structured data such as sequences, tables, graphs and numeric levels.
"""

__version__ = "0.2.0"

# Import core components for easy access
from .hypervectors import (
    AbstractHV, BinaryHV, BipolarHV, TernaryHV, RealHV, GradedHV, GradedBipolarHV,
    DEFAULT_DIMENSION, VECTOR_TYPES, hypervector_class, new_hypervector, from_values
)
from .vector_operations import (
    grad2bipol, bipol2grad, three_pi, fuzzy_xor, three_pi_bipolar, fuzzy_xor_bipolar,
    bundle, bind, shift, shift_inplace, perturbate, perturbate_inplace
)
from .similarity import (
    similarity, cosine_similarity, jaccard_similarity, hamming_similarity,
    nearest_neighbor, is_approx
)
from .encoding import (
    multiset, multibind, bundlesequence, bindsequence, hashtable, crossproduct,
    ngrams, graph, level, level_encoder, level_decoder, levels_encoder_decoder
)
from .vector_store import create_store, add_vector, get_vector, find_similar_vectors, cleanup
from .randomness import set_default_seed
from .error_handling import (
    HyperdimensionalError, InvalidDimension, InvalidElement, DimensionMismatch, VariantMismatch,
    InsufficientInput, UnsupportedMethod, UnsupportedVectorType, ConfigurationError,
    success, error, is_success, is_error, get_value, get_error
)

# Configuration entry points
from .config_parser import process_config_file, configure, create_vector_factory
