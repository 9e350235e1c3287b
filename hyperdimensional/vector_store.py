"""
Vector Store Module

Pure functional item memory for named hypervectors, using FAISS for efficient
storage and retrieval. An item memory is the codebook used to clean up noisy
results, e.g. recovering the closest known value after unbinding a key from a
hash table.

Cosine variants are searched through a FAISS inner-product index over
unit-normalised element values; Jaccard variants (binary and graded) are ranked
exactly with `nearest_neighbor`, since their metric is not an inner product.
"""

import os
import copy
import pickle
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import faiss
import numpy as np

from .error_handling import DimensionMismatch, InsufficientInput, VariantMismatch
from .hypervectors import AbstractHV, hypervector_class, validate_dimension
from .similarity import JACCARD_TYPES, nearest_neighbor

# Configure logging
logger = logging.getLogger(__name__)

INDEX_TYPES = ("flat", "hnsw")

# Neighbors per node of an HNSW graph
HNSW_M = 32


def _create_index(dimension: int, index_type: str):
    if index_type == "flat":
        return faiss.IndexFlatIP(dimension)  # Inner product for cosine similarity
    return faiss.IndexHNSWFlat(dimension, HNSW_M, faiss.METRIC_INNER_PRODUCT)


def _index_row(hv: AbstractHV) -> np.ndarray:
    values = hv.values.astype(np.float32)
    norm = np.linalg.norm(values)
    if norm > 0:
        values = values / norm
    return values


def _rebuild_index(store: Dict[str, Any]) -> Any:
    index = _create_index(store["dimension"], store["index_type"])
    if store["item_ids"]:
        rows = [_index_row(store["items"][item_id]["vector"]) for item_id in store["item_ids"]]
        index.add(np.array(rows, dtype=np.float32))
    return index


def _copy_store(store: Dict[str, Any]) -> Dict[str, Any]:
    # FAISS indices can't be deep-copied, everything else is
    return {
        "index": None,
        "dimension": store["dimension"],
        "vector_type": store["vector_type"],
        "index_type": store["index_type"],
        "items": copy.deepcopy(store["items"]),
        "item_ids": list(store["item_ids"]),
        "metadata": dict(store["metadata"])
    }


def create_store(dimension: int, vector_type: str = "binary", index_type: str = "flat") -> Dict[str, Any]:
    """
    Create a new, empty item memory.

    Args:
        dimension (int): Dimensionality of the hypervectors to be stored
        vector_type (str): Variant of the hypervectors to be stored
        index_type (str): Type of FAISS index ("flat" or "hnsw")

    Returns:
        Dict[str, Any]: A new vector store dictionary
    """
    dimension = validate_dimension(dimension)
    cls = hypervector_class(vector_type)

    if index_type not in INDEX_TYPES:
        raise ValueError(f"Unsupported index type: {index_type}")

    return {
        "index": _create_index(dimension, index_type),
        "dimension": dimension,
        "vector_type": cls.vector_type,
        "index_type": index_type,
        "items": {},  # Maps identifiers to hypervectors and metadata
        "item_ids": [],  # Ordered list of identifiers
        "metadata": {
            "created_at": datetime.now().isoformat(),
            "modified_at": None,
            "item_count": 0
        }
    }


def add_vector(store: Dict[str, Any], identifier: str, hv: AbstractHV,
               metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Add a hypervector to the store, returning a new store instance.

    Adding an existing identifier replaces its hypervector and metadata.

    Args:
        store (Dict[str, Any]): Vector store dictionary
        identifier (str): Unique identifier for the hypervector
        hv (AbstractHV): Hypervector to add to the store
        metadata (Dict[str, Any], optional): Data to associate with the hypervector

    Returns:
        Dict[str, Any]: New store with the hypervector added
    """
    if not isinstance(hv, AbstractHV) or hv.vector_type != store["vector_type"]:
        raise VariantMismatch(f"Store holds {store['vector_type']} hypervectors, got {type(hv).__name__}")
    if hv.dimension != store["dimension"]:
        raise DimensionMismatch(f"Vector dimension {hv.dimension} doesn't match store dimension {store['dimension']}")

    new_store = _copy_store(store)
    new_store["metadata"]["modified_at"] = datetime.now().isoformat()

    replacing = identifier in new_store["items"]
    new_store["items"][identifier] = {
        "vector": hv.copy(),
        "metadata": copy.deepcopy(metadata or {})
    }

    if replacing:
        logger.debug(f"Replacing vector in store: {identifier}")
        # rebuild so the index rows stay aligned with item_ids
        new_store["index"] = _rebuild_index(new_store)
    else:
        new_store["item_ids"].append(identifier)
        new_store["metadata"]["item_count"] += 1
        # append to a clone, the previous store keeps its own index
        new_store["index"] = faiss.clone_index(store["index"])
        new_store["index"].add(np.array([_index_row(hv)], dtype=np.float32))
    return new_store


def remove_vector(store: Dict[str, Any], identifier: str) -> Dict[str, Any]:
    """
    Remove a hypervector from the store, returning a new store instance.

    Raises:
        KeyError: If the identifier does not exist in the store
    """
    if identifier not in store["items"]:
        raise KeyError(f"Identifier not found in store: {identifier}")

    new_store = _copy_store(store)
    del new_store["items"][identifier]
    new_store["item_ids"].remove(identifier)
    new_store["metadata"]["item_count"] -= 1
    new_store["metadata"]["modified_at"] = datetime.now().isoformat()
    new_store["index"] = _rebuild_index(new_store)
    return new_store


def get_vector(store: Dict[str, Any], identifier: str) -> Dict[str, Any]:
    """
    Retrieve a hypervector and its metadata by identifier.

    The returned hypervector and metadata are copies; mutating them leaves
    the store untouched.

    Raises:
        KeyError: If the identifier does not exist in the store
    """
    if identifier not in store["items"]:
        raise KeyError(f"Identifier not found in store: {identifier}")

    item = store["items"][identifier]
    return {
        "identifier": identifier,
        "vector": item["vector"].copy(),
        "metadata": copy.deepcopy(item["metadata"])
    }


def get_all_items(store: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Get all items from the store, in insertion order."""
    return [get_vector(store, item_id) for item_id in store["item_ids"]]


def find_similar_vectors(store: Dict[str, Any], query: AbstractHV, top_n: int = 10) -> List[Dict[str, Any]]:
    """
    Find the stored hypervectors most similar to the query.

    Args:
        store (Dict[str, Any]): Vector store dictionary
        query (AbstractHV): Hypervector to compare against the store
        top_n (int): Number of most similar hypervectors to return

    Returns:
        List[Dict[str, Any]]: Items with their similarity, most similar first
    """
    if not isinstance(query, AbstractHV) or query.vector_type != store["vector_type"]:
        raise VariantMismatch(f"Store holds {store['vector_type']} hypervectors, got {type(query).__name__}")
    if query.dimension != store["dimension"]:
        raise DimensionMismatch(f"Query vector dimension {query.dimension} doesn't match store dimension {store['dimension']}")
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")

    # Empty store check
    if not store["item_ids"]:
        return []

    # Adjust top_n to not exceed number of vectors in store
    adjusted_top_n = min(top_n, len(store["item_ids"]))

    if store["vector_type"] in JACCARD_TYPES:
        vectors = {item_id: store["items"][item_id]["vector"] for item_id in store["item_ids"]}
        matches = nearest_neighbor(query, vectors, k=adjusted_top_n)
    else:
        distances, indices = store["index"].search(np.array([_index_row(query)]), adjusted_top_n)
        matches = [
            (float(distance), store["item_ids"][idx])
            for distance, idx in zip(distances[0], indices[0])
            if idx >= 0  # Some indices might be -1 if there aren't enough results
        ]

    results = []
    for score, item_id in matches:
        result = get_vector(store, item_id)
        result["similarity"] = float(score)
        results.append(result)
    return results


def cleanup(store: Dict[str, Any], query: AbstractHV) -> Tuple[str, AbstractHV, float]:
    """
    Clean up a noisy hypervector to the closest stored item.

    Returns:
        Tuple[str, AbstractHV, float]: Identifier, stored hypervector and similarity

    Raises:
        InsufficientInput: If the store is empty
    """
    matches = find_similar_vectors(store, query, top_n=1)
    if not matches:
        raise InsufficientInput("Cannot clean up against an empty store")
    best = matches[0]
    return best["identifier"], best["vector"], best["similarity"]


def create_store_from_symbols(symbols: Iterable[Any], vector_type: str = "binary", dimension: int = 10_000,
                              index_type: str = "flat") -> Dict[str, Any]:
    """
    Build a codebook holding the seeded hypervector of every symbol.

    Because symbol hypervectors are generated from their seed, the same
    codebook can be rebuilt anywhere from the symbol list alone.
    """
    cls = hypervector_class(vector_type)
    store = create_store(dimension, cls.vector_type, index_type)
    for symbol in symbols:
        identifier = str(symbol)
        if identifier not in store["items"]:
            store["item_ids"].append(identifier)
        store["items"][identifier] = {"vector": cls.from_seed(symbol, dimension), "metadata": {"symbol": symbol}}

    # index the whole codebook at once
    store["metadata"]["item_count"] = len(store["item_ids"])
    store["metadata"]["modified_at"] = datetime.now().isoformat()
    store["index"] = _rebuild_index(store)
    logger.info(f"Created codebook with {store['metadata']['item_count']} {cls.vector_type} symbols")
    return store


def save_store(store: Dict[str, Any], path: str) -> bool:
    """
    Save the vector store to disk (functional wrapper around side-effectful operation).

    Args:
        store (Dict[str, Any]): Vector store dictionary to save
        path (str): File path where the store should be saved

    Returns:
        bool: True if the store was successfully saved, False otherwise
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        # FAISS indices are written separately, they aren't pickle-able
        store_copy = _copy_store(store)
        faiss.write_index(store["index"], path + ".index")

        with open(path, 'wb') as f:
            pickle.dump(store_copy, f)

        return True
    except (OSError, RuntimeError, pickle.PicklingError) as e:
        logger.error(f"Failed to save vector store: {str(e)}")
        return False


def load_store(path: str) -> Dict[str, Any]:
    """
    Load a vector store from disk.

    Raises:
        FileNotFoundError: If the store or its index file does not exist
        ValueError: If the file exists but does not contain a valid vector store
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Vector store file not found: {path}")

    index_path = path + ".index"
    if not os.path.exists(index_path):
        raise FileNotFoundError(f"Vector store index file not found: {index_path}")

    try:
        with open(path, 'rb') as f:
            store = pickle.load(f)
        store["index"] = faiss.read_index(index_path)
    except (OSError, RuntimeError, pickle.UnpicklingError, KeyError, TypeError) as e:
        raise ValueError(f"Failed to load vector store: {str(e)}")

    return store
