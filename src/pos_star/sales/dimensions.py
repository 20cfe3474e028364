"""Silver layer: Store and product dimensions.

Each dimension is derived from the clean line items by grouping on the key
and collecting the distinct descriptive tuples. The key must functionally
determine its attributes: a key seen with two different tuples is reported
as a DimensionIntegrityError naming every offending key, never resolved by
picking one of the values.

Dimensions:
    - dim_store:   store_id -> store_location
    - dim_product: product_id -> (product_category, product_type, product_detail)
"""

from __future__ import annotations

import logging

import pandas as pd

from pos_star.exceptions import DimensionIntegrityError

logger = logging.getLogger(__name__)

STORE_KEY = "store_id"
STORE_ATTRIBUTES = ["store_location"]

PRODUCT_KEY = "product_id"
PRODUCT_ATTRIBUTES = ["product_category", "product_type", "product_detail"]


def find_dependency_violations(
    items: pd.DataFrame,
    key: str,
    attributes: list[str],
) -> pd.DataFrame:
    """Return the distinct (key, attributes) rows of keys with conflicting attributes.

    An empty result means ``key`` functionally determines ``attributes``.
    """
    distinct = items[[key, *attributes]].drop_duplicates()
    conflicting = distinct[distinct.duplicated(subset=[key], keep=False)]
    return conflicting.sort_values([key, *attributes]).reset_index(drop=True)


def _build_dimension(
    items: pd.DataFrame,
    name: str,
    key: str,
    attributes: list[str],
) -> pd.DataFrame:
    conflicts = find_dependency_violations(items, key, attributes)
    if not conflicts.empty:
        keys = conflicts[key].unique().tolist()
        logger.error("%s dimension integrity violated for keys %s", name, keys)
        raise DimensionIntegrityError(name, keys, conflicts)

    dim = (
        items[[key, *attributes]]
        .drop_duplicates(subset=[key])
        .sort_values(key)
        .reset_index(drop=True)
    )
    logger.info("Built %s dimension: %d rows", name, len(dim))
    return dim


def build_store_dimension(items: pd.DataFrame) -> pd.DataFrame:
    """Build dim_store (store_id, store_location) from clean line items.

    Raises:
        DimensionIntegrityError: If a store_id has more than one location.

    """
    return _build_dimension(items, "store", STORE_KEY, STORE_ATTRIBUTES)


def build_product_dimension(items: pd.DataFrame) -> pd.DataFrame:
    """Build dim_product from clean line items.

    Raises:
        DimensionIntegrityError: If a product_id has more than one
            (category, type, detail) triple.

    """
    return _build_dimension(items, "product", PRODUCT_KEY, PRODUCT_ATTRIBUTES)


def build_dimensions(items: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Build (dim_store, dim_product)."""
    return build_store_dimension(items), build_product_dimension(items)
