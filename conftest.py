"""Pytest configuration for mysql-snapshot tests.

This module provides global pytest configuration and custom warning filters.
"""

import warnings

# Filter Pydantic warning about 'schema' field shadowing BaseModel attribute
# Table and routine entries need a 'schema' field for database schema names
warnings.filterwarnings(
    "ignore",
    message=r".*Field name \"schema\".*shadows an attribute.*",
    category=UserWarning,
)
