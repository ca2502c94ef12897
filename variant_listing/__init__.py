"""Variant listing engine.

Computes per-group-subset listing prices, availability and facet visibility
for configurable products.
"""

__version__ = "0.1.0"
