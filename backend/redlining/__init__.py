"""
Redlining (HOLC) dataset: data model, loading and keyword search.

The dataset is loaded once at startup and is read-only afterwards.
"""
