"""Data models and the in-memory feature store.

Submodules:
    - models: Dataclasses for normalized features, ranges, statistics
      and progress snapshots.
    - store: The write-once FeatureStore holding the loaded datasets.
"""
