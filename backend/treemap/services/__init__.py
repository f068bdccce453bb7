"""Ingestion and aggregation services.

Submodules:
    - normalize: Flattens raw GeoJSON into single-point features.
    - progress: Combined download progress across resources.
    - loader: Progressive aiohttp download of one or many resources.
    - pipeline: Startup load of every resource into the feature store.
    - filters: Year-range filtering and species statistics.
    - species: Species display names and catalog.
    - neighborhoods: Neighborhood overlay tagging and summaries.
"""
