"""Backend for the Tree MTL map of Montreal's urban forest.

This package loads the city's tree inventory, tree-removal records and
neighborhood livability statistics from remote GeoJSON documents, and
serves year-filtered views and species statistics of them to the map.

- Downloads all resources concurrently with one combined progress figure
- Flattens MultiPoint geometries into independent point features
- Keeps the normalized datasets in memory, written once at startup
- Recomputes filtered collections and species tallies on every request
- Fails soft: a resource that cannot be loaded becomes an empty dataset

See the subpackage docstrings for details on architecture and usage.
"""
