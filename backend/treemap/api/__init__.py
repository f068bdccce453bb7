"""API router subpackage for the Tree MTL backend.

Each module exposes its own APIRouter for composition in the
application's main FastAPI instance.

Submodules:
    - features: Year-filtered trees and removals, bounds, and statistics.
    - species: Catalog of species codes and display names.
    - neighborhoods: Neighborhood livability overlay.
    - progress: Combined download progress during startup.
    - dependencies: Shared dependencies resolving the loaded datasets.
"""
