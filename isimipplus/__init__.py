"""
isimipplus - search, cut out, download and map climate data from the ISIMIP repository.

Pipeline stages:
- ``api`` / ``search``: catalog queries and server-side cutouts
- ``download``: retrieval into a local data directory
- ``load_data`` / ``climatology``: netCDF to masked tables to per-cell means
- ``plotting``: filled contour maps with a coastline overlay
"""

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
