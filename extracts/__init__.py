"""
OSM Extract Management Module.

Keeps local OSM extracts ("containers") current and serves them.

Key features:
- Create an extract from a remote PBF snapshot
- Re-stamp snapshots with the server's replication timestamp (osmconvert)
- Apply minutely/hourly/daily replication diffs (pyosmium-up-to-date)
- Serve the artifact and the latest change file
"""

from extracts.models import ExtractConfig, UpdateMode

__all__ = ["ExtractConfig", "UpdateMode"]
