"""
cloudant-sync - Full-mesh replication of Cloudant databases across regions
"""

__version__ = "1.0.0"

from .core import CloudantSync, SyncError

__all__ = ["CloudantSync", "SyncError"]
