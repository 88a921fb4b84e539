"""
Versioning engine backends.

The daemon talks to the engine only through ``VersioningBackend``;
``FossilBackend`` is the production implementation.
"""

from domains.capture_history.versioning.backend import VersioningBackend
from domains.capture_history.versioning.fossil import FossilBackend

__all__ = ["FossilBackend", "VersioningBackend"]
