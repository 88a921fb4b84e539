"""
Repository bootstrap.

Finds (or creates) the numbered repository for a directory and makes sure
the directory is a working checkout of it.
"""

from domains.capture_history.repository.checkout import CheckoutManager
from domains.capture_history.repository.locator import RepositoryLocator

__all__ = ["CheckoutManager", "RepositoryLocator"]
