"""
Capture History Domain

Keeps a directory of captured chat transcripts under version control:
- repository/ - Find or bootstrap the numbered repository and open a checkout
- watchers/ - Detect new or changed capture files
- debounce.py - Decide when a burst of changes has settled
- committer.py - Stage and commit pending captures
- lifecycle.py - Run loop wiring the pieces together
"""

__all__ = ["repository", "versioning", "watchers"]
