"""
chat-watcher

Keeps a directory of captured chat transcripts under version control:
new capture files are committed to a numbered Fossil repository once the
directory has been quiet for a while.
"""

__version__ = "0.4.0"
