"""
Folder Queue Publisher

Watches a drop folder, publishes new or changed files to a message queue and
moves the published files into a mirrored target folder.
"""

__version__ = "1.1.0"
