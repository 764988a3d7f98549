"""
Persistence adapters.

The JSON store owns the on-disk document. Services depend on JsonStore rather
than touching the file directly.
"""
