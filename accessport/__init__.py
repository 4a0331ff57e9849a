"""
accessport - storage-independent data access layer.

Repositories perform CRUD on entities, mappers translate entities into
transfer objects for callers.
"""

__version__ = "1.0.0"
