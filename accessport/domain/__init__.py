"""
Domain layer - Persisted entities and the error taxonomy.

This layer holds the plain data records the store persists and the typed
outcomes the data access layer reports, independent of any storage
technology.
"""
