"""State layer.

Entity tables and the change events the store publishes after each
committed mutation. Only :class:`pytoki.store.TripDataStore` mutates
tables.
"""
