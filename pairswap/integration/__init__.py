"""
Integration shell around the pool engine: configuration and snapshots.
"""
