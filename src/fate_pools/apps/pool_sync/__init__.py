"""Read-side synchronisation of Fate prediction pools.

Discover pools through the on-chain registries, fetch their state and the
user's positions concurrently, poll for changes, and derive portfolio
analytics.  Nothing here signs or submits transactions.
"""
