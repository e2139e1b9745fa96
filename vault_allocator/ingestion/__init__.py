"""
vault_allocator.ingestion — turn already-fetched market data into snapshots.

Modules:
  snapshot_builder — allocations payload / JSON file -> MarketSnapshot list.
"""
