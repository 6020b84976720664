"""
Data models and contracts module.

Immutable data structures for securities, positions, market snapshots and
valuation reports. Follows functional programming principles with frozen dataclasses.
"""
