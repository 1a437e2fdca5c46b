"""State/store layer.

This package is the single source of truth for how field edits and
lookup outcomes are merged into the locality/postal code field state.
"""
