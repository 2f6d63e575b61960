"""Routing — route table, fragment matching and navigation reconciliation.

Patterns are added as view states register; a navigation fragment is
matched to a view state plus the positional arguments captured from it.
"""
