from __future__ import annotations


class BudgetHierarchyError(ValueError):
    """A parent assignment that would make an item its own ancestor."""


class InvalidStoreError(ValueError):
    """An imported or loaded payload that does not look like a budget store."""
