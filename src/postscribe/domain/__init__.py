"""Domain layer: content items, annotations and the reconciliation core."""
