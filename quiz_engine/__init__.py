"""Quiz catalog and attempt scoring engine."""
