"""Per-format text extractors."""
