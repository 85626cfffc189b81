"""Index schema, rebuild pipeline and search."""
