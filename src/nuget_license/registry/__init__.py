"""Package registry sources."""
