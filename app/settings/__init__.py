"""Configuration constants and option loaders."""
