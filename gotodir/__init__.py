"""Directory navigator that indexes workspaces and ranks directories for a query."""

__version__ = "0.1.0"