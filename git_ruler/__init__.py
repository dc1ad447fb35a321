"""Rule-based checks over git repository history and working state."""

__version__ = "0.1.0"
