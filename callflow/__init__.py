"""CallFlow: conversational call scheduling."""

__version__ = "1.0.0"
