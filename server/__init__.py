"""streamctl streaming controller server."""

__version__ = "0.4.0"
