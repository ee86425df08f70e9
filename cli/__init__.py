"""streamctl command line front-end."""

__version__ = "0.4.0"
