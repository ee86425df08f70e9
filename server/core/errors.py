"""Startup errors raised while resolving the server configuration."""


class ConfigurationError(Exception):
    """The server cannot start with the given options."""


class TlsMaterialError(ConfigurationError):
    """TLS was requested but the certificate material is missing or unusable."""
