"""Error taxonomy for snowday."""


class SnowdayError(Exception):
    """Base class for all snowday errors."""


class ConfigurationError(SnowdayError):
    """Missing or invalid configuration (source URL, registry file)."""


class UpstreamError(SnowdayError):
    """The announcement source could not be fetched."""


class ParseError(SnowdayError):
    """The announcement page could not be parsed."""
