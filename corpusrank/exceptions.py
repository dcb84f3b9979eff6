"""Exceptions raised at the engine's call boundary"""


class InvalidConfigurationError(ValueError):
    """Caller-supplied configuration is invalid (negative limit, bad dims, ...)"""


def require_limit(limit, name: str = "limit"):
    """
    Validate an optional result limit.

    Returns the limit unchanged; raises instead of clamping so the caller
    can always tell a rejected value from an applied one.
    """
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidConfigurationError(f"{name} must be an integer, got {limit!r}")
    if limit < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {limit}")
    return limit
