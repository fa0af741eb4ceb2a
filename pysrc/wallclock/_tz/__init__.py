from .context import (
    TimezoneContext,
    get_system_context,
    load_zone,
    reset_system_tz,
)

__all__ = [
    "TimezoneContext",
    "get_system_context",
    "load_zone",
    "reset_system_tz",
]
