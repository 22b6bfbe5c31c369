from .events import TELEMETRY_CATEGORIES, EventCategory, TelemetryEvent, build_event
from .logger import ENABLE_ENV_VAR, TelemetryLogger, default_log_file, telemetry_enabled_from_env

__all__ = [
    "ENABLE_ENV_VAR",
    "EventCategory",
    "TELEMETRY_CATEGORIES",
    "TelemetryEvent",
    "TelemetryLogger",
    "build_event",
    "default_log_file",
    "telemetry_enabled_from_env",
]
