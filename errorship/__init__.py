"""errorship: ship Python log records to an error-tracking service.

A ``logging.Handler`` that turns each record into a structured error report
(severity, message, context metadata, causal exception chain) and POSTs it
to a Rollbar-compatible item API, inline or on a bounded worker pool.
"""

__version__ = "0.1.0"
__description__ = "Ship Python log records to an error-tracking service"

from errorship.config import ShipperSettings
from errorship.core.builder import PayloadBuilder
from errorship.core.diagnostics import StatusLog
from errorship.core.dispatcher import DeliveryDispatcher
from errorship.errors import ConfigurationError, DeliveryRejected, ErrorshipError
from errorship.handler import ReportHandler
from errorship.models.events import LogEvent, Severity

__all__ = [
    "ReportHandler",
    "PayloadBuilder",
    "DeliveryDispatcher",
    "ShipperSettings",
    "StatusLog",
    "LogEvent",
    "Severity",
    "ErrorshipError",
    "ConfigurationError",
    "DeliveryRejected",
    "__version__",
]
