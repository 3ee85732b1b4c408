"""
Error Taxonomy
Every failure the service knows how to report derives from AlertServiceError.
"""


class AlertServiceError(Exception):
    """Base class for service errors"""


class UpstreamUnavailable(AlertServiceError):
    """Price provider unreachable or returned an unusable payload"""


class StoreUnavailable(AlertServiceError):
    """Alert collection could not be read"""


class PersistenceError(AlertServiceError):
    """Alert collection could not be durably written"""


class AlertNotFound(AlertServiceError):
    def __init__(self, alert_id: int):
        super().__init__(f"Alert not found: {alert_id}")
        self.alert_id = alert_id
