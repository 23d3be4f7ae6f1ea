"""Exceptions raised by the LAN scanner"""


class ScannerError(RuntimeError):
    """Base exception for scanner errors"""


class DaemonInitError(ScannerError):
    """Raised when the discovery daemon can't be started, the scan is aborted"""


class DaemonShutdownError(ScannerError):
    """Raised when the discovery daemon fails to shut down, the scan is already stopped"""


class BrowseError(ScannerError):
    """Raised when browsing a single service type can't begin"""

    def __init__(self, service_type: str, message: str):
        super().__init__(f"Failed to browse for service '{service_type}': {message}")
        self.service_type = service_type


class NotificationDeliveryError(ScannerError):
    """Raised when a scan notification can't be delivered to the host"""

    def __init__(self, event: str, message: str):
        super().__init__(f"Failed to emit {event} event: {message}")
        self.event = event
