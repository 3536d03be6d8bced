class StreamError(Exception):
    """Base exception for all watchcast errors."""
    pass

class SourceError(StreamError):
    """Raised when the capture device cannot be opened or is lost."""
    pass

class DetectionError(StreamError):
    """Raised when a detection model cannot be loaded or fails on a frame."""
    pass

class EncodeError(StreamError):
    """Raised when a frame cannot be encoded for the wire."""
    pass

class AlertError(StreamError):
    """Raised when the external alert action fails."""
    pass

class ConfigurationError(StreamError):
    """Raised when configuration is invalid."""
    pass

class BroadcastClosed(StreamError):
    """Raised by publish/subscribe once the broadcaster has been closed."""
    pass
