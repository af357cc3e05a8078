from abc import ABC, abstractmethod


class Logger(ABC):
    """
    Port (interface) for logging.
    Keeps the core independent from the concrete logging backend.
    """

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        """Log an informational message with optional key-value context."""
        pass

    @abstractmethod
    def error(self, message: str, **kwargs) -> None:
        """Log an error message with optional key-value context."""
        pass

    @abstractmethod
    def warn(self, message: str, **kwargs) -> None:
        """Log a warning message with optional key-value context."""
        pass

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        """Log a debug message with optional key-value context."""
        pass
