from abc import ABC, abstractmethod


class BaseNotifier(ABC):
    """Base class for notifiers."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    @abstractmethod
    async def send(self, subject: str, body: str) -> bool:
        """
        Send notification.

        Returns:
            bool: True if successful, False if failed
        """
        ...

    @property
    def notifier_type(self) -> str:
        """Return notifier type name for logging"""
        return self.__class__.__name__
