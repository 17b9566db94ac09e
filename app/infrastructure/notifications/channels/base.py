"""Outbound chat client abstract base class.

The delivery worker talks to the chat platform only through this interface.
"""

from abc import ABC, abstractmethod

from infrastructure.notifications.models import DeliveryRequest
from infrastructure.operations import OperationResult


class ChatClient(ABC):
    """Abstract base class for outbound chat clients.

    Implementations must not raise for platform failures: they return an
    OperationResult whose status tells the worker whether another attempt
    makes sense (TRANSIENT_ERROR) or not (PERMANENT_ERROR).
    """

    @property
    @abstractmethod
    def client_name(self) -> str:
        """Client identifier used in logs."""

    @abstractmethod
    def send(self, request: DeliveryRequest) -> OperationResult:
        """Make one delivery attempt for a request.

        Args:
            request: DeliveryRequest to deliver

        Returns:
            OperationResult describing the attempt
        """
