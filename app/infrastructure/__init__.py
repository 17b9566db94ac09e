"""Infrastructure modules for the GitHub to Slack bridge.

Centralized infrastructure components:
- configuration: Settings management (settings, DeliverySettings)
- logging: Structured logging (get_module_logger, bind_request_context)
- notifications: Slack delivery requests, chat client and delivery worker
- operations: Operation results and error classification
- services: Dependency injection services (SettingsDep, get_settings)
"""

# Configuration
from infrastructure.configuration import settings

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Configuration
    "settings",
    # Operations
    "OperationResult",
    "OperationStatus",
]
