"""Queue consumer, acknowledgement reconciler and their supervisor."""

from pagerrelay.gateway.consumer import ConsumerState, QueueConsumer
from pagerrelay.gateway.exceptions import GatewayError, StartupFatalError
from pagerrelay.gateway.factory import GatewayStack, create_gateway
from pagerrelay.gateway.lock import ReconciliationLock
from pagerrelay.gateway.reconciler import AckReconciler
from pagerrelay.gateway.supervisor import Gateway

__all__ = [
    "AckReconciler",
    "ConsumerState",
    "Gateway",
    "GatewayError",
    "GatewayStack",
    "QueueConsumer",
    "ReconciliationLock",
    "StartupFatalError",
    "create_gateway",
]
