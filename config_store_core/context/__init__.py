from .operation_context import OperationContext, OperationHandler, operation
from .request_context import RequestContext, actor_context, extract_bearer_token

__all__ = [
    "OperationContext",
    "OperationHandler",
    "RequestContext",
    "actor_context",
    "extract_bearer_token",
    "operation",
]
