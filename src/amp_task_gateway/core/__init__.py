"""Core module - exports key classes and exceptions."""

from amp_task_gateway.core.config import GatewayConfig
from amp_task_gateway.core.credentials import (
    CredentialResolver,
    CredentialSource,
    ResolvedCredential,
)
from amp_task_gateway.core.exceptions import (
    ERROR_STATUS_CODES,
    GatewayError,
    InvalidRequestBodyError,
    InvalidResponseError,
    NoCredentialError,
    RemoteError,
    RemoteTimeoutError,
    StaticFileNotFoundError,
    TransportError,
    status_code_for,
)
from amp_task_gateway.core.remote import RemoteClient, RemoteEnvelope
from amp_task_gateway.core.translator import (
    RemoteCall,
    create_task_call,
    delete_task_call,
    get_task_call,
    list_tasks_call,
    update_task_call,
)

__all__ = [
    # Configuration
    "GatewayConfig",
    # Credentials
    "CredentialResolver",
    "CredentialSource",
    "ResolvedCredential",
    # Exceptions
    "GatewayError",
    "NoCredentialError",
    "InvalidRequestBodyError",
    "InvalidResponseError",
    "RemoteError",
    "TransportError",
    "RemoteTimeoutError",
    "StaticFileNotFoundError",
    "ERROR_STATUS_CODES",
    "status_code_for",
    # Remote
    "RemoteClient",
    "RemoteEnvelope",
    # Translation
    "RemoteCall",
    "list_tasks_call",
    "get_task_call",
    "create_task_call",
    "update_task_call",
    "delete_task_call",
]
