"""
Node SDK - Minimal Python node execution semantics.

This package provides the runtime for executing Python nodes:
- BaseNode: Abstract base class for node implementations
- NodeExecutionContext: Runtime context for a node
- BinaryData / prepare_binary_data: Binary attachments on items
- HttpClient / HttpCaller: Timeout-bounded HTTP access
- BaseCredential: Credential types with auth headers and tests

All nodes execute synchronously (sync-Celery safe).
"""

from .items import BinaryData, prepare_binary_data, with_binary
from .basenode import (
    BaseNode,
    NodeExecutionContext,
    NodeExecutionData,
    NodeParameterType,
    NodeOperationError,
    NodeApiError,
)
from .credentials import BaseCredential
from .http import HttpApiError, HttpCaller, HttpClient, HttpResponse, NodeTimeoutError
from .settings import Settings, get_settings, reset_settings

__all__ = [
    # Items
    "BinaryData",
    "NodeExecutionData",
    "prepare_binary_data",
    "with_binary",
    # Context
    "NodeExecutionContext",
    # Base classes
    "BaseNode",
    "BaseCredential",
    "NodeParameterType",
    # Errors
    "NodeOperationError",
    "NodeApiError",
    "HttpApiError",
    "NodeTimeoutError",
    # HTTP
    "HttpCaller",
    "HttpClient",
    "HttpResponse",
    # Config
    "Settings",
    "get_settings",
    "reset_settings",
]
