"""
BaseNode - Abstract base class for Python node implementations.

All nodes inherit from BaseNode and implement the execute() method.
The host hands each node a NodeExecutionContext carrying parameters,
credentials and the input items; nodes never touch host types directly.

SYNC-CELERY SAFE: execute() is synchronous.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict


logger = logging.getLogger(__name__)


# ==============================================================================
# NodeParameterType
# ==============================================================================

class NodeParameterType(str, Enum):
    """Parameter kinds a node can declare."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OPTIONS = "options"
    COLLECTION = "collection"
    FIXED_COLLECTION = "fixedCollection"
    DATE_TIME = "dateTime"


# ==============================================================================
# NodeExecutionData - Output data format
# ==============================================================================

class NodeExecutionData(TypedDict, total=False):
    """
    Single item of execution output data.

    Format: {"json": {...}, "binary": {...}, "pairedItem": {"item": 0}}
    """
    json: Dict[str, Any]
    binary: Optional[Dict[str, Any]]
    pairedItem: Optional[Dict[str, int]]


# ==============================================================================
# BaseNode - Abstract base class
# ==============================================================================

class BaseNode(ABC):
    """
    Abstract base class for all Python node implementations.

    Nodes define:
    - type: Unique identifier (e.g., "n8n-nodes-base.github")
    - version: Node version number
    - description: Node metadata dict
    - properties: Parameters and credentials

    And implement execute() which processes input items.

    SYNC-CELERY SAFE: All execution is synchronous.
    """

    # Required class attributes (override in subclasses)
    type: str = "base"
    version: int = 1

    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "description": "",
        "group": [],
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    def __init__(self) -> None:
        """Initialize node instance."""
        self.logger = logging.getLogger(f"node.{self.type}")
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Execute node operation.

        Returns:
            List[List[NodeExecutionData]]: Nested list of execution results.
            - Outer list represents output branches (usually 1)
            - Inner list represents items in that branch

        Raises:
            NodeOperationError: On operation failure
            NodeApiError: On API call failure
        """
        raise NotImplementedError

    # ==== Context Management ====

    def set_context(self, context: "NodeExecutionContext") -> None:
        """Set the execution context."""
        self._context = context

    @property
    def continue_on_fail(self) -> bool:
        """Whether the host asked to keep going when an item fails."""
        return bool(self._context and self._context.continue_on_fail)

    # ==== Helper methods for subclasses ====

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """
        Get parameter value.

        Args:
            name: Parameter name
            item_index: Index of item (parameters may differ per item)
            default: Default if not set
        """
        if self._context is None:
            return default
        return self._context.get_node_parameter(name, item_index, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """
        Get credentials by type name.

        Args:
            name: Credential type name (e.g., "githubApi")

        Returns:
            Credentials dict with decrypted values
        """
        if self._context is None:
            raise NodeOperationError("No context set", node=self)
        return self._context.get_credentials(name)

    def get_input_data(self) -> List[Dict[str, Any]]:
        """
        Get input items from previous node.

        Returns:
            List of input items, each with 'json' key.
        """
        if self._context is None:
            return []
        return self._context.get_input_data()

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get full node definition for registration."""
        return {
            "type": cls.type,
            "version": cls.version,
            "description": cls.description,
            "properties": cls.properties,
        }


# ==============================================================================
# NodeExecutionContext - Runtime context for node execution
# ==============================================================================

class NodeExecutionContext:
    """
    Runtime context provided to nodes during execution.

    Provides access to:
    - Parameters (node-wide, optionally overridden per item)
    - Credentials
    - Input data
    - Run flags such as continue-on-fail
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: List[Dict[str, Any]],
        item_parameters: Optional[List[Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
    ) -> None:
        self._parameters = parameters
        self._item_parameters = item_parameters or []
        self._credentials = credentials
        self._input_data = input_data
        self.continue_on_fail = continue_on_fail
        self.workflow_id = workflow_id
        self.node_name = node_name

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """Get parameter value, preferring the item's own override."""
        if item_index < len(self._item_parameters):
            overrides = self._item_parameters[item_index] or {}
            if name in overrides:
                return overrides[name]
        return self._parameters.get(name, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """Get credentials by type name."""
        if name not in self._credentials:
            raise NodeOperationError(f"Credentials '{name}' not found")
        return self._credentials[name]

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Get input items."""
        return self._input_data


# ==============================================================================
# Errors
# ==============================================================================

class NodeOperationError(Exception):
    """Error during node operation."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        item_index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.node = node
        self.item_index = item_index
        super().__init__(message)


class NodeApiError(NodeOperationError):
    """Error from external API call."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        item_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, node, item_index)
        self.status_code = status_code
        self.response_body = response_body


__all__ = [
    "BaseNode",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeParameterType",
    "NodeOperationError",
    "NodeApiError",
]
