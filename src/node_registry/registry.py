"""
Node Registry - Central registry for node discovery and instantiation.

Node packs are found through the ``github_nodepack.nodepacks`` entry
point group or registered by hand.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, Iterator, List, Optional, Type, TYPE_CHECKING

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from src.node_sdk.basenode import BaseNode
    from src.node_sdk.credentials import BaseCredential


logger = logging.getLogger(__name__)

# Entry point group for node packs
NODE_PACK_ENTRY_POINT = "github_nodepack.nodepacks"


class NodeRegistry:
    """
    Central registry for discovering and instantiating nodes.

    Usage:
        registry = NodeRegistry()
        registry.discover_entry_points()
        node = registry.create_node("n8n-nodes-base.github")
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeDefinition] = {}
        self._node_classes: Dict[str, Type["BaseNode"]] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._credential_classes: Dict[str, Type["BaseCredential"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._discovered = False

    def register_node(
        self,
        node_class: Type["BaseNode"],
        node_type: Optional[str] = None,
    ) -> NodeDefinition:
        """Register a node class under its type (or ``node_type``)."""
        definition = NodeDefinition.from_node_class(node_class)
        if node_type is not None:
            definition.node_type = node_type

        self._nodes[definition.node_type] = definition
        self._node_classes[definition.node_type] = node_class
        logger.debug("Registered node: %s", definition.node_type)
        return definition

    def register_credential(self, credential_class: Type["BaseCredential"]) -> CredentialDefinition:
        definition = CredentialDefinition.from_credential_class(credential_class)
        self._credentials[definition.name] = definition
        self._credential_classes[definition.name] = credential_class
        logger.debug("Registered credential: %s", definition.name)
        return definition

    def register_pack(
        self,
        manifest: NodePackManifest,
        node_classes: Dict[str, Type["BaseNode"]],
        credential_classes: Optional[Dict[str, Type["BaseCredential"]]] = None,
    ) -> None:
        """Register a node pack with its nodes and credential types."""
        self._packs[manifest.name] = manifest

        for node_type, node_class in node_classes.items():
            definition = self.register_node(node_class, node_type)
            definition.node_pack = manifest.name

        for credential_class in (credential_classes or {}).values():
            self.register_credential(credential_class)

        logger.info(
            "Registered pack '%s' with %d nodes and %d credentials",
            manifest.name,
            len(node_classes),
            len(credential_classes or {}),
        )

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Discover node packs via entry points.

        Entry points are declared in pyproject.toml:

            [project.entry-points."github_nodepack.nodepacks"]
            github = "nodepacks.github:register_nodes"

        The entry point returns ``(manifest, node_classes)`` or
        ``(manifest, node_classes, credential_classes)``.

        Returns:
            Number of packs discovered
        """
        if self._discovered and not force:
            return len(self._packs)

        count = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                result: Any = ep.load()()
                self.register_pack(*result)
            except Exception as e:
                logger.error("Failed to load node pack '%s': %s", ep.name, e)
                continue
            count += 1
            logger.info("Discovered node pack: %s", ep.name)

        self._discovered = True
        return count

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        return self._nodes.get(node_type)

    def get_node_class(self, node_type: str) -> Optional[Type["BaseNode"]]:
        return self._node_classes.get(node_type)

    def get_credential_class(self, name: str) -> Optional[Type["BaseCredential"]]:
        return self._credential_classes.get(name)

    def create_node(self, node_type: str) -> Optional["BaseNode"]:
        """Create a node instance, or None if the type is unknown."""
        node_class = self.get_node_class(node_type)
        if node_class:
            return node_class()
        return None

    def list_nodes(self) -> List[NodeDefinition]:
        return list(self._nodes.values())

    def list_credentials(self) -> List[CredentialDefinition]:
        return list(self._credentials.values())

    def list_packs(self) -> List[NodePackManifest]:
        return list(self._packs.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeDefinition]:
        return iter(self._nodes.values())

    def __contains__(self, node_type: str) -> bool:
        return node_type in self._nodes


__all__ = [
    "NodeRegistry",
    "NODE_PACK_ENTRY_POINT",
]
