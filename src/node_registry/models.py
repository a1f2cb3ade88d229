"""
Node Registry Models - Metadata for nodes, credential types and node packs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class NodeDefinition(BaseModel):
    """What the host needs to list and instantiate a node."""
    model_config = ConfigDict(extra="allow")

    node_type: str = Field(..., description="Unique node type identifier")
    version: int = Field(1, description="Node version")

    display_name: str = Field(..., description="Human-readable name")
    description: str = Field("", description="Node description")
    icon: str = Field("file:icon.svg", description="Node icon")
    group: List[str] = Field(default_factory=list)

    node_class: Optional[str] = Field(None, description="Fully qualified class name")
    node_pack: Optional[str] = Field(None, description="Source node pack")

    inputs: List[str] = Field(default_factory=lambda: ["main"])
    outputs: List[str] = Field(default_factory=lambda: ["main"])
    credentials: List[Dict[str, Any]] = Field(default_factory=list)
    parameters: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_node_class(cls, node_class: Type) -> "NodeDefinition":
        """Build from a BaseNode subclass (n8n-style description dict)."""
        node_type = getattr(node_class, "type", node_class.__name__.lower())
        description = getattr(node_class, "description", {}) or {}
        properties = getattr(node_class, "properties", {}) or {}

        return cls(
            node_type=node_type,
            version=getattr(node_class, "version", 1),
            display_name=description.get("displayName", node_type),
            description=description.get("description", ""),
            icon=description.get("icon", "file:icon.svg"),
            group=description.get("group", []),
            node_class=f"{node_class.__module__}.{node_class.__name__}",
            inputs=description.get("inputs", ["main"]),
            outputs=description.get("outputs", ["main"]),
            credentials=properties.get("credentials", []),
            parameters=properties.get("parameters", []),
        )


class CredentialDefinition(BaseModel):
    """Definition of a credential type."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Credential type name")
    display_name: str = Field(..., description="Human-readable name")
    properties: List[Dict[str, Any]] = Field(default_factory=list)
    credential_class: Optional[str] = Field(None, description="Fully qualified class name")

    @classmethod
    def from_credential_class(cls, credential_class: Type) -> "CredentialDefinition":
        definition = credential_class.get_definition()
        return cls(
            **definition,
            credential_class=f"{credential_class.__module__}.{credential_class.__name__}",
        )


class NodePackManifest(BaseModel):
    """Manifest for a node pack, used for discovery and registration."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Pack name (e.g., 'github')")
    version: str = Field("1.0.0", description="Pack version")
    description: str = Field("", description="Pack description")

    author: str = Field("", description="Author name")
    license: str = Field("MIT", description="License type")

    nodes: List[str] = Field(default_factory=list, description="Node types in this pack")
    credentials: List[str] = Field(default_factory=list, description="Credential types in this pack")

    entry_point: str = Field("", description="Module path of the pack")


__all__ = [
    "NodeDefinition",
    "CredentialDefinition",
    "NodePackManifest",
]
