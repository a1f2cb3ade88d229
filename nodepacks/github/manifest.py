"""
GitHub Node Pack Manifest - Registration function for entry-points.
"""

from src.node_registry.models import NodePackManifest
from .credentials import GithubApiCredential, GithubOAuth2ApiCredential
from .node import GithubNode


MANIFEST = NodePackManifest(
    name="github",
    version="1.0.0",
    description="GitHub node: files, issues, releases, repositories, reviews and users",
    author="github-nodepack",
    license="MIT",
    nodes=[GithubNode.type],
    credentials=[GithubApiCredential.name, GithubOAuth2ApiCredential.name],
    entry_point="nodepacks.github",
)


# Node classes by type
NODE_CLASSES = {
    GithubNode.type: GithubNode,
}

# Credential classes by name
CREDENTIAL_CLASSES = {
    GithubApiCredential.name: GithubApiCredential,
    GithubOAuth2ApiCredential.name: GithubOAuth2ApiCredential,
}


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes, credential_classes).
    """
    return MANIFEST, NODE_CLASSES, CREDENTIAL_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
