"""
GitHub Node Pack - One node covering the GitHub REST API.

Resources:
- file: create, edit, delete, get and list repository contents
- issue: create, comment on, edit, get and lock issues
- release: create, delete, get, list and update releases
- repository: metadata, license, community profile, issues and traffic
- review: pull request reviews
- user: repositories of a user, organization invitations

All calls are SYNC-CELERY SAFE.
"""

from .credentials import GithubApiCredential, GithubOAuth2ApiCredential
from .node import GithubNode
from .manifest import MANIFEST, NODE_CLASSES, CREDENTIAL_CLASSES, register_nodes

__all__ = [
    "GithubNode",
    "GithubApiCredential",
    "GithubOAuth2ApiCredential",
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
