"""
GitHub Node Pack runtime.

Architecture:
- node_sdk/: Node execution semantics (BaseNode, context, items, HTTP, settings)
- node_registry/: Plugin discovery of node packs and credential types

The GitHub node itself lives in nodepacks/github.
"""

__version__ = "1.0.0"
