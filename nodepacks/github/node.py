"""
GitHub Node - Consume the GitHub REST API.

Each input item is turned into one GitHub call (plus a SHA lookup for
file edits and deletes). What the node returns depends on the
operation's ResponseShape:

- REPLACE_SINGLE: every response object becomes an output item
- REPLACE_FLATTEN: response arrays are merged into one output list
- PASS_THROUGH: the input items come back unchanged

SYNC-CELERY SAFE: items are processed one after another, every HTTP
call has a timeout.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

from src.node_sdk.basenode import (
    BaseNode,
    NodeExecutionData,
    NodeOperationError,
    NodeParameterType,
)
from src.node_sdk.http import HttpCaller, HttpClient
from src.node_sdk.items import prepare_binary_data, with_binary
from src.node_sdk.observability import with_context
from src.node_sdk.settings import get_settings

from .credentials import CREDENTIAL_TYPES, GithubApiCredential
from .operations import (
    ItemParameters,
    OperationDefinition,
    Resource,
    ResponseShape,
    operations_for,
    resolve,
)
from .transport import GithubTransport


def _operation_parameter(resource: Resource) -> Dict[str, Any]:
    operations = operations_for(resource)
    return {
        "name": "operation",
        "displayName": "Operation",
        "type": NodeParameterType.OPTIONS,
        "options": [{"name": op, "value": op} for op in operations],
        "default": operations[0],
        "displayOptions": {"show": {"resource": [resource.value]}},
    }


def _as_json(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {"data": value}


class GithubNode(BaseNode):
    """
    GitHub node.

    Resources: file, issue, repository, release, review, user.
    """

    type = "n8n-nodes-base.github"
    version = 1

    description = {
        "displayName": "GitHub",
        "name": "github",
        "icon": "file:github.svg",
        "group": ["input"],
        "description": "Consume GitHub API",
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "credentials": [
            {
                "name": "githubApi",
                "required": True,
                "displayOptions": {"show": {"authentication": ["accessToken"]}},
            },
            {
                "name": "githubOAuth2Api",
                "required": True,
                "displayOptions": {"show": {"authentication": ["oAuth2"]}},
            },
        ],
        "parameters": [
            {
                "name": "authentication",
                "displayName": "Authentication",
                "type": NodeParameterType.OPTIONS,
                "options": [
                    {"name": "Access Token", "value": "accessToken"},
                    {"name": "OAuth2", "value": "oAuth2"},
                ],
                "default": "accessToken",
            },
            {
                "name": "resource",
                "displayName": "Resource",
                "type": NodeParameterType.OPTIONS,
                "options": [{"name": r.value.title(), "value": r.value} for r in Resource],
                "default": "issue",
            },
            *[_operation_parameter(resource) for resource in Resource],
            {
                "name": "owner",
                "displayName": "Repository Owner",
                "type": NodeParameterType.STRING,
                "default": "",
                "required": True,
                "displayOptions": {"hide": {"operation": ["invite"]}},
            },
            {
                "name": "repository",
                "displayName": "Repository Name",
                "type": NodeParameterType.STRING,
                "default": "",
                "required": True,
                "displayOptions": {
                    "hide": {"resource": ["user"], "operation": ["getRepositories"]}
                },
            },
        ],
    }

    def __init__(self, http_caller: Optional[HttpCaller] = None) -> None:
        super().__init__()
        self._http_caller = http_caller

    # ==== Transport ====

    def _get_credential(self) -> GithubApiCredential:
        authentication = self.get_node_parameter("authentication", 0, "accessToken")
        credential_class = CREDENTIAL_TYPES.get(authentication)
        if credential_class is None:
            raise NodeOperationError(f'The authentication "{authentication}" is not known!', node=self)
        return credential_class(self.get_credentials(credential_class.name))

    def _get_transport(self) -> GithubTransport:
        settings = get_settings()
        caller = self._http_caller
        if caller is None:
            credential = self._get_credential()
            try:
                headers = credential.get_auth_headers()
            except ValueError as e:
                raise NodeOperationError(str(e), node=self) from e
            caller = HttpClient(
                base_url=credential.get_server_url(),
                default_headers=headers,
                timeout=settings.http_timeout_s,
            )
        return GithubTransport(caller, page_size=settings.page_size)

    # ==== Execution ====

    def execute(self) -> List[List[NodeExecutionData]]:
        """Run the selected operation for every input item."""
        items = self.get_input_data()
        resource = self.get_node_parameter("resource", 0, "issue")
        operation = self.get_node_parameter("operation", 0, "create")

        # Unknown resources/operations fail the run before any request
        definition = resolve(resource, operation)
        # Built on first use so credential problems are per-item failures
        transport: Optional[GithubTransport] = None

        return_data: List[NodeExecutionData] = []
        output_items: List[Dict[str, Any]] = list(items)

        for i, item in enumerate(items):
            log_extra = with_context(
                workflow_id=getattr(self._context, "workflow_id", None),
                node_name=getattr(self._context, "node_name", None),
                item_index=i,
                operation=definition.key,
            )
            try:
                spec = definition.build(ItemParameters(self.get_node_parameter, i, item))
                if transport is None:
                    transport = self._get_transport()
                self.logger.debug("%s %s", spec.method, spec.endpoint, extra=log_extra)
                response = transport.execute(spec)

                if definition.key == "file:get" and self.get_node_parameter("asBinaryProperty", i, True):
                    return_data.append(self._file_as_binary(item, response, i))
                    continue

                self._collect(definition, response, i, return_data)

            except Exception as e:
                if not self.continue_on_fail:
                    if isinstance(e, NodeOperationError) and e.item_index is None:
                        e.item_index = i
                    self.logger.error("GitHub %s failed: %s", definition.key, e, extra=log_extra)
                    raise
                self.logger.warning("GitHub %s failed, continuing: %s", definition.key, e, extra=log_extra)
                if definition.shape is ResponseShape.PASS_THROUGH:
                    output_items[i] = {**item, "json": {"error": str(e)}}
                else:
                    return_data.append({"json": {"error": str(e)}, "pairedItem": {"item": i}})

        if definition.shape is ResponseShape.PASS_THROUGH:
            return [[{**item, "pairedItem": {"item": i}} for i, item in enumerate(output_items)]]
        return [return_data]

    def _collect(
        self,
        definition: OperationDefinition,
        response: Any,
        item_index: int,
        return_data: List[NodeExecutionData],
    ) -> None:
        if definition.key == "release:delete":
            # GitHub answers 204 without a body
            response = {"success": True}

        if definition.shape is ResponseShape.REPLACE_SINGLE:
            return_data.append({"json": _as_json(response), "pairedItem": {"item": item_index}})
        elif definition.shape is ResponseShape.REPLACE_FLATTEN:
            entries = response if isinstance(response, list) else [response]
            return_data.extend(
                {"json": _as_json(entry), "pairedItem": {"item": item_index}} for entry in entries
            )

    def _file_as_binary(self, item: Dict[str, Any], response: Any, item_index: int) -> NodeExecutionData:
        """Attach a fetched file to a copy of the item."""
        if isinstance(response, list):
            raise NodeOperationError("File Path is a folder, not a file.", node=self, item_index=item_index)
        property_name = self.get_node_parameter("binaryPropertyName", item_index, "data")
        raw = base64.b64decode(response.get("content") or "")
        entry = prepare_binary_data(raw, response.get("path"))
        new_item = with_binary(item, property_name, entry)
        new_item["pairedItem"] = {"item": item_index}
        return new_item
