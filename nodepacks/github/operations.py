"""
GitHub operation table.

Maps every ``(resource, operation)`` pair the node supports to a pure
builder that turns one item's parameters into a ``RequestSpec``, plus the
``ResponseShape`` that decides what happens to the response. Nothing here
touches the network: requests that need a file SHA carry a ``ShaLookup``
which the transport resolves before sending.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from src.node_sdk.basenode import NodeOperationError


class Resource(str, Enum):
    """GitHub entity families the node can work on."""
    FILE = "file"
    ISSUE = "issue"
    REPOSITORY = "repository"
    RELEASE = "release"
    REVIEW = "review"
    USER = "user"


class ResponseShape(str, Enum):
    """What an operation's response does to the node output."""
    REPLACE_SINGLE = "replaceSingle"
    REPLACE_FLATTEN = "replaceFlatten"
    PASS_THROUGH = "passThrough"


# (name, item_index, default) -> value
ParameterAccessor = Callable[[str, int, Any], Any]

REVIEW_EVENTS_WITH_BODY = ("REQUEST_CHANGES", "COMMENT")
MAX_LIMIT = 100


@dataclass(frozen=True)
class ShaLookup:
    """The blob SHA a file write has to send back to GitHub."""
    owner: str
    repository: str
    file_path: str
    branch: Optional[str] = None


@dataclass(frozen=True)
class RequestSpec:
    """One GitHub call, built fresh for every item."""
    method: str
    endpoint: str
    body: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    return_all: bool = False
    sha_lookup: Optional[ShaLookup] = None

    def with_sha(self, sha: str) -> "RequestSpec":
        return replace(self, body={**self.body, "sha": sha}, sha_lookup=None)


class ItemParameters:
    """Parameter view bound to a single input item."""

    def __init__(
        self,
        accessor: ParameterAccessor,
        item_index: int,
        item: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._accessor = accessor
        self.item_index = item_index
        self.item = item or {}

    def get(self, name: str, default: Any = None) -> Any:
        return self._accessor(name, self.item_index, default)

    def get_first(self, name: str, default: Any = None) -> Any:
        """Run-wide settings (returnAll, limit) are read from the first item."""
        return self._accessor(name, 0, default)

    def require(self, name: str) -> Any:
        value = self.get(name)
        if value is None or value == "":
            raise NodeOperationError(
                f'The parameter "{name}" is required.', item_index=self.item_index
            )
        return value

    @property
    def owner(self) -> str:
        return str(self.require("owner"))

    @property
    def repository(self) -> str:
        return str(self.require("repository"))


@dataclass(frozen=True)
class OperationDefinition:
    resource: Resource
    operation: str
    shape: ResponseShape
    build: Callable[[ItemParameters], RequestSpec]

    @property
    def key(self) -> str:
        return f"{self.resource.value}:{self.operation}"


# ==============================================================================
# Helpers
# ==============================================================================

def _segment(value: Any) -> str:
    # Number parameters may arrive as 5.0; GitHub wants /issues/5
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return quote(str(value), safe="")


def _file_path(value: Any) -> str:
    # Same escaping as encodeURI: directories stay separated by "/"
    return quote(str(value).lstrip("/"), safe="/")


def repo_endpoint(owner: str, repository: str, *segments: Any) -> str:
    endpoint = f"/repos/{_segment(owner)}/{_segment(repository)}"
    if segments:
        endpoint += "/" + "/".join(_segment(s) for s in segments)
    return endpoint


def contents_endpoint(owner: str, repository: str, file_path: str) -> str:
    return f"{repo_endpoint(owner, repository)}/contents/{_file_path(file_path)}"


def flatten_values(entries: Any, key: str) -> List[Any]:
    """[{"label": "a"}, {"label": "b"}] -> ["a", "b"]; plain values pass through"""
    if isinstance(entries, (dict, str)):
        entries = [entries]
    values: List[Any] = []
    for entry in entries or []:
        value = entry.get(key) if isinstance(entry, dict) else entry
        if value not in (None, ""):
            values.append(value)
    return values


def to_upper_snake(value: str) -> str:
    """requestChanges -> REQUEST_CHANGES"""
    snake = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    snake = re.sub(r"[^A-Za-z0-9]+", "_", snake)
    return snake.strip("_").upper()


def _limit(params: ItemParameters) -> int:
    limit = params.get_first("limit", 50)
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise NodeOperationError(f"Limit must be a number, got {limit!r}.")
    if not 1 <= limit <= MAX_LIMIT:
        raise NodeOperationError(f"Limit must be between 1 and {MAX_LIMIT}, got {limit}.")
    return limit


def _list_request(
    params: ItemParameters,
    endpoint: str,
    query: Optional[Dict[str, Any]] = None,
) -> RequestSpec:
    query = dict(query or {})
    return_all = bool(params.get_first("returnAll", False))
    if not return_all:
        query["per_page"] = _limit(params)
    return RequestSpec("GET", endpoint, query=query, return_all=return_all)


def _commit_fields(params: ItemParameters) -> Dict[str, Any]:
    """author / committer / branch from ``additionalParameters``."""
    additional = params.get("additionalParameters", {}) or {}
    body: Dict[str, Any] = {}
    if additional.get("author"):
        body["author"] = additional["author"]
    if additional.get("committer"):
        body["committer"] = additional["committer"]
    branch = additional.get("branch")
    if isinstance(branch, dict) and branch.get("branch"):
        body["branch"] = branch["branch"]
    return body


def _file_content(params: ItemParameters) -> str:
    if params.get("binaryData", False) is True:
        binary = params.item.get("binary")
        if not binary:
            raise NodeOperationError(
                "No binary data exists on item!", item_index=params.item_index
            )
        property_name = params.get("binaryPropertyName", "data")
        if property_name not in binary:
            raise NodeOperationError(
                f'No binary data property "{property_name}" exists on item!',
                item_index=params.item_index,
            )
        # Binary entries are already base64, which is what GitHub expects
        return binary[property_name]["data"]
    text = params.get("fileContent", "") or ""
    return base64.b64encode(str(text).encode("utf-8")).decode("ascii")


# ==============================================================================
# file
# ==============================================================================

def _file_write(params: ItemParameters, with_sha: bool) -> RequestSpec:
    owner, repository = params.owner, params.repository
    file_path = params.require("filePath")
    body = _commit_fields(params)
    body["message"] = params.require("commitMessage")
    body["content"] = _file_content(params)
    lookup = ShaLookup(owner, repository, file_path, body.get("branch")) if with_sha else None
    return RequestSpec(
        "PUT", contents_endpoint(owner, repository, file_path), body=body, sha_lookup=lookup
    )


def _file_create(params: ItemParameters) -> RequestSpec:
    return _file_write(params, with_sha=False)


def _file_edit(params: ItemParameters) -> RequestSpec:
    return _file_write(params, with_sha=True)


def _file_delete(params: ItemParameters) -> RequestSpec:
    owner, repository = params.owner, params.repository
    file_path = params.require("filePath")
    body = _commit_fields(params)
    body["message"] = params.require("commitMessage")
    return RequestSpec(
        "DELETE",
        contents_endpoint(owner, repository, file_path),
        body=body,
        sha_lookup=ShaLookup(owner, repository, file_path, body.get("branch")),
    )


def _file_read(params: ItemParameters) -> RequestSpec:
    return RequestSpec(
        "GET", contents_endpoint(params.owner, params.repository, params.require("filePath"))
    )


# ==============================================================================
# issue
# ==============================================================================

def _issue_create(params: ItemParameters) -> RequestSpec:
    body = {
        "title": params.require("title"),
        "body": params.get("body", ""),
        "labels": flatten_values(params.get("labels", []), "label"),
        "assignees": flatten_values(params.get("assignees", []), "assignee"),
    }
    return RequestSpec("POST", repo_endpoint(params.owner, params.repository, "issues"), body=body)


def _issue_create_comment(params: ItemParameters) -> RequestSpec:
    issue_number = params.require("issueNumber")
    return RequestSpec(
        "POST",
        repo_endpoint(params.owner, params.repository, "issues", issue_number, "comments"),
        body={"body": params.get("body", "")},
    )


def _issue_edit(params: ItemParameters) -> RequestSpec:
    issue_number = params.require("issueNumber")
    body = dict(params.get("editFields", {}) or {})
    if "labels" in body:
        body["labels"] = flatten_values(body["labels"], "label")
    if "assignees" in body:
        body["assignees"] = flatten_values(body["assignees"], "assignee")
    return RequestSpec(
        "PATCH", repo_endpoint(params.owner, params.repository, "issues", issue_number), body=body
    )


def _issue_get(params: ItemParameters) -> RequestSpec:
    issue_number = params.require("issueNumber")
    return RequestSpec("GET", repo_endpoint(params.owner, params.repository, "issues", issue_number))


def _issue_lock(params: ItemParameters) -> RequestSpec:
    issue_number = params.require("issueNumber")
    return RequestSpec(
        "PUT",
        repo_endpoint(params.owner, params.repository, "issues", issue_number, "lock"),
        query={"lock_reason": params.get("lockReason", "resolved")},
    )


# ==============================================================================
# release
# ==============================================================================

def _release_create(params: ItemParameters) -> RequestSpec:
    body = dict(params.get("additionalFields", {}) or {})
    body["tag_name"] = params.require("releaseTag")
    return RequestSpec("POST", repo_endpoint(params.owner, params.repository, "releases"), body=body)


def _release_delete(params: ItemParameters) -> RequestSpec:
    release_id = params.require("release_id")
    return RequestSpec(
        "DELETE", repo_endpoint(params.owner, params.repository, "releases", release_id)
    )


def _release_get(params: ItemParameters) -> RequestSpec:
    release_id = params.require("release_id")
    return RequestSpec("GET", repo_endpoint(params.owner, params.repository, "releases", release_id))


def _release_get_all(params: ItemParameters) -> RequestSpec:
    return _list_request(params, repo_endpoint(params.owner, params.repository, "releases"))


def _release_update(params: ItemParameters) -> RequestSpec:
    release_id = params.require("release_id")
    return RequestSpec(
        "PATCH",
        repo_endpoint(params.owner, params.repository, "releases", release_id),
        body=dict(params.get("additionalFields", {}) or {}),
    )


# ==============================================================================
# repository
# ==============================================================================

def _repository_get(params: ItemParameters) -> RequestSpec:
    return RequestSpec("GET", repo_endpoint(params.owner, params.repository))


def _repository_get_license(params: ItemParameters) -> RequestSpec:
    return RequestSpec("GET", repo_endpoint(params.owner, params.repository, "license"))


def _repository_get_profile(params: ItemParameters) -> RequestSpec:
    return RequestSpec(
        "GET", repo_endpoint(params.owner, params.repository, "community", "profile")
    )


def _repository_get_issues(params: ItemParameters) -> RequestSpec:
    filters = params.get("getRepositoryIssuesFilters", {}) or {}
    return _list_request(
        params, repo_endpoint(params.owner, params.repository, "issues"), query=filters
    )


def _repository_popular(kind: str) -> Callable[[ItemParameters], RequestSpec]:
    def build(params: ItemParameters) -> RequestSpec:
        return RequestSpec(
            "GET", repo_endpoint(params.owner, params.repository, "traffic", "popular", kind)
        )
    return build


# ==============================================================================
# review
# ==============================================================================

def _review_get(params: ItemParameters) -> RequestSpec:
    pull_number = params.require("pullRequestNumber")
    review_id = params.require("reviewId")
    return RequestSpec(
        "GET",
        repo_endpoint(params.owner, params.repository, "pulls", pull_number, "reviews", review_id),
    )


def _review_get_all(params: ItemParameters) -> RequestSpec:
    pull_number = params.require("pullRequestNumber")
    return _list_request(
        params, repo_endpoint(params.owner, params.repository, "pulls", pull_number, "reviews")
    )


def _review_create(params: ItemParameters) -> RequestSpec:
    pull_number = params.require("pullRequestNumber")
    additional = dict(params.get("additionalFields", {}) or {})
    body: Dict[str, Any] = {}
    if additional.get("commitId"):
        body["commit_id"] = additional.pop("commitId")
    body.update(additional)
    body["event"] = to_upper_snake(params.get("event", "approve"))
    if body["event"] in REVIEW_EVENTS_WITH_BODY:
        body["body"] = params.require("body")
    return RequestSpec(
        "POST",
        repo_endpoint(params.owner, params.repository, "pulls", pull_number, "reviews"),
        body=body,
    )


def _review_update(params: ItemParameters) -> RequestSpec:
    pull_number = params.require("pullRequestNumber")
    review_id = params.require("reviewId")
    return RequestSpec(
        "PUT",
        repo_endpoint(params.owner, params.repository, "pulls", pull_number, "reviews", review_id),
        body={"body": params.get("body", "")},
    )


# ==============================================================================
# user
# ==============================================================================

def _user_get_repositories(params: ItemParameters) -> RequestSpec:
    return _list_request(params, f"/users/{_segment(params.owner)}/repos")


def _user_invite(params: ItemParameters) -> RequestSpec:
    organization = params.require("organization")
    return RequestSpec(
        "POST",
        f"/orgs/{_segment(organization)}/invitations",
        body={"email": params.require("email")},
    )


# ==============================================================================
# Table
# ==============================================================================

_SINGLE = ResponseShape.REPLACE_SINGLE
_FLATTEN = ResponseShape.REPLACE_FLATTEN
_PASS = ResponseShape.PASS_THROUGH

_DEFINITIONS = (
    OperationDefinition(Resource.FILE, "create", _SINGLE, _file_create),
    OperationDefinition(Resource.FILE, "delete", _SINGLE, _file_delete),
    OperationDefinition(Resource.FILE, "edit", _SINGLE, _file_edit),
    OperationDefinition(Resource.FILE, "get", _SINGLE, _file_read),
    OperationDefinition(Resource.FILE, "list", _FLATTEN, _file_read),
    OperationDefinition(Resource.ISSUE, "create", _SINGLE, _issue_create),
    OperationDefinition(Resource.ISSUE, "createComment", _SINGLE, _issue_create_comment),
    OperationDefinition(Resource.ISSUE, "edit", _SINGLE, _issue_edit),
    OperationDefinition(Resource.ISSUE, "get", _SINGLE, _issue_get),
    OperationDefinition(Resource.ISSUE, "lock", _PASS, _issue_lock),
    OperationDefinition(Resource.RELEASE, "create", _SINGLE, _release_create),
    OperationDefinition(Resource.RELEASE, "delete", _SINGLE, _release_delete),
    OperationDefinition(Resource.RELEASE, "get", _SINGLE, _release_get),
    OperationDefinition(Resource.RELEASE, "getAll", _FLATTEN, _release_get_all),
    OperationDefinition(Resource.RELEASE, "update", _SINGLE, _release_update),
    OperationDefinition(Resource.REPOSITORY, "get", _SINGLE, _repository_get),
    OperationDefinition(Resource.REPOSITORY, "getLicense", _SINGLE, _repository_get_license),
    OperationDefinition(Resource.REPOSITORY, "getProfile", _SINGLE, _repository_get_profile),
    OperationDefinition(Resource.REPOSITORY, "getIssues", _FLATTEN, _repository_get_issues),
    OperationDefinition(
        Resource.REPOSITORY, "listPopularPaths", _FLATTEN, _repository_popular("paths")
    ),
    OperationDefinition(
        Resource.REPOSITORY, "listReferrers", _FLATTEN, _repository_popular("referrers")
    ),
    OperationDefinition(Resource.REVIEW, "create", _SINGLE, _review_create),
    OperationDefinition(Resource.REVIEW, "get", _SINGLE, _review_get),
    OperationDefinition(Resource.REVIEW, "getAll", _FLATTEN, _review_get_all),
    OperationDefinition(Resource.REVIEW, "update", _SINGLE, _review_update),
    OperationDefinition(Resource.USER, "getRepositories", _FLATTEN, _user_get_repositories),
    OperationDefinition(Resource.USER, "invite", _SINGLE, _user_invite),
)

OPERATIONS: Dict[Tuple[Resource, str], OperationDefinition] = {
    (definition.resource, definition.operation): definition for definition in _DEFINITIONS
}


def operations_for(resource: Resource) -> List[str]:
    return [op for res, op in OPERATIONS if res is resource]


def resolve(resource: str, operation: str) -> OperationDefinition:
    """Look up an operation, failing before any request is built."""
    try:
        resource_tag = Resource(resource)
    except ValueError:
        raise NodeOperationError(f'The resource "{resource}" is not known!')
    definition = OPERATIONS.get((resource_tag, operation))
    if definition is None:
        raise NodeOperationError(
            f'The operation "{operation}" is not known for resource "{resource}"!'
        )
    return definition


def route(
    resource: str,
    operation: str,
    accessor: ParameterAccessor,
    item_index: int = 0,
    item: Optional[Dict[str, Any]] = None,
) -> RequestSpec:
    """Build the request for one item."""
    definition = resolve(resource, operation)
    return definition.build(ItemParameters(accessor, item_index, item))
