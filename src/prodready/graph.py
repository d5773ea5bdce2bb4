"""App graph: typed fact base populated by extractors and read by rules.

Every node kind is a dataclass tagged with `kind`. Optional fields use
None for "unknown"; rules treat None as insufficient evidence, never as an
error. Node ids are unique within a kind and nodes are append-only.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import ClassVar, Literal, TypeVar, Union

import structlog

logger = structlog.get_logger(__name__)

NodeKind = Literal[
    "Route",
    "Endpoint",
    "Callsite",
    "SupabaseQuery",
    "UiAction",
    "EnvVar",
    "Migration",
]

NODE_KINDS: tuple[NodeKind, ...] = (
    "Route",
    "Endpoint",
    "Callsite",
    "SupabaseQuery",
    "UiAction",
    "EnvVar",
    "Migration",
)


def node_id(kind: str, *parts: object) -> str:
    """Stable id from kind and key parts; empty parts are dropped."""
    key = ":".join(str(p) for p in parts if p not in (None, "")) or "default"
    return re.sub(r"\s+", "_", f"{kind}:{key}")


# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------


@dataclass
class RouteNode:
    kind: ClassVar[NodeKind] = "Route"

    id: str
    path: str
    file_path: str
    is_api_route: bool
    is_page: bool
    line: int | None = None
    snippet: str | None = None


@dataclass
class EndpointNode:
    kind: ClassVar[NodeKind] = "Endpoint"

    id: str
    path_or_name: str
    file_path: str
    handler_kind: Literal["route-handler", "server-action"]
    method: str | None = None  # None for server actions
    mutates_data: bool = False
    has_auth_check: bool | None = None
    line: int | None = None
    snippet: str | None = None


@dataclass
class CallsiteNode:
    kind: ClassVar[NodeKind] = "Callsite"

    id: str
    file_path: str
    call_kind: Literal["fetch", "axios", "router"]
    target_path: str | None = None
    http_method: str | None = None
    line: int | None = None
    snippet: str | None = None


SupabaseOp = Literal[
    "select", "insert", "update", "delete", "upsert", "rpc", "storage"
]


@dataclass
class SupabaseQueryNode:
    kind: ClassVar[NodeKind] = "SupabaseQuery"

    id: str
    file_path: str
    table: str
    operation: SupabaseOp
    has_pagination: bool | None = None
    select_all: bool | None = None
    is_single_row: bool | None = None
    is_count_only: bool | None = None
    is_client: bool = False
    line: int | None = None
    snippet: str | None = None


@dataclass
class UiActionNode:
    kind: ClassVar[NodeKind] = "UiAction"

    id: str
    file_path: str
    element: str
    element_kind: Literal["button", "link", "form"]
    label: str | None = None
    href: str | None = None
    handler_name: str | None = None
    empty_handler: bool = False
    log_only: bool = False
    todo_marker: bool = False
    line: int | None = None
    snippet: str | None = None

    @property
    def is_stub(self) -> bool:
        return self.empty_handler or self.log_only or self.todo_marker

    @property
    def stub_reasons(self) -> list[str]:
        reasons = []
        if self.empty_handler:
            reasons.append("empty handler")
        if self.log_only:
            reasons.append("handler only logs or toasts")
        if self.todo_marker:
            reasons.append("TODO/FIXME marker in handler")
        return reasons


@dataclass
class EnvVarNode:
    kind: ClassVar[NodeKind] = "EnvVar"

    id: str
    name: str
    file_path: str
    is_public: bool
    in_example: bool | None = None  # None: project has no example file
    is_client_file: bool = False
    line: int | None = None
    snippet: str | None = None


@dataclass
class MigrationNode:
    kind: ClassVar[NodeKind] = "Migration"

    id: str
    file_path: str
    table: str | None = None  # None for the file-level node
    created_in_file: bool = False
    rls_enabled: bool | None = None
    policy_count: int = 0
    has_index: bool = False
    has_destructive_ddl: bool = False
    line: int | None = None
    snippet: str | None = None


GraphNode = Union[
    RouteNode,
    EndpointNode,
    CallsiteNode,
    SupabaseQueryNode,
    UiActionNode,
    EnvVarNode,
    MigrationNode,
]

N = TypeVar("N", bound=GraphNode)


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


@dataclass
class AppGraph:
    """Node store keyed by kind, in insertion order per kind."""

    nodes: dict[str, list[GraphNode]] = field(
        default_factory=lambda: {kind: [] for kind in NODE_KINDS}
    )
    _ids: dict[str, set[str]] = field(
        default_factory=lambda: {kind: set() for kind in NODE_KINDS},
        repr=False,
    )

    def add(self, node: GraphNode) -> bool:
        """Append a node; a duplicate id within its kind is ignored."""
        ids = self._ids[node.kind]
        if node.id in ids:
            logger.debug("duplicate node ignored", kind=node.kind, id=node.id)
            return False
        ids.add(node.id)
        self.nodes[node.kind].append(node)
        return True

    def of_kind(self, node_type: type[N]) -> list[N]:
        """Nodes of one kind, typed by the node class."""
        return list(self.nodes[node_type.kind])  # type: ignore[arg-type]

    def get(self, kind: str, id: str) -> GraphNode | None:
        for node in self.nodes.get(kind, []):
            if node.id == id:
                return node
        return None

    def count(self, kind: str | None = None) -> int:
        if kind is not None:
            return len(self.nodes.get(kind, []))
        return sum(len(nodes) for nodes in self.nodes.values())

    def __iter__(self) -> Iterator[GraphNode]:
        for kind in NODE_KINDS:
            yield from self.nodes[kind]

    def stats(self) -> dict[str, int]:
        return {kind: len(self.nodes[kind]) for kind in NODE_KINDS}


# ---------------------------------------------------------------------------
# Route path normalization
# ---------------------------------------------------------------------------

_CONVENTION_FILE = re.compile(r"/?(?:page|route)\.[jt]sx?$")
_ROUTE_GROUP = re.compile(r"/\([^)/]+\)")
_TEMPLATE_EXPR = re.compile(r"\$\{[^}]*\}")


def route_path_from_app_file(rel: str, app_root: str) -> str:
    """URL path for an app-router convention file.

    `src/app/(public)/apis/[id]/page.tsx` -> `/(public)/apis/[id]`.
    Dynamic segments and route groups are preserved.
    """
    rel = rel.replace("\\", "/")
    if rel.startswith(app_root + "/"):
        rel = rel[len(app_root) :]
    path = _CONVENTION_FILE.sub("", rel)
    if not path.startswith("/"):
        path = "/" + path
    path = re.sub(r"/+", "/", path).rstrip("/")
    return path or "/"


def url_form(route_path: str) -> str:
    """Route path as seen in the browser (route groups removed)."""
    stripped = re.sub(r"/+", "/", _ROUTE_GROUP.sub("", route_path))
    return stripped.rstrip("/") or "/"


def strip_query(url: str) -> str:
    return url.split("?", 1)[0].split("#", 1)[0]


@dataclass(frozen=True)
class RouteMatcher:
    """Matches concrete URLs against app-router route paths."""

    pattern: re.Pattern[str]

    @classmethod
    def for_route(cls, route_path: str) -> RouteMatcher:
        parts = []
        for segment in url_form(route_path).strip("/").split("/"):
            if not segment:
                continue
            if segment.startswith("[[...") and segment.endswith("]]"):
                parts.append("(?:/.*)?")
            elif segment.startswith("[...") and segment.endswith("]"):
                parts.append("/.+")
            elif segment.startswith("[") and segment.endswith("]"):
                parts.append("/[^/]+")
            else:
                parts.append("/" + re.escape(segment))
        body = "".join(parts) or "/"
        return cls(re.compile(f"^{body}/?$"))

    def matches(self, url: str) -> bool:
        path = _TEMPLATE_EXPR.sub("_", strip_query(url))
        return self.pattern.match(path or "/") is not None
