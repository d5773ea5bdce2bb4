"""Supabase usage extractor: query-builder chains and storage calls.

Starting at each `.from('<table>')` call, the extractor climbs the member
call chain (`.from().select().eq().range()` ...) and classifies it from
the method names and literal arguments alone.
"""

from __future__ import annotations

import re

from tree_sitter import Node

from prodready.extractors import ExtractorContext, for_each_source
from prodready.extractors.syntax import call_arguments, first_string_argument
from prodready.graph import AppGraph, SupabaseOp, SupabaseQueryNode, node_id
from prodready.project import ParsedSource, iter_descendants, string_value

MUTATIONS: tuple[SupabaseOp, ...] = ("insert", "upsert", "update", "delete")
PAGINATION_METHODS = frozenset({"range", "limit"})
SINGLE_ROW_METHODS = frozenset({"single", "maybeSingle"})

# `.from(...)` on these is not a query builder
NON_CLIENT_OBJECTS = frozenset({"Array", "Buffer", "Object", "Uint8Array"})

_HEAD_TRUE = re.compile(r"\bhead\s*:\s*true\b")


def _same(a: Node | None, b: Node) -> bool:
    return (
        a is not None
        and a.type == b.type
        and a.start_byte == b.start_byte
        and a.end_byte == b.end_byte
    )


def method_chain(
    parsed: ParsedSource, call: Node
) -> list[tuple[str, Node | None]]:
    """Methods chained after `call`, outermost last.

    Each entry is (method name, call node); the call node is None for a
    member access that is not invoked.
    """
    chain: list[tuple[str, Node | None]] = []
    node = call
    while True:
        parent = node.parent
        if parent is None or parent.type != "member_expression":
            break
        if not _same(parent.child_by_field_name("object"), node):
            break
        prop = parent.child_by_field_name("property")
        name = parsed.node_text(prop) if prop is not None else ""
        grand = parent.parent
        if grand is not None and grand.type == "call_expression" and _same(
            grand.child_by_field_name("function"), parent
        ):
            chain.append((name, grand))
            node = grand
        else:
            chain.append((name, None))
            node = parent
    return chain


_WRAPPERS = frozenset({"await_expression", "parenthesized_expression"})
_SCOPES = frozenset({"statement_block", "program"})


def _binding(parsed: ParsedSource, node: Node) -> tuple[str, Node] | None:
    """Variable name and declaration a query chain is assigned to.

    Handles `const q = <chain>` and `q = <chain>`.
    """
    while node.parent is not None and node.parent.type in _WRAPPERS:
        node = node.parent
    parent = node.parent
    if parent is None:
        return None
    if parent.type == "variable_declarator":
        target_field, value_field = "name", "value"
    elif parent.type == "assignment_expression":
        target_field, value_field = "left", "right"
    else:
        return None
    target = parent.child_by_field_name(target_field)
    if target is None or target.type != "identifier":
        return None
    if not _same(parent.child_by_field_name(value_field), node):
        return None
    return parsed.node_text(target), parent


def bound_methods(parsed: ParsedSource, chain_end: Node) -> list[str]:
    """Methods later chained on the variable a query builder is bound to.

    `let q = supabase.from("t").select(); ... q = q.range(0, 9)` yields
    `["range"]`. Only uses after the binding within its block count.
    """
    bound = _binding(parsed, chain_end)
    if bound is None:
        return []
    name, decl = bound
    scope = decl.parent
    while scope is not None and scope.type not in _SCOPES:
        scope = scope.parent
    if scope is None:
        return []
    methods: list[str] = []
    for ident in iter_descendants(scope, "identifier"):
        if ident.start_byte < decl.end_byte:
            continue
        if parsed.node_text(ident) != name:
            continue
        methods.extend(m for m, _ in method_chain(parsed, ident))
    return methods


def _select_flags(
    parsed: ParsedSource, select_call: Node | None
) -> tuple[bool | None, bool]:
    """(select_all, is_count_only) for a `.select(...)` call."""
    if select_call is None:
        return None, False
    args = call_arguments(select_call)
    if not args:
        return True, False
    columns = string_value(parsed, args[0])
    select_all = None if columns is None else columns.strip() in ("", "*")
    count_only = len(args) > 1 and bool(
        _HEAD_TRUE.search(parsed.node_text(args[1]))
    )
    return select_all, count_only


def _classify(
    parsed: ParsedSource, table: str, call: Node, storage: bool
) -> SupabaseQueryNode:
    rel = parsed.relative_path
    line = parsed.line_of(call)
    chain = method_chain(parsed, call)
    methods = [name for name, _ in chain]
    chain_end = next(
        (c for _, c in reversed(chain) if c is not None), call
    )
    # builder flags also count methods applied later through a variable
    flag_methods = methods + bound_methods(parsed, chain_end)

    operation: SupabaseOp = "select"
    if storage:
        operation = "storage"
    else:
        for name in methods:
            if name in MUTATIONS:
                operation = name  # type: ignore[assignment]
                break

    node = SupabaseQueryNode(
        id=node_id("SupabaseQuery", rel, table, operation, line),
        file_path=rel,
        table=table,
        operation=operation,
        is_client=parsed.is_client,
        line=line,
        snippet=parsed.line_text(line),
    )
    if operation == "select":
        select_call = next(
            (c for name, c in chain if name == "select" and c is not None),
            None,
        )
        node.select_all, node.is_count_only = _select_flags(
            parsed, select_call
        )
        node.has_pagination = any(
            m in PAGINATION_METHODS for m in flag_methods
        )
        node.is_single_row = any(
            m in SINGLE_ROW_METHODS for m in flag_methods
        )
    return node


def _extract_file(graph: AppGraph, parsed: ParsedSource) -> None:
    if b".from" not in parsed.source and b".rpc" not in parsed.source:
        return
    rel = parsed.relative_path

    for call in parsed.iter_nodes("call_expression"):
        func = call.child_by_field_name("function")
        if func is None or func.type != "member_expression":
            continue
        prop = func.child_by_field_name("property")
        obj = func.child_by_field_name("object")
        if prop is None or obj is None:
            continue
        method = parsed.node_text(prop)
        target = first_string_argument(parsed, call)
        if target is None:
            continue

        if method == "from":
            obj_text = parsed.node_text(obj)
            if obj_text in NON_CLIENT_OBJECTS:
                continue
            storage = obj_text.endswith(".storage") or obj_text == "storage"
            graph.add(_classify(parsed, target, call, storage))
        elif method == "rpc":
            line = parsed.line_of(call)
            graph.add(
                SupabaseQueryNode(
                    id=node_id("SupabaseQuery", rel, target, "rpc", line),
                    file_path=rel,
                    table=target,
                    operation="rpc",
                    is_client=parsed.is_client,
                    line=line,
                    snippet=parsed.line_text(line),
                )
            )


def extract_supabase(graph: AppGraph, ctx: ExtractorContext) -> None:
    for_each_source(graph, ctx, _extract_file)
