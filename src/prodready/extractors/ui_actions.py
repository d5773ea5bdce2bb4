"""UI actions extractor: buttons, links and forms with their handlers.

A handler is looked at only when it is visible in the same file: an
inline arrow/function, or an identifier naming a local function. Anything
else (props, imports, hooks) is recorded by name and left unanalyzed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tree_sitter import Node

from prodready.extractors import ExtractorContext, for_each_source
from prodready.extractors.syntax import (
    FUNCTION_TYPES,
    callee_text,
    function_body,
    local_functions,
)
from prodready.graph import AppGraph, UiActionNode, node_id
from prodready.project import ParsedSource, string_value

ELEMENT_KINDS = {
    "button": "button",
    "Button": "button",
    "IconButton": "button",
    "MenuItem": "button",
    "DropdownMenuItem": "button",
    "a": "link",
    "Link": "link",
    "form": "form",
}

HANDLER_ATTRS = {
    "button": ("onClick",),
    "link": ("onClick",),
    "form": ("onSubmit", "action"),
}

LABEL_ATTRS = ("aria-label", "title", "data-testid")

LOG_ONLY_CALLEE = re.compile(
    r"^(?:(?:window\.)?console\.(?:log|warn|error|info|debug)"
    r"|toast(?:\.\w+)?|(?:window\.)?alert)$"
)
TODO_MARKER = re.compile(
    r"TODO|FIXME|coming soon|not implemented", re.IGNORECASE
)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class _HandlerFacts:
    name: str | None = None
    empty: bool = False
    log_only: bool = False
    todo: bool = False


# ---------------------------------------------------------------------------
# JSX helpers
# ---------------------------------------------------------------------------


def _attributes(parsed: ParsedSource, tag: Node) -> dict[str, Node | None]:
    """Attribute name -> value node (None for bare boolean attributes)."""
    attrs: dict[str, Node | None] = {}
    for attr in tag.named_children:
        if attr.type != "jsx_attribute" or not attr.named_children:
            continue
        name = parsed.node_text(attr.named_children[0])
        value = None
        if len(attr.named_children) > 1:
            value = attr.named_children[1]
        attrs[name] = value
    return attrs


def _unwrap(value: Node | None) -> Node | None:
    """Expression inside `{...}`, or the value itself."""
    if value is not None and value.type == "jsx_expression":
        inner = [c for c in value.named_children if c.type != "comment"]
        return inner[0] if inner else None
    return value


def _literal(parsed: ParsedSource, value: Node | None) -> str | None:
    return string_value(parsed, _unwrap(value))


def _text_label(parsed: ParsedSource, element: Node) -> str | None:
    parts = [
        parsed.node_text(child)
        for child in element.named_children
        if child.type == "jsx_text"
    ]
    text = _WHITESPACE.sub(" ", " ".join(parts)).strip()
    return text[:80] or None


# ---------------------------------------------------------------------------
# Handler analysis
# ---------------------------------------------------------------------------


def _is_log_call(parsed: ParsedSource, node: Node) -> bool:
    if node.type == "await_expression" and node.named_children:
        node = node.named_children[0]
    if node.type != "call_expression":
        return False
    return LOG_ONLY_CALLEE.match(callee_text(parsed, node)) is not None


def _is_empty_expression(parsed: ParsedSource, node: Node) -> bool:
    text = _WHITESPACE.sub("", parsed.node_text(node))
    return text in ("undefined", "null", "({})", "{}")


def _analyze_body(
    parsed: ParsedSource, body: Node, facts: _HandlerFacts
) -> None:
    facts.todo = TODO_MARKER.search(parsed.node_text(body)) is not None

    if body.type != "statement_block":
        # concise arrow body
        if _is_empty_expression(parsed, body):
            facts.empty = True
        elif _is_log_call(parsed, body):
            facts.log_only = True
        return

    statements = [c for c in body.named_children if c.type != "comment"]
    if all(
        s.type == "return_statement" and not s.named_children
        for s in statements
    ):
        facts.empty = True
        return
    facts.log_only = all(
        s.type == "expression_statement"
        and bool(s.named_children)
        and _is_log_call(parsed, s.named_children[0])
        for s in statements
    )


def _analyze_handler(
    parsed: ParsedSource,
    value: Node | None,
    functions: dict[str, Node],
) -> _HandlerFacts:
    facts = _HandlerFacts()
    expr = _unwrap(value)
    if expr is None:
        return facts

    if expr.type in ("identifier", "member_expression"):
        facts.name = parsed.node_text(expr)
        target = functions.get(facts.name)
        if target is not None and function_body(target) is not None:
            _analyze_body(parsed, function_body(target), facts)
        return facts

    if expr.type not in FUNCTION_TYPES:
        return facts
    body = function_body(expr)
    if body is None:
        return facts

    # onClick={() => save()} delegates to a local function
    if body.type == "call_expression":
        callee = body.child_by_field_name("function")
        if callee is not None and callee.type == "identifier":
            target = functions.get(parsed.node_text(callee))
            if target is not None and function_body(target) is not None:
                facts.name = parsed.node_text(callee)
                _analyze_body(parsed, function_body(target), facts)
                return facts

    _analyze_body(parsed, body, facts)
    return facts


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _extract_file(graph: AppGraph, parsed: ParsedSource) -> None:
    if b"<" not in parsed.source:
        return
    rel = parsed.relative_path
    functions: dict[str, Node] | None = None

    for tag in parsed.iter_nodes(
        "jsx_opening_element", "jsx_self_closing_element"
    ):
        name_node = tag.child_by_field_name("name")
        if name_node is None:
            continue
        element = parsed.node_text(name_node)
        element_kind = ELEMENT_KINDS.get(element)
        if element_kind is None:
            continue
        if functions is None:
            functions = local_functions(parsed)

        attrs = _attributes(parsed, tag)
        handler = _HandlerFacts()
        for attr in HANDLER_ATTRS[element_kind]:
            if attr in attrs:
                handler = _analyze_handler(parsed, attrs[attr], functions)
                break

        labels = (_literal(parsed, attrs.get(a)) for a in LABEL_ATTRS)
        label = next((value for value in labels if value), None)
        if (
            label is None
            and tag.type == "jsx_opening_element"
            and tag.parent is not None
        ):
            label = _text_label(parsed, tag.parent)

        line = parsed.line_of(tag)
        graph.add(
            UiActionNode(
                id=node_id(
                    "UiAction", rel, line, tag.start_point[1], element
                ),
                file_path=rel,
                element=element,
                element_kind=element_kind,  # type: ignore[arg-type]
                label=label,
                href=_literal(parsed, attrs.get("href")),
                handler_name=handler.name,
                empty_handler=handler.empty,
                log_only=handler.log_only,
                todo_marker=handler.todo,
                line=line,
                snippet=parsed.line_text(line),
            )
        )


def extract_ui_actions(graph: AppGraph, ctx: ExtractorContext) -> None:
    for_each_source(graph, ctx, _extract_file)
