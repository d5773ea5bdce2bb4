"""Shared tree-sitter helpers for the syntax-based extractors.

Matching here is textual on purpose: callee text and literal arguments,
no type or import resolution.
"""

from __future__ import annotations

from dataclasses import dataclass

from tree_sitter import Node

from prodready.project import ParsedSource, string_value

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "arrow_function",
    }
)

VARIABLE_DECLARATIONS = frozenset(
    {"lexical_declaration", "variable_declaration"}
)


@dataclass
class ExportedFunction:
    """An exported binding whose value is (or wraps) a function."""

    name: str
    node: Node  # declaration or initializer
    body: Node | None
    line: int
    is_function: bool


def callee_text(parsed: ParsedSource, call: Node) -> str:
    func = call.child_by_field_name("function")
    return parsed.node_text(func) if func is not None else ""


def call_arguments(call: Node) -> list[Node]:
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return [a for a in args.named_children if a.type != "comment"]


def first_string_argument(parsed: ParsedSource, call: Node) -> str | None:
    args = call_arguments(call)
    return string_value(parsed, args[0]) if args else None


def function_body(node: Node) -> Node | None:
    if node.type in FUNCTION_TYPES:
        return node.child_by_field_name("body")
    return None


def has_directive(parsed: ParsedSource, body: Node | None, value: str) -> bool:
    """True when a function body opens with a string directive."""
    if body is None or body.type != "statement_block":
        return False
    for stmt in body.named_children:
        if stmt.type == "comment":
            continue
        if stmt.type != "expression_statement" or not stmt.named_children:
            return False
        literal = string_value(parsed, stmt.named_children[0])
        if literal == value:
            return True
        if literal is None:
            return False
    return False


def _declarators(decl: Node) -> list[tuple[Node, Node | None, Node]]:
    out = []
    for child in decl.named_children:
        if child.type != "variable_declarator":
            continue
        name = child.child_by_field_name("name")
        if name is None or name.type != "identifier":
            continue
        out.append((name, child.child_by_field_name("value"), child))
    return out


def local_functions(parsed: ParsedSource) -> dict[str, Node]:
    """Top-level and nested function declarations/initializers by name."""
    found: dict[str, Node] = {}
    for node in parsed.iter_nodes(
        "function_declaration", "variable_declarator"
    ):
        name = node.child_by_field_name("name")
        if name is None or name.type != "identifier":
            continue
        if node.type == "function_declaration":
            found.setdefault(parsed.node_text(name), node)
            continue
        value = node.child_by_field_name("value")
        if value is not None and value.type in FUNCTION_TYPES:
            found.setdefault(parsed.node_text(name), value)
    return found


def exported_functions(parsed: ParsedSource) -> list[ExportedFunction]:
    """Exports of the module in source order.

    Covers `export [async] function X`, `export const X = ...` and
    `export { local as X }` (resolved to the local declaration).
    """
    exports: list[ExportedFunction] = []
    locals_by_name: dict[str, Node] | None = None

    for stmt in parsed.root.named_children:
        if stmt.type != "export_statement":
            continue
        decl = stmt.child_by_field_name("declaration")
        if decl is not None:
            exports.extend(_from_declaration(parsed, decl))
            continue

        value = stmt.child_by_field_name("value")
        if value is not None and value.type in FUNCTION_TYPES:
            exports.append(
                ExportedFunction(
                    name="default",
                    node=value,
                    body=function_body(value),
                    line=parsed.line_of(stmt),
                    is_function=True,
                )
            )
            continue

        for clause in stmt.named_children:
            if clause.type != "export_clause":
                continue
            if locals_by_name is None:
                locals_by_name = local_functions(parsed)
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                local = specifier.child_by_field_name("name")
                alias = specifier.child_by_field_name("alias")
                if local is None:
                    continue
                local_name = parsed.node_text(local)
                target = locals_by_name.get(local_name)
                exports.append(
                    ExportedFunction(
                        name=parsed.node_text(
                            alias if alias is not None else local
                        ),
                        node=target if target is not None else specifier,
                        body=(
                            function_body(target)
                            if target is not None
                            else None
                        ),
                        line=parsed.line_of(
                            target if target is not None else specifier
                        ),
                        is_function=target is not None,
                    )
                )
    return exports


def _from_declaration(
    parsed: ParsedSource, decl: Node
) -> list[ExportedFunction]:
    if decl.type in ("function_declaration", "generator_function_declaration"):
        name = decl.child_by_field_name("name")
        if name is None:
            return []
        return [
            ExportedFunction(
                name=parsed.node_text(name),
                node=decl,
                body=decl.child_by_field_name("body"),
                line=parsed.line_of(decl),
                is_function=True,
            )
        ]
    if decl.type not in VARIABLE_DECLARATIONS:
        return []

    out = []
    for name, value, declarator in _declarators(decl):
        is_function = value is not None and value.type in FUNCTION_TYPES
        # wrapped handlers: export const POST = withAuth(async () => ...)
        wraps_function = value is not None and value.type == "call_expression"
        out.append(
            ExportedFunction(
                name=parsed.node_text(name),
                node=value if value is not None else declarator,
                body=function_body(value) if is_function else value,
                line=parsed.line_of(declarator),
                is_function=is_function or wraps_function,
            )
        )
    return out
