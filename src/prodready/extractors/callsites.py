"""Callsites extractor: fetch, axios and router navigation calls."""

from __future__ import annotations

from prodready.extractors import ExtractorContext, for_each_source
from prodready.extractors.syntax import callee_text, first_string_argument
from prodready.graph import AppGraph, CallsiteNode, node_id
from prodready.project import ParsedSource

AXIOS_VERBS = ("get", "post", "put", "patch", "delete")

NAVIGATION_METHODS = ("push", "replace")


def _axios_verb(callee: str) -> str | None:
    if "axios" not in callee:
        return None
    for verb in AXIOS_VERBS:
        if callee.endswith("." + verb):
            return verb.upper()
    return None


def _is_navigation(callee: str) -> bool:
    if callee == "push":
        return True
    if callee.endswith(".push"):
        return True
    # replace is too common on strings; only count it on routers
    if callee.endswith(".replace"):
        return callee.rsplit(".", 1)[0].lower().endswith("router")
    return False


def _extract_file(graph: AppGraph, parsed: ParsedSource) -> None:
    rel = parsed.relative_path
    for call in parsed.iter_nodes("call_expression"):
        callee = callee_text(parsed, call)
        if not callee:
            continue
        line = parsed.line_of(call)

        if callee == "fetch":
            target = first_string_argument(parsed, call)
            if target is None:
                continue
            if not (target.startswith("/") or target.startswith("http")):
                continue
            call_kind, method = "fetch", None
        elif _axios_verb(callee) is not None:
            target = first_string_argument(parsed, call)
            call_kind, method = "axios", _axios_verb(callee)
        elif _is_navigation(callee):
            target = first_string_argument(parsed, call)
            if target is None or not target.startswith("/"):
                continue
            call_kind, method = "router", None
        else:
            continue

        graph.add(
            CallsiteNode(
                id=node_id("Callsite", rel, line, call_kind, target),
                file_path=rel,
                call_kind=call_kind,
                target_path=target,
                http_method=method,
                line=line,
                snippet=parsed.line_text(line),
            )
        )


def extract_callsites(graph: AppGraph, ctx: ExtractorContext) -> None:
    for_each_source(graph, ctx, _extract_file)
