"""Audit ensuring every logged event has a template and no template is stale.

Scans the package with ``ast`` for ``*.log_event(domain, action, ...)`` calls
using string literals and compares them against ``event_templates.json``.
"""

from __future__ import annotations

import ast
import json
from pathlib import Path

import tribe_client
from tribe_client.logs import EVENT_TEMPLATES

PACKAGE_ROOT = Path(tribe_client.__file__).resolve().parent
TEMPLATES_JSON = PACKAGE_ROOT / "logs" / "event_templates.json"


def _literal(expr: ast.AST | None) -> str | None:
    if isinstance(expr, ast.Constant) and isinstance(expr.value, str):
        return expr.value
    return None


def _code_references() -> set[tuple[str, str]]:
    refs: set[tuple[str, str]] = set()
    for path in PACKAGE_ROOT.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if not (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "log_event"
                and len(node.args) >= 2
            ):
                continue
            domain, action = _literal(node.args[0]), _literal(node.args[1])
            if domain and action:
                refs.add((domain, action))
    return refs


def _json_templates() -> set[tuple[str, str]]:
    raw = json.loads(TEMPLATES_JSON.read_text(encoding="utf-8"))
    return {(domain, action) for domain, actions in raw.items() for action in actions}


def test_event_template_audit_no_missing():
    missing = _code_references() - _json_templates()
    assert not missing, f"Missing templates: {sorted(missing)}"


def test_event_template_audit_no_unused():
    unused = _json_templates() - _code_references()
    assert not unused, f"Unused templates: {sorted(unused)}"


def test_loaded_templates_match_json():
    assert set(EVENT_TEMPLATES) == _json_templates()
