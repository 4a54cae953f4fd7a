"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from honeycomb.output.console import create_console, get_output, style_for

if TYPE_CHECKING:
    from rich.console import Console

    from honeycomb.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    d = result.data
    if result.op == "policies":
        return "\n".join(item["name"] for item in d.get("items", []))
    if result.op == "toggle":
        return str(d.get("action", ""))
    if result.op == "locate":
        return str(d.get("status", ""))
    if result.op == "show" and "output" not in d:
        return str(d.get("xml", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="hb.ok")
    op = Text(f"  {result.op}", style="hb.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="hb.key")
    if not style:
        if key == "policy":
            style = "hb.policy"
        elif key in ("input", "output", "path", "backup"):
            style = "hb.path"
    console.print(k, Text(str(value), style=style), sep="", end="")
    console.print()


def _fmt_span(span: dict[str, int] | None) -> str:
    if not span:
        return "-"
    return f"[{span['start']}, {span['end']})  {span['length']} bytes"


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="hb.error")
    op = Text(f"  {result.op}", style="hb.op")
    code = Text(f" [{err.code}]" if err else "", style="hb.key")
    console.print(label, op, code, Text(f"  {msg}"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Policy renderers ──────────────────────────────────────────────────


def _render_toggle(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "policy", d.get("policy", "?"))
    action = str(d.get("action", ""))
    _field(console, "action", action, style_for("action", action))
    _field(console, "span", _fmt_span(d.get("span")), "hb.span")
    _field(console, "delta", f"{d.get('delta', 0):+d} bytes")
    for key in ("output", "backup"):
        if key in d:
            _field(console, key, d[key])
    if d.get("appended"):
        _field(console, "interned", ", ".join(d["appended"]))
    if verbose:
        _field(console, "renumbered", d.get("renumbered", 0))
        _field(console, "promoted", d.get("promoted", 0))
        _render_meta(console, result)
    if "xml" in d:
        console.print()
        console.print(d["xml"], markup=False, emoji=False, soft_wrap=True)


def _render_locate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "policy", d.get("policy", "?"))
    status = str(d.get("status", ""))
    _field(console, "status", status, style_for("status", status))
    _field(console, "kind", d.get("kind", ""))
    if "span" in d:
        _field(console, "span", _fmt_span(d["span"]), "hb.span")
    if "anchor" in d:
        _field(console, "anchor", d["anchor"])
    if verbose:
        if "container" in d:
            _field(console, "container", _fmt_span(d["container"]), "hb.span")
        _field(console, "path", d.get("path", ""))
        _render_meta(console, result)


def _render_policies(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    items = d.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Policy", style="hb.policy", no_wrap=True)
    table.add_column("Kind")
    if verbose:
        table.add_column("Container", style="hb.path")
    for item in items:
        row = [item["name"], item["kind"]]
        if verbose:
            row.append(item.get("container", ""))
        table.add_row(*row)
    console.print(table)
    noun = "set" if d.get("present_only") else "known"
    console.print(f"\n{d.get('count', len(items))} policies {noun}")
    if verbose:
        _render_meta(console, result)


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if "output" not in d:
        console.print(d.get("xml", ""), markup=False, emoji=False, soft_wrap=True)
        if verbose:
            _render_meta(console, result)
        return
    _status_line(console, result)
    for key in ("path", "output", "size", "elements", "interned"):
        if key in d:
            _field(console, key, d[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "toggle": _render_toggle,
    "locate": _render_locate,
    "policies": _render_policies,
    "show": _render_show,
}
