"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from deriva.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from deriva.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text when Rich detects no terminal, which is the case
    inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: one type name per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    types = result.data.get("types")
    if types and isinstance(types, list):
        names = [str(t.get("name", "")) if isinstance(t, dict) else str(t) for t in types]
        return "\n".join(names)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    line = Text("OK", style="deriva.ok")
    line.append(f"  {result.op}", style="deriva.op")
    console.print(line)


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="deriva.key"), Text(str(value)), sep="")


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
            console.print(f"    {k}: {v}", markup=False)


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
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

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {name}")
    annotations = span_data.get("annotations") or {}
    if annotations:
        line.append(f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})")
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    line = Text("ERROR", style="deriva.error")
    line.append(f"  {result.op}", style="deriva.op")
    if err:
        line.append(f"  [{err.code}]", style="deriva.warning")
    line.append(f"  {msg}")
    console.print(line)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Derivation renderers ──────────────────────────────────────────────


def _render_derive(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render each derived type with its generated operations."""
    _status_line(console, result)
    for entry in result.data.get("types", []):
        console.print()
        console.print(Text(entry["name"], style="deriva.type"))
        for source in entry.get("operations", {}).values():
            for line in source.splitlines():
                console.print(Text(f"  {line}"))
        _field(console, "equations", f"{len(entry.get('equations', []))} proved")
        if entry.get("nested"):
            _field(console, "nested", ", ".join(entry["nested"]))
        laws = entry.get("laws")
        if laws:
            _field(console, "laws", f"{len(laws['obligations'])} obligations discharged")
        if verbose:
            for eq in entry.get("equations", []):
                console.print(Text(f"    {eq}", style="dim"))
    if verbose:
        _render_meta(console, result)


def _render_laws(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the law obligations discharged per type as tables."""
    _status_line(console, result)
    for entry in result.data.get("types", []):
        laws = entry.get("laws") or {}
        table = Table(title=entry["name"], show_edge=False, pad_edge=False)
        table.add_column("Law", style="deriva.law")
        table.add_column("Constructor")
        table.add_column("Effect", style="dim")
        table.add_column("", style="deriva.ok")
        for ob in laws.get("obligations", []):
            status = "vacuous" if ob.get("vacuous") else "ok"
            table.add_row(ob["law"], ob["constructor"], ob.get("effect", ""), status)
        console.print()
        console.print(table)
        _field(console, "max_examples", laws.get("max_examples", 0))
    if verbose:
        _render_meta(console, result)


def _render_classify(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render per-field classification as a table."""
    data = result.data
    _status_line(console, result)
    table = Table(title=f"{data['type']} (over {data['var']})", show_edge=False, pad_edge=False)
    table.add_column("Constructor", style="bold")
    table.add_column("Field")
    table.add_column("Type")
    table.add_column("Kind")
    for ctor in data.get("constructors", []):
        if not ctor["fields"]:
            table.add_row(ctor["name"], "", "", "")
        for fld in ctor["fields"]:
            kind = fld["kind"]
            label = kind if kind != "nested" else f"nested in {fld['outer']}"
            table.add_row(
                ctor["name"], fld["label"], fld["type"], Text(label, style=style_for_kind(kind))
            )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS = {
    "derive": _render_derive,
    "laws": _render_laws,
    "classify": _render_classify,
}
