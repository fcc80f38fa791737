"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from obzctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from obzctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids for lists, else a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict))
    board = result.data.get("board")
    if isinstance(board, dict) and "id" in board:
        return str(board["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "obz.ok"), (f"  {result.op}", "obz.op")))


def _field(console: Console, key: str, value: Any) -> None:
    if key == "id" or key.endswith("_id"):
        style = "obz.id"
    elif key == "path":
        style = "obz.path"
    elif key == "name":
        style = "obz.name"
    else:
        style = ""
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value) if value else "-"
    console.print(Text.assemble((f"  {key}: ", "obz.key"), (str(value), style)))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "obz.error"), (f"  {result.op}", "obz.op"), f" — {msg}")
    )
    if err is None or not err.detail:
        return
    for issue in err.detail.get("issues", []):
        where = issue.get("path") or "<root>"
        console.print(Text.assemble("  ", (where, "obz.key"), f": {issue.get('message', '')}"))
    for dup in err.detail.get("duplicates", []):
        locations = ", ".join(dup["locations"])
        console.print(Text.assemble("  ", (dup["id"], "obz.id"), f": {locations}"))
    if verbose:
        for key, value in err.detail.items():
            if key not in ("issues", "duplicates"):
                console.print(f"    {key}: {value}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Board renderers ───────────────────────────────────────────────────


def _grid_table(board: dict[str, Any], labels: dict[str, str]) -> Table:
    grid = board["grid"]
    table = Table(show_header=False, show_lines=True, pad_edge=True, expand=False)
    for _ in range(grid["columns"]):
        table.add_column(justify="center", min_width=8)
    for row in grid["order"]:
        cells: list[Text] = []
        for cell in row:
            if cell is None:
                cells.append(Text("·", style="obz.empty"))
            else:
                cells.append(Text(labels.get(cell) or cell))
        table.add_row(*cells)
    return table


def _render_board_created(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    board = result.data["board"]
    _status_line(console, result)
    _field(console, "id", board["id"])
    _field(console, "name", board["name"])
    _field(console, "locale", board["locale"])
    _field(console, "grid", f"{board['grid']['rows']}x{board['grid']['columns']}")


def _render_board_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    board = d["board"]
    labels = {b["id"]: b.get("label") or "" for b in d.get("buttons", [])}

    lines = [
        f"locale: {board['locale']}",
        f"grid: {board['grid']['rows']}x{board['grid']['columns']}",
        f"buttons: {len(board['buttons'])}  images: {len(board.get('images', []))}"
        f"  sounds: {len(board.get('sounds', []))}",
    ]
    if board.get("url"):
        lines.append(f"url: {board['url']}")
    if d.get("absolute_layout"):
        lines.append("layout: absolute positioning")
    console.print(
        Panel(
            Text("\n".join(lines)),
            title=Text(f"{board['id']} — {board['name']}"),
            expand=False,
        )
    )
    console.print(_grid_table(board, labels))

    if d.get("unplaced"):
        console.print(f"[obz.warning]unplaced[/obz.warning]: {', '.join(d['unplaced'])}")

    if verbose and d.get("buttons"):
        table = Table(show_header=True, pad_edge=False, expand=False)
        for column in ("ID", "Label", "Speaks", "Image", "Sound", "Action"):
            table.add_column(column)
        for b in d["buttons"]:
            table.add_row(
                Text(b["id"], style="obz.id"),
                b.get("label") or "",
                b.get("speaks") or "",
                b.get("image") or "",
                b.get("sound") or "",
                b.get("action") or "",
            )
        console.print(table)


def _render_board_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="obz.id", no_wrap=True)
    table.add_column("Name", style="obz.name")
    table.add_column("Locale")
    table.add_column("Grid", justify="right")
    table.add_column("Buttons", justify="right")
    if verbose:
        table.add_column("Images", justify="right")
        table.add_column("Sounds", justify="right")
    for item in items:
        row = [
            item["id"],
            item["name"],
            item["locale"],
            f"{item['rows']}x{item['columns']}",
            str(item["buttons"]),
        ]
        if verbose:
            row.extend([str(item["images"]), str(item["sounds"])])
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} boards")


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Status line plus the identifying fields of the changed resource."""
    _status_line(console, result)
    d = result.data
    for key in ("board_id", "button_id", "image_id", "sound_id", "rows", "columns", "fields"):
        if key in d:
            _field(console, key, d[key])
    for key in ("button", "image", "sound"):
        if key in d:
            _field(console, f"{key}_id", d[key]["id"])
            if verbose:
                for name, value in d[key].items():
                    if name != "id":
                        _field(console, f"  {name}", value)
    if "position" in d:
        pos = d["position"]
        _field(console, "position", f"row {pos[0]}, column {pos[1]}" if pos else "unplaced")


# ── Archive renderers ─────────────────────────────────────────────────


def _render_pack(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "path", d["path"])
    _field(console, "root", d["root"])
    _field(console, "boards", d["boards"])
    _field(console, "size", f"{d['size']} bytes")


def _render_unpack(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "path", d["path"])
    _field(console, "root", d["root"])
    _field(console, "saved", "yes" if d.get("saved") else "no")
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="obz.id", no_wrap=True)
    table.add_column("Name", style="obz.name")
    table.add_column("Buttons", justify="right")
    for board in d.get("boards", []):
        table.add_row(board["id"], board["name"], str(board["buttons"]))
    console.print(table)
    files = d.get("files", [])
    if files:
        console.print(f"{len(files)} additional file(s)")
        if verbose:
            for name in files:
                console.print(f"  [obz.path]{name}[/obz.path]")


# ── Check renderer ────────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Issues grouped by category, then an error/warning tally."""
    issues = result.data.get("issues", [])
    checked = result.data.get("checked", 0)
    if not issues:
        console.print(f"[obz.ok]OK[/obz.ok]  No issues found ({checked} checked).")
        return

    severity_styles = {"error": "obz.error", "warning": "obz.warning"}
    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        by_category.setdefault(str(issue.get("category", "unknown")), []).append(issue)

    for category, group in by_category.items():
        console.print(f"\n[bold]{category}[/bold]")
        for issue in group:
            sev = str(issue.get("severity", "warning"))
            style = severity_styles.get(sev, "")
            location = f" {issue['location']}" if issue.get("location") else ""
            console.print(
                Text.assemble(
                    "  ",
                    (sev, style),
                    " ",
                    (issue["path"], "obz.path"),
                    f"{location}: {issue['message']}",
                )
            )
            if verbose and issue.get("locations"):
                console.print(f"    at: {', '.join(issue['locations'])}")

    errors = sum(1 for issue in issues if issue.get("severity") == "error")
    console.print(f"\n{errors} errors, {len(issues) - errors} warnings ({checked} checked)")


# ── Dispatch ──────────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "board_create": _render_board_created,
    "board_show": _render_board_show,
    "board_list": _render_board_list,
    "board_delete": _render_mutation,
    "board_resize": _render_mutation,
    "button_add": _render_mutation,
    "button_update": _render_mutation,
    "button_remove": _render_mutation,
    "image_add": _render_mutation,
    "image_remove": _render_mutation,
    "sound_add": _render_mutation,
    "sound_remove": _render_mutation,
    "archive_pack": _render_pack,
    "archive_unpack": _render_unpack,
    "check": _render_check,
}
