"""Plain-text and JSON output helpers shared by commands."""

import json

KIND_ABBREV = {
    "function": "fn",
    "type": "type",
    "call": "call",
}


def abbrev_kind(kind: str) -> str:
    return KIND_ABBREV.get(kind, kind)


def loc(path: str, line: int | None = None) -> str:
    if line is not None:
        return f"{path}:{line}"
    return path


def format_signature(sig: str | None, max_len: int = 80) -> str:
    if not sig:
        return ""
    sig = sig.strip()
    if len(sig) > max_len:
        return sig[:max_len - 3] + "..."
    return sig


def symbol_line(sym: dict, full: bool = False) -> str:
    """One-line summary: kind, name, signature, line span and byte offset."""
    parts = [abbrev_kind(sym["kind"]), sym["qualified_name"] or sym["name"]]
    sig = format_signature(sym.get("signature"), max_len=10_000 if full else 80)
    if sig:
        parts.append(sig)
    line_info = f"L{sym['line_start']}"
    if sym.get("line_end") and sym["line_end"] != sym["line_start"]:
        line_info += f"-{sym['line_end']}"
    parts.append(line_info)
    parts.append(f"@{sym['offset']}")
    return "  ".join(parts)


def format_table(headers: list[str], rows: list[list[str]],
                 budget: int = 0) -> str:
    if not rows:
        return "(none)"
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(str(cell)))
    lines = []
    lines.append("  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)))
    lines.append("  ".join("-" * w for w in widths))
    display_rows = rows
    if budget and len(rows) > budget:
        display_rows = rows[:budget]
    for row in display_rows:
        lines.append("  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)))
    if budget and len(rows) > budget:
        lines.append(f"(+{len(rows) - budget} more)")
    return "\n".join(lines)


def json_envelope(command: str, summary: dict | None = None, **payload) -> dict:
    """Standard JSON shape: ``{"command", "summary", ...payload}``."""
    env = {"command": command, "summary": summary or {}}
    env.update(payload)
    return env


def to_json(data) -> str:
    return json.dumps(data, indent=2, default=str)
