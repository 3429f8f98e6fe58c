"""Render node outlines as markdown."""

import io
from collections.abc import Sequence

from simpletask.models.node import NodeKind, Snapshot


def render_outline_as_markdown(
    rows: Sequence[tuple[int, Snapshot]],
    *,
    max_depth: int | None = None,
    include_descriptions: bool = True,
) -> str:
    """Render ``(depth, Snapshot)`` rows as an indented markdown checklist.

    Args:
        rows: Outline rows as produced by ``WorkspaceManager.outline``.
        max_depth: The depth limit the rows were produced with. Containers at
            that depth which still have children get a truncation line.
        include_descriptions: Whether to include node descriptions.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    for depth, snapshot in rows:
        indent = "    " * depth

        box = "[x]" if snapshot.complete else "[ ]"
        suffix = ""
        if snapshot.kind is NodeKind.CONTAINER:
            suffix = f" ({snapshot.child_count})"
        if snapshot.priority:
            suffix += f" !{snapshot.priority}"

        lines = snapshot.name.split("\n")
        out.write(f"{indent}- {box} {lines[0]}{suffix}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if include_descriptions and snapshot.description:
            for line in snapshot.description.split("\n"):
                out.write(f"{indent}  > {line}\n")

        if max_depth is not None and depth == max_depth and snapshot.child_count > 0:
            child_indent = "    " * (depth + 1)
            noun = "child" if snapshot.child_count == 1 else "children"
            out.write(f"{child_indent}- ... ({snapshot.child_count} more {noun})\n")

    return out.getvalue()
