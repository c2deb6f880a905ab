from collections.abc import Iterable, Sequence

from rich.markup import escape

from skillsync.similarity.diff import DiffHunk, iter_unified_diff


def colorize_diff(diff_text: Iterable[str]) -> str:
    """Add Rich markup to colorize diff output.

    Args:
        diff_text: Plain unified diff lines

    Returns:
        Diff text with Rich markup for colors (green for additions, red for deletions)
    """
    colored_lines: list[str] = []

    for line in diff_text:
        line = escape(line.rstrip("\n"))

        if line.startswith("+") and not line.startswith("+++"):
            colored_lines.append(f"[green]{line}[/green]")
        elif line.startswith("-") and not line.startswith("---"):
            colored_lines.append(f"[red]{line}[/red]")
        elif line.startswith("@@"):
            colored_lines.append(f"[cyan]{line}[/cyan]")
        elif line.startswith("---") or line.startswith("+++"):
            colored_lines.append(f"[bold]{line}[/bold]")
        else:
            colored_lines.append(line)

    return "\n".join(colored_lines)


def format_hunks(
    hunks: Sequence[DiffHunk],
    fromfile: str = "source",
    tofile: str = "target",
    max_lines: int | None = None,
) -> str:
    """Render hunks as a colorized unified diff suitable for a Rich console."""
    if not hunks:
        return "[dim]No differences[/dim]"
    text = colorize_diff(iter_unified_diff(hunks, fromfile, tofile))
    if max_lines is not None:
        text = truncate_content(text, max_lines)
    return text


def truncate_content(content: str, max_lines: int) -> str:
    """Truncate content to a maximum number of lines."""
    lines = content.splitlines()
    if len(lines) > max_lines:
        truncated_lines = lines[:max_lines]
        truncated_lines.append(f"... ({len(lines) - max_lines} more lines)")
        return "\n".join(truncated_lines)
    return content
