"""
Logging helpers
Prefixed console output shared by every component (`[Component] message`).
"""

from typing import Callable, Iterable, Optional


def print_with_prefix(prefix: str, message: Optional[str], enabled: bool = True) -> None:
    """Print each line of message behind the component prefix; no-op when disabled."""
    if not enabled:
        return
    text = "" if message is None else str(message)
    lines = text.splitlines() or [""]
    for line in lines:
        if line:
            print(f"{prefix} {line}")
        else:
            print(prefix)


def log_section(
    log_fn: Callable[[str], None],
    title: str,
    width: int = 70,
    char: str = "=",
) -> None:
    line = char * width
    log_fn(line)
    log_fn(title)
    log_fn(line)


def format_skill_list(skill_ids: Iterable[str], limit: int = 8) -> str:
    """Comma-joined preview of skill ids for one-line log messages."""
    items = list(skill_ids)
    if not items:
        return "none"
    preview = ", ".join(items[:limit])
    if len(items) > limit:
        preview += f" (+{len(items) - limit})"
    return preview
