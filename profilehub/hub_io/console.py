# profilehub/hub_io/console.py
# Shared Rich console w/ the profilehub theme for commands & the output manager

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

# log categories map onto hub.<category> styles in the output manager
HUB_THEME = Theme(
    {
        "hub.ok": "green",
        "hub.id": "cyan",
        "hub.muted": "dim",
        "hub.warn": "yellow",
        "hub.fail": "red",
        "hub.action": "bold",
        "hub.store": "bold cyan",
        "hub.storage": "bold blue",
        "hub.ai": "bold magenta",
        "hub.config": "bold green",
        "hub.file": "bold white",
    }
)

console = Console(theme=HUB_THEME)


# * Confirmation line printed after a command changed something
def ok(message: str) -> None:
    console.print(f"[hub.ok]✓[/] {message}")
