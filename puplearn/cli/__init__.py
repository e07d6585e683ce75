"""Terminal interface (typer + rich)."""
