"""Command-line interface (typer app and interactive study shell)."""
