"""Typer command-line application."""

from ledgerline.presentation.cli.app import app, cli

__all__ = ["app", "cli"]
