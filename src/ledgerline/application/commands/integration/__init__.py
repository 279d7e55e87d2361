"""Integration commands."""

from ledgerline.application.commands.integration.sync_orchestrator import (
    SyncOrchestrator,
)

__all__ = ["SyncOrchestrator"]
