"""Gateway (service A): validates postal codes and relays to the orchestrator."""

from __future__ import annotations

from .app import create_app
from .service import GatewayService

__all__ = ["GatewayService", "create_app"]
