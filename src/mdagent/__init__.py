"""mdagent — Spotlight search exposed to agents over JSON-RPC on stdio."""

from __future__ import annotations

__version__ = "1.0.0"
