"""Local HTTP print agent."""

from __future__ import annotations

from .config import AgentConfig
from .server import cors_middleware, create_app, print_receipt, run_agent

__all__ = ["AgentConfig", "cors_middleware", "create_app", "print_receipt", "run_agent"]
