"""Agent Architect inbound submission and session-messaging pipeline."""

__version__ = "0.1.0"
