"""Transactional multi-agent engine: agents, plugins, messaging, listener, executor and driver."""

__version__ = "1.0.0"