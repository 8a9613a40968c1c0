from .agents import Agent, AgentNotFound, AgentRegistry, DEFAULT_AGENTS, default_registry

__all__ = ["Agent", "AgentNotFound", "AgentRegistry", "DEFAULT_AGENTS", "default_registry"]
