# Agents module - static agent configuration

from .config import AgentConfig, AgentCatalogue, create_default_agents

__all__ = ["AgentConfig", "AgentCatalogue", "create_default_agents"]
