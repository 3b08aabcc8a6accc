# Providers module - model backends behind one capability interface
# Selected by model id through ProviderRegistry; no vendor logic above this line

from .base import ModelProvider, ProviderRegistry, KNOWN_MODELS
from .replay import ReplayProvider, load_replay_providers

__all__ = [
    "ModelProvider",
    "ProviderRegistry",
    "KNOWN_MODELS",
    "ReplayProvider",
    "load_replay_providers",
]
