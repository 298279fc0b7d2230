from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.factory import RegistryClientFactory
from judicial_monitor.registry.models import FetchedActuation, Party, ProcessSnapshot

__all__ = [
    "BaseRegistryClient",
    "FetchedActuation",
    "Party",
    "ProcessSnapshot",
    "RegistryClientFactory",
]
