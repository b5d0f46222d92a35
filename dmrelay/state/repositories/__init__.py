"""Repositories."""
from dmrelay.state.repositories.client_state import ClientStateRepository
from dmrelay.state.repositories.offline import OfflineRepository
__all__ = ["ClientStateRepository", "OfflineRepository"]
