"""State management module."""
from dmrelay.state.database import DatabaseManager, DatabaseError
from dmrelay.state.models import ClientState, OfflineEntry
from dmrelay.state.repositories import ClientStateRepository, OfflineRepository
__all__ = ["DatabaseManager", "DatabaseError", "ClientState", "OfflineEntry",
           "ClientStateRepository", "OfflineRepository"]
