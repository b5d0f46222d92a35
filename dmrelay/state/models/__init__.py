"""State models."""
from dmrelay.state.models.client_state import ClientState
from dmrelay.state.models.offline import OfflineEntry
__all__ = ["ClientState", "OfflineEntry"]
