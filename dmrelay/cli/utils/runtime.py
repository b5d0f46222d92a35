"""Wiring from CLI configuration to client objects."""

from typing import Optional

import httpx

from dmrelay.client import Dispatcher, EndpointCatalog, OfflineStore, Operation, Transport, start_session
from dmrelay.state import DatabaseManager

from .config import ClientConfig


def make_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """HTTP transport for new clients; None selects the pooled default."""
    return None


def build_transport(config: ClientConfig) -> Transport:
    return Transport(config.api_url, token=config.token, timeout=config.timeout, http2=config.http2,
                     http_transport=make_http_transport())


def build_catalog(config: ClientConfig) -> EndpointCatalog:
    catalog = EndpointCatalog()
    if config.send_order:
        catalog.promote(Operation.SEND, config.send_order)
    return catalog


def build_store(config: ClientConfig) -> OfflineStore:
    return OfflineStore(DatabaseManager(config.db_path), config.user_id)


def build_dispatcher(config: ClientConfig) -> Dispatcher:
    """Start the session for the configured user and return a dispatcher."""
    session = start_session(config.user_id, config.role, config.token)
    return Dispatcher(build_transport(config), session, build_store(config), build_catalog(config))
