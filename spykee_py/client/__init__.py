"""
spykee_py/client

Client package for spykee-py.

This package contains the client implementation:
- client: Main SpykeeClient class (one session with one robot)
- config: Configuration and state dataclasses

Usage:
    from spykee_py.client import SpykeeClient, ClientConfig

    config = ClientConfig(host="192.168.1.20", username="admin", password="admin")
    client = SpykeeClient(config)
    if client.connect():
        client.activate()
"""

from .client import SpykeeClient, connect_to_robot, main
from .config import ClientConfig, ClientState, SessionPhase

__all__ = [
    # Main client
    "SpykeeClient",
    "connect_to_robot",
    "main",

    # Configuration
    "ClientConfig",
    "ClientState",
    "SessionPhase",
]
