"""
ZeroMQ adapter for the JSON-RPC engine
"""

from .client import ZeroMQClient
from .server import ZeroMQServer

__all__ = ["ZeroMQClient", "ZeroMQServer"]
