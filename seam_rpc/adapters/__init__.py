"""
Transport Adapters Module

Bindings that carry encoded JSON-RPC envelopes over a concrete transport:
- zeromq: ZeroMQ REQ/REP (tcp, ipc, inproc)
"""

from .adapter_interface import ClientAdapterInterface, ServerAdapterInterface

__all__ = [
    "ClientAdapterInterface",
    "ServerAdapterInterface",
]
