"""
Transport adapter interfaces

Adapters bind an RpcServer or RpcClient to a concrete transport. The engine
stays transport-agnostic; adapters only move encoded envelopes.
"""

import abc
from typing import Any, Dict


class ClientAdapterInterface(abc.ABC):
    """Client adapter interface"""

    @abc.abstractmethod
    def call(self, method: str, params: Any = None) -> Dict[str, Any]:
        """Send an RPC request and wait for the response

        Args:
            method: Method name to call
            params: Method parameters

        Returns:
            Dict: Decoded response envelope

        Raises:
            TimeoutError: Request timed out
            ConnectionError: Transport failure
            ValueError: Response could not be decoded
        """

    @abc.abstractmethod
    def notify(self, method: str, params: Any = None) -> None:
        """Send a notification; no response is delivered to the caller"""

    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection and release resources"""


class ServerAdapterInterface(abc.ABC):
    """Server adapter interface"""

    @abc.abstractmethod
    def start(self, threaded: bool = True):
        """Start serving

        Args:
            threaded: Whether to run in a separate thread
        """

    @abc.abstractmethod
    def stop(self):
        """Stop serving"""

    @abc.abstractmethod
    def close(self) -> None:
        """Release transport resources"""
