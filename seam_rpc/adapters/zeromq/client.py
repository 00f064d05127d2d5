"""
ZeroMQ client adapter

Sends envelopes built by an RpcClient over a ZeroMQ REQ socket and routes the
replies back through it, so registered callbacks fire as usual.
"""

import time
import logging
from typing import Any, Callable, Dict, Optional

import zmq

from seam_rpc.adapters.adapter_interface import ClientAdapterInterface
from seam_rpc.client import PARSE_FAILED, RpcClient
from seam_rpc.telemetry.metrics import increment_counter, record_latency

logger = logging.getLogger(__name__)


class ZeroMQClient(ClientAdapterInterface):
    """ZeroMQ REQ binding for RpcClient"""

    def __init__(self,
                 rpc_client: RpcClient,
                 server_address: str = "tcp://localhost:5555",
                 timeout_ms: int = 5000,
                 context: Optional[zmq.Context] = None):
        """Initialize ZeroMQ client

        Args:
            rpc_client: Client that builds requests and routes responses
            server_address: ZeroMQ server address
            timeout_ms: Request timeout (milliseconds)
            context: ZeroMQ context; a private one is created if omitted
        """
        self.rpc_client = rpc_client
        self.server_address = server_address
        self.timeout_ms = timeout_ms
        self._owns_context = context is None
        self.context = context or zmq.Context()
        self.socket = self.context.socket(zmq.REQ)
        self.socket.setsockopt(zmq.RCVTIMEO, timeout_ms)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(server_address)
        logger.info(f"ZeroMQ client connected to {server_address}")

    def close(self):
        """Close client connection"""
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if self._owns_context and self.context is not None:
            self.context.term()
            self.context = None

    def _exchange(self, request: Dict[str, Any], method: str) -> bytes:
        start_time = time.time()
        try:
            self.socket.send(self.rpc_client.codec.encode(request).encode("utf-8"))
            response_bytes = self.socket.recv()
        except zmq.error.Again:
            # REQ sockets are stuck after a missed reply; callers should reconnect
            increment_counter("rpc.client.errors", 1, {"type": "timeout", "method": method})
            raise TimeoutError(f"ZeroMQ request timed out ({self.timeout_ms}ms)")
        except zmq.error.ZMQError as e:
            increment_counter("rpc.client.errors", 1, {"type": "zmq_error", "method": method})
            raise ConnectionError(f"ZeroMQ connection error: {e}") from e

        latency_ms = (time.time() - start_time) * 1000
        record_latency("rpc.client.latency", latency_ms, {"method": method})
        logger.debug(f"Received response, latency: {latency_ms:.2f}ms")
        return response_bytes

    def call(self, method: str, params: Any = None, callback: Optional[Callable] = None) -> Dict[str, Any]:
        """Send a JSON-RPC 2.0 request and wait for the response

        Args:
            method: Method name to call
            params: Method parameters
            callback: Response callback, fired when the reply is routed

        Raises:
            TimeoutError: Request timed out
            ConnectionError: Connection failed
            ValueError: Response could not be decoded
        """
        request_id, request = self.rpc_client.create_call(method, params, callback=callback)
        try:
            response_bytes = self._exchange(request, method)
        except (TimeoutError, ConnectionError):
            self.rpc_client.discard_handler(request_id)
            raise
        response = self.rpc_client.receive(response_bytes)

        if response is PARSE_FAILED or not isinstance(response, dict):
            raise ValueError("Invalid JSON-RPC 2.0 response")

        if response.get("id") != request_id:
            raise ValueError(f"Response ID mismatch: {response.get('id')} != {request_id}")

        if "error" in response:
            error = response["error"]
            logger.debug(f"RPC call error: {error.get('message')}, code: {error.get('code')}")

        return response

    def notify(self, method: str, params: Any = None) -> None:
        """Send a JSON-RPC 2.0 notification

        REQ/REP requires a reply frame; it is read and dropped.
        """
        request = self.rpc_client.create_notify(method, params)
        self._exchange(request, method)
