"""
ZeroMQ server adapter

Serves an RpcServer over a ZeroMQ REP socket. Every request frame gets exactly
one reply frame, which is whatever RpcServer.receive returns.
"""

import time
import logging
import threading
from typing import Optional

import zmq

from seam_rpc.adapters.adapter_interface import ServerAdapterInterface
from seam_rpc.server import RpcServer
from seam_rpc.telemetry.metrics import increment_counter

logger = logging.getLogger(__name__)


class ZeroMQServer(ServerAdapterInterface):
    """ZeroMQ REP binding for RpcServer"""

    def __init__(self,
                 rpc_server: RpcServer,
                 bind_address: str = "tcp://*:5555",
                 context: Optional[zmq.Context] = None):
        """Initialize ZeroMQ server

        Args:
            rpc_server: Server that dispatches the requests
            bind_address: Request socket bind address
            context: ZeroMQ context; a private one is created if omitted
        """
        self.rpc_server = rpc_server
        self.bind_address = bind_address
        self.running = False
        self.server_thread = None
        self._owns_context = context is None
        self.context = context or zmq.Context()

        self.socket = self.context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.bind(bind_address)

        increment_counter("rpc.server.started", 1)
        logger.info(f"ZeroMQ server bound to {bind_address}")

    def start(self, threaded: bool = True):
        """Start server

        Args:
            threaded: Whether to run in a separate thread
        """
        self.running = True

        if threaded:
            self.server_thread = threading.Thread(target=self._run_server, daemon=True)
            self.server_thread.start()
            logger.info("ZeroMQ server started in background thread")
        else:
            logger.info("ZeroMQ server started in main thread")
            self._run_server()

    def stop(self):
        """Stop server"""
        self.running = False
        if self.server_thread is not None:
            self.server_thread.join(timeout=1.0)
            self.server_thread = None
            logger.info("ZeroMQ server stopped")

    def close(self):
        """Stop serving and release the socket"""
        self.stop()
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if self._owns_context and self.context is not None:
            self.context.term()
            self.context = None

    def _run_server(self):
        """Server main loop"""
        logger.info("ZeroMQ server accepting requests")

        while self.running:
            try:
                request_bytes = self.socket.recv(flags=zmq.NOBLOCK)
            except zmq.error.Again:
                # No message, keep looping
                time.sleep(0.001)
                continue
            except zmq.error.ZMQError as e:
                if not self.running:
                    break
                logger.error(f"Error in server loop: {e}")
                increment_counter("rpc.server.errors", 1, {"type": "loop_error"})
                time.sleep(1.0)
                continue

            logger.debug(f"Received request: {request_bytes[:200]!r}")
            response = self.rpc_server.receive(request_bytes)
            self.socket.send(response.encode("utf-8"))
