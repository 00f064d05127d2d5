#!/usr/bin/env python
"""
ZeroMQ Server Example

Serves an RpcServer over ZeroMQ with a token-checking middleware.
"""

import sys
import signal
import logging

from seam_rpc import Outcome, RpcServer
from seam_rpc.adapters.zeromq import ZeroMQServer
from seam_rpc.telemetry import setup_metrics, setup_tracer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_TOKEN = "example-token"


def require_token(request, entry):
    """Reject calls to methods marked private unless the request carries the token"""
    if entry is None or not entry.metadata.get("private"):
        return True
    if request.get("token") != API_TOKEN:
        return False, {"code": -32001, "message": "Unauthorized", "data": "missing or invalid token"}
    return True


def divide(a, b):
    if b == 0:
        return Outcome(None, {"code": 1001, "message": "Division by zero"})
    return a / b


def main():
    """Start ZeroMQ server example"""
    setup_tracer("zeromq-server-example")
    setup_metrics("zeromq-server-example")

    rpc_server = RpcServer({"log_errors": True})
    rpc_server.register("echo", lambda value: value)
    rpc_server.register("divide", divide, {"private": True})
    rpc_server.use(require_token)

    server = ZeroMQServer(rpc_server, bind_address="tcp://*:5555")

    def handle_sigint(sig, frame):
        logger.info("Received exit signal, stopping server...")
        server.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    logger.info("Starting ZeroMQ server...")
    try:
        server.start(threaded=False)
    except KeyboardInterrupt:
        logger.info("Received exit signal, stopping server...")
    finally:
        server.close()

    logger.info("Server stopped")


if __name__ == "__main__":
    main()
