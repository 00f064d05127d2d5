#!/usr/bin/env python
"""
ZeroMQ Client Example

Calls the methods served by zeromq_server_example.py.
"""

import logging

from seam_rpc import RpcClient
from seam_rpc.adapters.zeromq import ZeroMQClient
from seam_rpc.telemetry import create_span, setup_metrics, setup_tracer, trace_context_middleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def add_token(request):
    request["token"] = "example-token"
    return request


def main():
    """Run ZeroMQ client example"""
    setup_tracer("zeromq-client-example")
    setup_metrics("zeromq-client-example")

    rpc_client = RpcClient()
    rpc_client.use(trace_context_middleware)
    rpc_client.use(add_token)

    client = ZeroMQClient(rpc_client, server_address="tcp://localhost:5555")
    try:
        with create_span("zeromq-client-example"):
            response = client.call("echo", ["Hello, ZeroMQ!"])
            logger.info(f"Received echo response: {response}")

            response = client.call("divide", [10, 4], callback=lambda r: logger.info(f"Callback got: {r}"))
            logger.info(f"Received divide response: {response}")

            response = client.call("divide", [1, 0])
            logger.info(f"Received application error: {response['error']}")

            client.notify("echo", ["fire and forget"])
    except TimeoutError as e:
        logger.error(f"Server did not answer: {e}")
    finally:
        client.close()

    logger.info("Client exited")


if __name__ == "__main__":
    main()
