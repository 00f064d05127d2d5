"""
ZeroMQ adapter tests

Runs RpcServer and RpcClient over an inproc REQ/REP pair.
"""

import itertools
import time
import pytest

zmq = pytest.importorskip("zmq")

from seam_rpc import RpcClient, RpcServer  # noqa: E402
from seam_rpc.adapters.zeromq import ZeroMQClient, ZeroMQServer  # noqa: E402

_addresses = (f"inproc://seam-rpc-test-{n}" for n in itertools.count())


@pytest.fixture
def context():
    context = zmq.Context()
    yield context
    context.term()


@pytest.fixture
def address():
    return next(_addresses)


@pytest.fixture
def rpc_server():
    server = RpcServer({"log_errors": False})
    server.register("echo", lambda value: value)
    server.register("add", lambda a, b: a + b)
    return server


@pytest.fixture
def server(rpc_server, context, address):
    """Create and start test server"""
    server = ZeroMQServer(rpc_server, bind_address=address, context=context)
    server.start(threaded=True)

    # Wait for server to start
    time.sleep(0.05)

    yield server

    server.close()


@pytest.fixture
def client(server, context, address):
    """Create test client"""
    client = ZeroMQClient(RpcClient({"log_errors": False}), server_address=address, timeout_ms=2000, context=context)
    yield client
    client.close()


def test_basic_rpc(client):
    response = client.call("add", [2, 3])

    assert response["jsonrpc"] == "2.0"
    assert response["result"] == 5


def test_payload_roundtrip(client):
    payload = {"message": "Hello, World!", "numbers": list(range(100))}

    assert client.call("echo", [payload])["result"] == payload


def test_error_response_returned(client):
    response = client.call("missing")

    assert response["error"]["code"] == -32601


def test_notify(client):
    client.notify("echo", ["ignored"])

    # The socket is usable again after the discarded reply
    assert client.call("add", [1, 1])["result"] == 2


def test_callbacks_fire_through_adapter(server, context, address):
    rpc_client = RpcClient()
    received = []
    zmq_client = ZeroMQClient(rpc_client, server_address=address, context=context)
    try:
        response = zmq_client.call("echo", ["hi"], callback=received.append)
    finally:
        zmq_client.close()

    assert received == [response]
    assert rpc_client.pending_count == 0


def test_timeout(context, address):
    # Bound socket that never replies
    silent = context.socket(zmq.REP)
    silent.bind(address)
    rpc_client = RpcClient()
    client = ZeroMQClient(rpc_client, server_address=address, timeout_ms=100, context=context)
    try:
        with pytest.raises(TimeoutError):
            client.call("echo", ["x"], callback=lambda response: None)
        assert rpc_client.pending_count == 0
    finally:
        client.close()
        silent.close(linger=0)
