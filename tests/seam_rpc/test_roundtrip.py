"""
Client and server wired back to back without a transport
"""

import pytest

from seam_rpc import RpcClient, RpcServer


@pytest.fixture
def server():
    server = RpcServer({"log_errors": False})
    server.register("echo", lambda value: value)
    server.register("add", lambda a, b: a + b)
    return server


@pytest.fixture
def client():
    return RpcClient({"log_errors": False})


def send(server, client, request):
    return client.receive(server.receive(client.codec.encode(request)))


def test_echo_roundtrip(server, client):
    received = []
    request_id, request = client.create_call("echo", {"hi"}, callback=received.append)

    response = send(server, client, request)

    assert response == {"jsonrpc": "2.0", "result": "hi", "id": request_id}
    assert received == [response]
    assert client.pending_count == 0


def test_client_middleware_feeds_server_middleware(server, client):
    """Test an auth header added client-side gates dispatch server-side"""
    client.use(lambda request: {**request, "auth": "secret"})

    def require_auth(request, entry):
        if request.get("auth") != "secret":
            return False, {"code": -32001, "message": "Unauthorized"}
        return True

    server.use(require_auth)

    _, request = client.create_call("add", [1, 2])
    assert send(server, client, request)["result"] == 3

    bare = RpcClient()
    _, request = bare.create_call("add", [1, 2])
    assert send(server, bare, request)["error"]["code"] == -32001


def test_batch_roundtrip(server, client):
    results = {}
    requests = []
    for i in range(3):
        request_id, request = client.create_call("add", [i, 10], callback=lambda r: results.__setitem__(r["id"], r["result"]))
        requests.append(request)

    raw_responses = server.receive_batch([client.codec.encode(r) for r in requests])
    responses = client.receive_batch(raw_responses)

    assert [r["result"] for r in responses] == [10, 11, 12]
    assert sorted(results.values()) == [10, 11, 12]
