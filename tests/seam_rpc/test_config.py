"""
Tests for RPC options and codec
"""
import os
import pytest
from unittest.mock import patch

from seam_rpc import DecodeError, EncodeError, JsonCodec, RpcClient, RpcOptions, RpcServer


class TestRpcOptions:
    """Test option handling"""

    def test_default_values(self):
        options = RpcOptions()
        assert options.log_errors is True
        assert options.extra == {}

    def test_from_mapping_passes_unknown_keys_through(self):
        options = RpcOptions.from_mapping({"log_errors": False, "transport": "zmq", "retries": 3})

        assert options.log_errors is False
        assert options.get("transport") == "zmq"
        assert options.get("retries") == 3
        assert options.get("missing", "fallback") == "fallback"
        assert options.to_dict() == {"log_errors": False, "transport": "zmq", "retries": 3}

    def test_from_mapping_does_not_mutate_input(self):
        raw = {"log_errors": False}
        RpcOptions.from_mapping(raw)
        assert raw == {"log_errors": False}

    @pytest.mark.parametrize("raw, expected", [("false", False), ("0", False), ("True", True), (0, False), (1, True)])
    def test_from_mapping_parses_log_errors(self, raw, expected):
        assert RpcOptions.from_mapping({"log_errors": raw}).log_errors is expected

    def test_from_mapping_invalid_log_errors(self):
        with pytest.raises(ValueError, match="Invalid boolean value"):
            RpcOptions.from_mapping({"log_errors": "sometimes"})

    def test_from_env(self):
        with patch.dict(os.environ, {"SEAM_RPC_LOG_ERRORS": "false"}):
            assert RpcOptions.from_env().log_errors is False
        with patch.dict(os.environ, {"SEAM_RPC_LOG_ERRORS": "YES"}):
            assert RpcOptions.from_env().log_errors is True

    def test_from_env_default(self):
        with patch.dict(os.environ, clear=True):
            assert RpcOptions.from_env().log_errors is True

    def test_from_env_invalid(self):
        with patch.dict(os.environ, {"SEAM_RPC_LOG_ERRORS": "maybe"}):
            with pytest.raises(ValueError, match="Invalid boolean value"):
                RpcOptions.from_env()

    def test_server_and_client_accept_options(self):
        options = RpcOptions(log_errors=False)

        assert RpcServer(options).options is options
        assert RpcClient(options).options is options
        assert RpcServer().options.log_errors is True
        assert RpcClient({"log_errors": False}).options.log_errors is False


class TestJsonCodec:
    """Test the JSON codec"""

    def test_decode_bytes_and_text(self):
        codec = JsonCodec()
        assert codec.decode('{"a": 1}') == {"a": 1}
        assert codec.decode(b'{"a": "\xc3\xa9"}') == {"a": "é"}

    def test_decode_error(self):
        with pytest.raises(DecodeError):
            JsonCodec().decode("not json")
        with pytest.raises(DecodeError):
            JsonCodec().decode(b"\xff\xfe")

    def test_encode_is_compact(self):
        assert JsonCodec().encode({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_encode_error(self):
        with pytest.raises(EncodeError):
            JsonCodec().encode({"a": object()})

    def test_nesting_limit(self):
        nested = []
        for _ in range(100000):
            nested = [nested]

        with pytest.raises(DecodeError):
            JsonCodec().decode("[" * 100000)
        with pytest.raises(EncodeError):
            JsonCodec().encode(nested)
