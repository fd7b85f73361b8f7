"""
Unit Tests for the API Key Gate Decision Logic
==============================================
Route matching, method extraction, policy and validation.
"""

import pytest

from rpc_guard.config import ApiKeyAuthConfig
from rpc_guard.errors import UNAUTHORIZED_CODE, UNAUTHORIZED_MESSAGE, UnauthorizedAccess
from rpc_guard.validator import ApiKeyValidator, validate_api_key

CONFIG = ApiKeyAuthConfig(api_key="s3cr3t", protected_methods=("eth_sendUserOperation",))


class TestRouteMatcher:
    """Tests for RPC path classification."""

    @pytest.mark.parametrize("path", ["/", "/rpc", "/v1/rpc", "/v2/rpc", "/v10/rpc", "/v003/rpc"])
    def test_rpc_paths_are_gated(self, path):
        from rpc_guard.routes import is_rpc_path

        assert is_rpc_path(path) is True

    @pytest.mark.parametrize("path", [
        "/health", "/metrics", "/health/ready", "/v/rpc", "/vx/rpc",
        "/v1/rpc/", "/rpc/extra", "/api/v1/rpc", "/v1/rpc\n", "",
    ])
    def test_other_paths_are_exempt(self, path):
        from rpc_guard.routes import is_rpc_path

        assert is_rpc_path(path) is False

    def test_query_string_is_stripped_before_matching(self):
        from rpc_guard.routes import is_rpc_path, is_rpc_url, rpc_path_from_url

        assert is_rpc_path("/v1/rpc?x=y") is False
        assert rpc_path_from_url("/v1/rpc?x=y") == "/v1/rpc"
        assert is_rpc_url("/v1/rpc?x=y") is True
        assert is_rpc_url("http://localhost:3000/?apiKey=k") is True
        assert is_rpc_url("/health?verbose=1") is False


class TestMethodExtractor:
    """Tests for request body normalization."""

    def test_single_call(self):
        from rpc_guard.methods import SingleCall, parse_request_body

        body = parse_request_body({"jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": 1})

        assert isinstance(body, SingleCall)
        assert body.call.id == 1
        assert body.methods == ("eth_chainId",)

    def test_batch_keeps_order(self):
        from rpc_guard.methods import BatchCall, parse_request_body

        body = parse_request_body([
            {"method": "eth_chainId", "id": 1},
            {"method": "eth_sendUserOperation", "id": 2},
            {"method": "eth_chainId", "id": 3},
        ])

        assert isinstance(body, BatchCall)
        assert body.methods == ("eth_chainId", "eth_sendUserOperation", "eth_chainId")

    @pytest.mark.parametrize("raw", [None, "eth_chainId", 42, {}, {"method": 7}, {"params": []}])
    def test_malformed_body_names_no_methods(self, raw):
        from rpc_guard.methods import MalformedBody, extract_methods, parse_request_body

        assert isinstance(parse_request_body(raw), MalformedBody)
        assert extract_methods(raw) == ()

    def test_batch_skips_entries_without_method(self):
        from rpc_guard.methods import extract_methods

        methods = extract_methods([1, {"id": 2}, {"method": "eth_sendUserOperation"}, "x"])

        assert methods == ("eth_sendUserOperation",)

    def test_empty_batch(self):
        from rpc_guard.methods import extract_methods

        assert extract_methods([]) == ()

    def test_decode_json_body(self):
        from rpc_guard.methods import decode_json_body

        assert decode_json_body(b'{"method": "eth_chainId"}') == {"method": "eth_chainId"}
        assert decode_json_body('[{"method": "a"}]') == [{"method": "a"}]
        assert decode_json_body(b"") is None
        assert decode_json_body(None) is None
        assert decode_json_body(b"{not json") is None
        assert decode_json_body(b"\xff\xfe") is None
        assert decode_json_body(b"[" * 100000 + b"]" * 100000) is None


class TestProtectionPolicy:
    """Tests for requires_auth."""

    def test_any_protected_method_requires_auth(self):
        from rpc_guard.policy import requires_auth

        protected = {"eth_sendUserOperation"}

        assert requires_auth(["eth_sendUserOperation"], protected) is True
        assert requires_auth(["eth_chainId", "eth_sendUserOperation"], protected) is True

    def test_unprotected_methods_do_not(self):
        from rpc_guard.policy import requires_auth

        assert requires_auth(["eth_chainId", "eth_supportedEntryPoints"], {"eth_sendUserOperation"}) is False
        assert requires_auth([], {"eth_sendUserOperation"}) is False
        assert requires_auth(["eth_sendUserOperation"], set()) is False


class TestValidator:
    """Tests for the allow/deny decision."""

    def test_unprotected_call_without_key_allowed(self):
        decision = validate_api_key(CONFIG, ["eth_chainId"], None)

        assert decision.allowed is True
        assert decision.error is None

    def test_protected_call_with_matching_key_allowed(self):
        assert validate_api_key(CONFIG, ["eth_sendUserOperation"], "s3cr3t").allowed is True

    def test_protected_call_without_key_denied(self):
        decision = validate_api_key(CONFIG, ["eth_sendUserOperation"], None)

        assert decision.allowed is False
        assert decision.error.code == UNAUTHORIZED_CODE == -32001
        assert decision.error.message == UNAUTHORIZED_MESSAGE

    @pytest.mark.parametrize("key", ["", "wrong", "S3CR3T", "s3cr3t ", " s3cr3t", "s3cr3", "s3cr3tt", "s3cr3té"])
    def test_any_other_key_denied(self, key):
        assert validate_api_key(CONFIG, ["eth_sendUserOperation"], key).allowed is False

    def test_missing_and_wrong_key_indistinguishable(self):
        missing = validate_api_key(CONFIG, ["eth_sendUserOperation"], None)
        wrong = validate_api_key(CONFIG, ["eth_sendUserOperation"], "wrong")

        assert missing == wrong

    def test_mixed_batch_denied_as_a_whole(self):
        decision = validate_api_key(CONFIG, ["eth_chainId", "eth_sendUserOperation"], None)

        assert decision.allowed is False

    def test_unprotected_batch_allowed(self):
        assert validate_api_key(CONFIG, ["eth_chainId", "eth_supportedEntryPoints"], None).allowed is True

    @pytest.mark.parametrize("api_key", [None, ""])
    @pytest.mark.parametrize("provided", [None, "", "anything", "s3cr3t"])
    def test_disabled_gate_always_allows(self, api_key, provided):
        config = ApiKeyAuthConfig(api_key=api_key, protected_methods=("eth_sendUserOperation",))

        assert validate_api_key(config, ["eth_sendUserOperation", "eth_chainId"], provided).allowed is True

    def test_validator_checks_bodies(self):
        validator = ApiKeyValidator(CONFIG)

        assert validator.check_body({"method": "eth_sendUserOperation"}, None).allowed is False
        assert validator.check_body({"method": "eth_sendUserOperation"}, "s3cr3t").allowed is True
        assert validator.check_body(None, None).allowed is True
        assert validator.check_body({"not": "a call"}, None).allowed is True

    def test_raise_for_denial(self):
        validator = ApiKeyValidator(CONFIG)

        validator.check(["eth_chainId"], None).raise_for_denial()
        with pytest.raises(UnauthorizedAccess) as exc_info:
            validator.check(["eth_sendUserOperation"], "wrong").raise_for_denial()

        assert exc_info.value.to_envelope() == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32001, "message": "Unauthorized: Invalid or missing API key"},
        }


class TestCredentials:
    """Tests for key extraction."""

    def test_header_lookup_is_case_insensitive(self):
        from rpc_guard.credentials import key_from_headers

        assert key_from_headers({"X-API-Key": "k"}) == "k"
        assert key_from_headers({"x-api-key": "k"}) == "k"
        assert key_from_headers({"authorization": "k"}) is None

    def test_handshake_prefers_header(self):
        from rpc_guard.credentials import key_from_handshake

        scope = {
            "type": "websocket",
            "headers": [(b"x-api-key", b"from-header")],
            "query_string": b"apiKey=from-query",
        }

        assert key_from_handshake(scope) == "from-header"

    def test_handshake_falls_back_to_query(self):
        from rpc_guard.credentials import key_from_handshake

        scope = {"type": "websocket", "headers": [], "query_string": b"foo=1&apiKey=from-query"}

        assert key_from_handshake(scope) == "from-query"

    def test_handshake_without_credentials(self):
        from rpc_guard.credentials import key_from_handshake

        scope = {"type": "websocket", "headers": [], "query_string": b"api_key=nope"}

        assert key_from_handshake(scope) is None
