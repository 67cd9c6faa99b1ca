"""Tests for client construction, discovery operations and close()."""

import pytest

from conftest import RecordingTransport, provider_entry
from parsec_client import (
    AuthenticatorType,
    BasicClient,
    ConfigError,
    ConnectionClosedError,
    ExplicitConfig,
    ProviderError,
    ProviderID,
    ResponseDecodingError,
    ServiceConnectionError,
    TransportError,
    init_client,
    register_transport,
)
from parsec_client.algorithm import HashAlgorithm, KeyTypeKind
from parsec_client.core.config import ENDPOINT_ENV_VAR
from parsec_client.transport.base import unregister_transport
from parsec_client.transport.opcodes import Opcode


@pytest.fixture
def fake_scheme():
    opened = []

    def factory(target):
        fake = RecordingTransport(authenticators=[AuthenticatorType.UNIX_PEER_CREDENTIALS])
        fake.target = target
        opened.append(fake)
        return fake

    register_transport("fake", factory)
    yield opened
    unregister_transport("fake")


class TestConstruction:

    def test_default_config_uses_default_endpoint(self, monkeypatch, fake_scheme):
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "fake:/run/test.sock")
        client = init_client()
        assert fake_scheme[0].target == "fake:/run/test.sock"
        assert client.get_authenticator_type() == AuthenticatorType.UNIX_PEER_CREDENTIALS
        client.close()

    def test_app_name_config_uses_default_endpoint(self, monkeypatch, fake_scheme):
        monkeypatch.setenv(ENDPOINT_ENV_VAR, "fake:/run/test.sock")
        with init_client("myapp") as client:
            assert isinstance(client, BasicClient)
        assert fake_scheme[0].close_count == 1

    def test_explicit_endpoint(self, fake_scheme):
        client = init_client(ExplicitConfig(connection="fake:/elsewhere"))
        assert fake_scheme[0].target == "fake:/elsewhere"
        client.close()

    def test_unknown_scheme_is_connection_error(self):
        with pytest.raises(ServiceConnectionError):
            init_client(ExplicitConfig(connection="nosuchscheme:/x"))

    def test_factory_os_error_is_connection_error(self):
        def refuse(target):
            raise ConnectionRefusedError(111, "refused")

        register_transport("refuse", refuse)
        try:
            with pytest.raises(ServiceConnectionError):
                init_client(ExplicitConfig(connection="refuse:/x"))
        finally:
            unregister_transport("refuse")

    def test_factory_failure_of_any_kind_is_connection_error(self):
        def handshake_fails(target):
            raise RuntimeError("codec handshake rejected")

        register_transport("handshake", handshake_fails)
        try:
            with pytest.raises(ServiceConnectionError) as excinfo:
                init_client(ExplicitConfig(connection="handshake:/x"))
        finally:
            unregister_transport("handshake")
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_bad_config_shape(self):
        with pytest.raises(ConfigError):
            init_client(12345)

    def test_negotiation_failure_closes_transport(self):
        fake = RecordingTransport()

        def fail(_):
            raise TransportError("broken pipe")

        fake.respond(Opcode.LIST_PROVIDERS, fail)

        with pytest.raises(TransportError):
            init_client(ExplicitConfig(connection=fake))
        assert fake.close_count == 1

    def test_negotiation_error_survives_failing_close(self):
        class BrokenClose(RecordingTransport):
            def close(self):
                super().close()
                raise OSError("already reset")

        fake = BrokenClose()
        error = TransportError("broken pipe")

        def fail(_):
            raise error

        fake.respond(Opcode.LIST_AUTHENTICATORS, fail)

        with pytest.raises(TransportError) as excinfo:
            init_client(ExplicitConfig(connection=fake))
        assert excinfo.value is error
        assert fake.close_count == 1

    def test_unnamed_provider_in_list_does_not_fail_construction(self):
        fake = RecordingTransport(providers=[6])
        client = init_client(ExplicitConfig(connection=fake))
        assert client.get_implicit_provider() == 6
        assert "provider#6" in repr(client)
        client.close()

    def test_malformed_provider_list_is_provider_error(self):
        fake = RecordingTransport()
        fake.respond(Opcode.LIST_PROVIDERS, lambda _: {"providers": [{"description": "no id"}]})
        with pytest.raises(ProviderError):
            init_client(ExplicitConfig(connection=fake))


class TestDiscovery:

    def test_ping(self, client):
        client, fake = client
        fake.respond(Opcode.PING, lambda _: {"wire_protocol_version_maj": 1, "wire_protocol_version_min": 0})
        assert client.ping() == (1, 0)

    def test_discovery_pinned_to_core(self, client):
        client, fake = client
        fake.respond(Opcode.LIST_OPCODES, lambda _: {"opcodes": [1, 8]})
        fake.respond(Opcode.LIST_KEYS, lambda _: {"keys": []})
        fake.respond(Opcode.LIST_CLIENTS, lambda _: {"clients": []})
        client.set_implicit_provider(ProviderID.TPM)

        client.list_providers()
        client.list_authenticators()
        client.list_opcodes(ProviderID.TPM)
        client.list_keys()
        client.list_clients()
        client.delete_client("old-app")

        assert len(fake.calls) == 6
        assert all(call[0] == ProviderID.CORE for call in fake.calls)
        assert all(call[1].kind == AuthenticatorType.DIRECT for call in fake.calls)

    def test_list_providers_keeps_server_order(self, client):
        client, fake = client
        order = [ProviderID.TPM, ProviderID.MBED_CRYPTO, ProviderID.TPM]
        fake.respond(Opcode.LIST_PROVIDERS, lambda _: {"providers": [provider_entry(p) for p in order]})

        providers = client.list_providers()

        assert [p.id for p in providers] == order
        assert all(p.has_crypto() for p in providers)

    def test_discovery_is_repeatable(self, client):
        client, _ = client
        assert client.list_providers() == client.list_providers()
        assert client.list_authenticators() == client.list_authenticators()

    def test_list_opcodes(self, client):
        client, fake = client
        fake.respond(Opcode.LIST_OPCODES, lambda payload: {"opcodes": [2, 3, 3, payload["provider_id"]]})

        opcodes = client.list_opcodes(ProviderID.PKCS11)

        assert opcodes == frozenset({2, 3, int(ProviderID.PKCS11)})
        assert fake.calls[0][3] == {"provider_id": int(ProviderID.PKCS11)}

    def test_list_keys(self, client):
        client, fake = client
        fake.respond(Opcode.LIST_KEYS, lambda _: {"keys": [{
            "name": "signing",
            "provider_id": 1,
            "attributes": {
                "key_type": {"kind": "ecc_key_pair", "curve_family": 2},
                "key_bits": 256,
                "key_policy": {
                    "key_usage_flags": {"sign_hash": True},
                    "key_algorithm": {"family": "asymmetric_signature", "kind": "ecdsa", "hash": 7},
                },
            },
        }]})

        keys = client.list_keys()

        assert len(keys) == 1
        key = keys[0]
        assert key.name == "signing"
        assert key.provider_id == ProviderID.MBED_CRYPTO
        assert key.attributes.key_type.kind == KeyTypeKind.ECC_KEY_PAIR
        assert key.attributes.policy.usage_flags.sign_hash
        assert key.attributes.policy.permitted_algorithm.hash_alg == HashAlgorithm.SHA_256

    def test_list_keys_rejects_bad_entry(self, client):
        client, fake = client
        fake.respond(Opcode.LIST_KEYS, lambda _: {"keys": [{"name": "k", "provider_id": 1}]})
        with pytest.raises(ResponseDecodingError):
            client.list_keys()

    def test_list_clients(self, client):
        client, fake = client
        fake.respond(Opcode.LIST_CLIENTS, lambda _: {"clients": ["jim", "bob"]})
        assert client.list_clients() == ["jim", "bob"]

    def test_list_clients_failure_propagates(self, client):
        from parsec_client import ResponseStatus

        client, fake = client

        def fail(_):
            raise ProviderError(ResponseStatus.ADMIN_OPERATION)

        fake.respond(Opcode.LIST_CLIENTS, fail)
        with pytest.raises(ProviderError) as excinfo:
            client.list_clients()
        assert excinfo.value.status == ResponseStatus.ADMIN_OPERATION

    def test_delete_client_payload(self, client):
        client, fake = client
        client.delete_client("jim")
        assert fake.calls[0][2] == Opcode.DELETE_CLIENT
        assert fake.calls[0][3] == {"client": "jim"}


class TestClose:

    def test_close_releases_transport_once(self, make_client):
        client, fake = make_client()
        client.close()
        assert fake.close_count == 1
        assert client.closed

    def test_second_close_raises(self, make_client):
        client, fake = make_client()
        client.close()
        with pytest.raises(ConnectionClosedError):
            client.close()
        assert fake.close_count == 1

    def test_operations_after_close_raise(self, make_client):
        client, fake = make_client()
        client.close()
        fake.reset_calls()

        with pytest.raises(ConnectionClosedError):
            client.ping()
        with pytest.raises(ConnectionClosedError):
            client.psa_generate_random(4)
        assert fake.calls == []

    def test_context_manager_closes(self, make_client):
        client, fake = make_client()
        with client:
            pass
        assert fake.close_count == 1

    def test_repr_has_no_credentials(self, client):
        client, _ = client
        assert "test-app" not in repr(client)
