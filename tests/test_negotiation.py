"""Tests for provider and authenticator negotiation."""

import uuid

import pytest

from conftest import RecordingTransport
from parsec_client import AuthenticatorType, ConfigError, ExplicitConfig, ProviderID, init_client
from parsec_client.auth import (
    AuthenticatorInfo,
    DirectAuthenticator,
    NoAuthAuthenticator,
    UnixPeerAuthenticator,
)
from parsec_client.core.negotiation import select_default_provider, select_first_match
from parsec_client.core.providers import (
    Capability,
    ProviderInfo,
    coerce_provider_id,
    has_crypto,
    provider_name,
)
from parsec_client.transport.opcodes import Opcode


def _provider(provider_id):
    return ProviderInfo(
        uuid=uuid.uuid4(), description="", vendor="", version_maj=0,
        version_min=0, version_rev=0, id=provider_id,
    )


def _advertised(*ids):
    return [AuthenticatorInfo(id=i) for i in ids]


class TestSelectDefaultProvider:

    def test_first_provider_wins(self):
        providers = [_provider(ProviderID.TPM), _provider(ProviderID.MBED_CRYPTO)]
        assert select_default_provider(providers) == ProviderID.TPM

    def test_empty_list_keeps_core(self):
        assert select_default_provider([]) == ProviderID.CORE

    def test_server_order_is_kept(self):
        providers = [_provider(ProviderID.PKCS11), _provider(ProviderID.PKCS11)]
        assert select_default_provider(providers) == ProviderID.PKCS11


class TestSelectFirstMatch:

    def test_direct_skipped_without_data(self):
        selected = select_first_match(
            _advertised(AuthenticatorType.DIRECT, AuthenticatorType.UNIX_PEER_CREDENTIALS), {},
        )
        assert selected == UnixPeerAuthenticator()

    def test_direct_selected_with_data(self):
        selected = select_first_match(
            _advertised(AuthenticatorType.DIRECT, AuthenticatorType.UNIX_PEER_CREDENTIALS),
            {AuthenticatorType.DIRECT: "myapp"},
        )
        assert selected == DirectAuthenticator("myapp")

    def test_unix_peer_first_stops_scan(self):
        selected = select_first_match(
            _advertised(AuthenticatorType.UNIX_PEER_CREDENTIALS, AuthenticatorType.DIRECT),
            {AuthenticatorType.DIRECT: "myapp"},
        )
        assert selected.kind == AuthenticatorType.UNIX_PEER_CREDENTIALS

    def test_unsupported_kinds_skipped(self):
        selected = select_first_match(
            _advertised(AuthenticatorType.JWT_SVID, AuthenticatorType.TOKENS, 42, AuthenticatorType.DIRECT),
            {AuthenticatorType.DIRECT: "myapp"},
        )
        assert selected.kind == AuthenticatorType.DIRECT

    def test_exhausted_scan_falls_back_to_no_auth(self):
        selected = select_first_match(_advertised(AuthenticatorType.JWT_SVID, AuthenticatorType.DIRECT), {})
        assert selected == NoAuthAuthenticator()

    def test_empty_list_falls_back_to_no_auth(self):
        assert select_first_match([], {AuthenticatorType.DIRECT: "myapp"}) == NoAuthAuthenticator()

    def test_same_inputs_same_result(self):
        advertised = _advertised(AuthenticatorType.TOKENS, AuthenticatorType.DIRECT)
        data = {AuthenticatorType.DIRECT: "myapp"}
        assert select_first_match(advertised, data) == select_first_match(advertised, data)

    def test_wrong_direct_payload_is_config_error(self):
        with pytest.raises(ConfigError):
            select_first_match(_advertised(AuthenticatorType.DIRECT), {AuthenticatorType.DIRECT: 12})


class TestClientNegotiation:

    def test_scenario_a_default_config_selects_unix_peer(self):
        fake = RecordingTransport(
            authenticators=[AuthenticatorType.DIRECT, AuthenticatorType.UNIX_PEER_CREDENTIALS],
        )
        client = init_client(ExplicitConfig(connection=fake))
        assert client.get_authenticator_type() == AuthenticatorType.UNIX_PEER_CREDENTIALS

    def test_scenario_b_app_name_selects_direct(self, make_client):
        client, fake = make_client(
            authenticators=[AuthenticatorType.DIRECT, AuthenticatorType.UNIX_PEER_CREDENTIALS],
            authenticator_data={AuthenticatorType.DIRECT: "myapp"},
        )
        assert client.get_authenticator_type() == AuthenticatorType.DIRECT
        fake.respond(Opcode.PING, lambda _: {"wire_protocol_version_maj": 1, "wire_protocol_version_min": 0})
        client.ping()
        credential = fake.calls_for(Opcode.PING)[0][1]
        assert credential.body == b"myapp"

    def test_scenario_c_no_providers_keeps_core(self, make_client):
        client, fake = make_client(providers=[])
        assert client.get_implicit_provider() == ProviderID.CORE

    def test_implicit_provider_is_first_listed(self, make_client):
        client, _ = make_client(providers=[ProviderID.PKCS11, ProviderID.MBED_CRYPTO])
        assert client.get_implicit_provider() == ProviderID.PKCS11
        assert client.get_implicit_provider() == client.list_providers()[0].id

    def test_provider_negotiation_runs_before_authenticator_negotiation(self, make_client):
        client, fake = make_client(
            authenticators=[AuthenticatorType.UNIX_PEER_CREDENTIALS],
        )
        opcodes = [call[2] for call in fake.calls[:2]]
        assert opcodes == [Opcode.LIST_PROVIDERS, Opcode.LIST_AUTHENTICATORS]

    def test_negotiation_uses_no_auth_and_core(self, make_client):
        client, fake = make_client(
            authenticators=[AuthenticatorType.UNIX_PEER_CREDENTIALS],
        )
        for provider, credential, _, _ in fake.calls[:2]:
            assert provider == ProviderID.CORE
            assert credential.kind == AuthenticatorType.NO_AUTH

    def test_negotiation_is_one_round_trip_each(self, make_client):
        client, fake = make_client()
        assert len(fake.calls_for(Opcode.LIST_PROVIDERS)) == 1
        assert len(fake.calls_for(Opcode.LIST_AUTHENTICATORS)) == 1

    def test_unnamed_provider_id_becomes_implicit_provider(self, make_client):
        client, fake = make_client(providers=[42, ProviderID.MBED_CRYPTO])

        assert client.get_implicit_provider() == 42
        assert [p.id for p in client.list_providers()] == [42, ProviderID.MBED_CRYPTO]

        fake.reset_calls()
        client.psa_destroy_key("k")
        assert fake.calls[0][0] == 42


class TestProviderIds:

    def test_known_id_is_named(self):
        assert coerce_provider_id(3) is ProviderID.TPM

    def test_unnamed_id_kept_as_int(self):
        provider = coerce_provider_id(6)
        assert provider == 6
        assert not isinstance(provider, ProviderID)
        assert provider_name(provider) == "provider#6"

    @pytest.mark.parametrize("value", [-1, "1", 1.0, True, None])
    def test_invalid_ids_rejected(self, value):
        with pytest.raises(ValueError):
            coerce_provider_id(value)

    def test_only_core_lacks_crypto(self):
        assert not has_crypto(ProviderID.CORE)
        assert not has_crypto(0)
        assert has_crypto(ProviderID.PKCS11)
        assert has_crypto(200)

    def test_provider_info_with_unnamed_id(self):
        info = ProviderInfo.from_wire({"uuid": str(uuid.uuid4()), "id": 17})
        assert info.id == 17
        assert info.has_crypto()
        assert info.capabilities == Capability.CRYPTO
