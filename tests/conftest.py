"""Shared fixtures: a scripted transport double and client factories."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

from parsec_client import ExplicitConfig, init_client
from parsec_client.auth.authenticators import AuthCredential, AuthenticatorType
from parsec_client.core.providers import ProviderID
from parsec_client.transport.opcodes import Opcode


Responder = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def provider_entry(provider_id: int, description: str = "") -> Dict[str, Any]:
    name = provider_id.name if isinstance(provider_id, ProviderID) else f"provider-{provider_id}"
    return {
        "uuid": str(uuid.uuid5(uuid.NAMESPACE_OID, name)),
        "description": description or f"{name} provider",
        "vendor": "Arm",
        "version_maj": 0,
        "version_min": 1,
        "version_rev": 0,
        "id": int(provider_id),
    }


def authenticator_entry(auth_id: int, description: str = "") -> Dict[str, Any]:
    return {"id": auth_id, "description": description, "version_maj": 0, "version_min": 1, "version_rev": 0}


class RecordingTransport:
    """
    Transport double answering from a table of responders and recording
    every call it receives.
    """

    def __init__(
        self,
        providers: Optional[List[int]] = None,
        authenticators: Optional[List[int]] = None,
    ) -> None:
        self.calls: List[Tuple[ProviderID, AuthCredential, Opcode, Dict[str, Any]]] = []
        self.close_count = 0
        provider_list = [ProviderID.MBED_CRYPTO] if providers is None else providers
        auth_list = [AuthenticatorType.DIRECT] if authenticators is None else authenticators
        self.responders: Dict[Opcode, Responder] = {
            Opcode.LIST_PROVIDERS: lambda _: {
                "providers": [provider_entry(p) for p in provider_list],
            },
            Opcode.LIST_AUTHENTICATORS: lambda _: {
                "authenticators": [authenticator_entry(int(a)) for a in auth_list],
            },
        }

    def respond(self, opcode: Opcode, responder: Responder) -> None:
        self.responders[opcode] = responder

    def call(
        self,
        provider: ProviderID,
        credential: AuthCredential,
        opcode: Opcode,
        payload: Mapping[str, Any],
    ) -> Mapping[str, Any]:
        self.calls.append((provider, credential, opcode, dict(payload)))
        responder = self.responders.get(opcode)
        if responder is None:
            return {}
        return responder(payload)

    def close(self) -> None:
        self.close_count += 1

    def calls_for(self, opcode: Opcode) -> List[Tuple[ProviderID, AuthCredential, Opcode, Dict[str, Any]]]:
        return [call for call in self.calls if call[2] == opcode]

    def reset_calls(self) -> None:
        self.calls.clear()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client():
    """Build a client over a RecordingTransport; returns (client, transport)."""
    created = []

    def _make(
        providers: Optional[List[int]] = None,
        authenticators: Optional[List[int]] = None,
        authenticator_data: Optional[Mapping[AuthenticatorType, Any]] = None,
        **config_kwargs: Any,
    ):
        fake = RecordingTransport(providers=providers, authenticators=authenticators)
        client = init_client(ExplicitConfig(
            connection=fake,
            authenticator_data=dict(authenticator_data or {}),
            **config_kwargs,
        ))
        created.append(client)
        return client, fake

    yield _make

    for client in created:
        if not client.closed:
            client.close()


@pytest.fixture
def client(make_client):
    """Client with MbedCrypto as implicit provider and Direct auth as 'test-app'."""
    client, fake = make_client(authenticator_data={AuthenticatorType.DIRECT: "test-app"})
    fake.reset_calls()
    return client, fake
