"""
Operation codes and response statuses understood by the service.

These numbers are part of the wire contract and must not be changed.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union


class Opcode(IntEnum):
    """Operation identifiers."""
    PING = 0x0001
    PSA_GENERATE_KEY = 0x0002
    PSA_DESTROY_KEY = 0x0003
    PSA_SIGN_HASH = 0x0004
    PSA_VERIFY_HASH = 0x0005
    PSA_IMPORT_KEY = 0x0006
    PSA_EXPORT_PUBLIC_KEY = 0x0007
    LIST_PROVIDERS = 0x0008
    LIST_OPCODES = 0x0009
    PSA_ASYMMETRIC_ENCRYPT = 0x000A
    PSA_ASYMMETRIC_DECRYPT = 0x000B
    PSA_EXPORT_KEY = 0x000C
    PSA_GENERATE_RANDOM = 0x000D
    LIST_AUTHENTICATORS = 0x000E
    PSA_HASH_COMPUTE = 0x000F
    PSA_HASH_COMPARE = 0x0010
    PSA_AEAD_ENCRYPT = 0x0011
    PSA_AEAD_DECRYPT = 0x0012
    PSA_RAW_KEY_AGREEMENT = 0x0013
    PSA_CIPHER_ENCRYPT = 0x0014
    PSA_CIPHER_DECRYPT = 0x0015
    PSA_MAC_COMPUTE = 0x0016
    PSA_MAC_VERIFY = 0x0017
    PSA_SIGN_MESSAGE = 0x0018
    PSA_VERIFY_MESSAGE = 0x0019
    LIST_KEYS = 0x001A
    LIST_CLIENTS = 0x001B
    DELETE_CLIENT = 0x001C

    def is_core(self) -> bool:
        """Check if this operation is handled by the core provider."""
        return self in _CORE_OPCODES

    def is_admin(self) -> bool:
        """Check if this operation is restricted to admin applications."""
        return self in (Opcode.LIST_CLIENTS, Opcode.DELETE_CLIENT)


_CORE_OPCODES = frozenset({
    Opcode.PING,
    Opcode.LIST_PROVIDERS,
    Opcode.LIST_OPCODES,
    Opcode.LIST_AUTHENTICATORS,
    Opcode.LIST_KEYS,
    Opcode.LIST_CLIENTS,
    Opcode.DELETE_CLIENT,
})


class ResponseStatus(IntEnum):
    """Status codes reported by the service in a response header."""
    SUCCESS = 0
    WRONG_PROVIDER_ID = 1
    CONTENT_TYPE_NOT_SUPPORTED = 2
    ACCEPT_TYPE_NOT_SUPPORTED = 3
    WIRE_PROTOCOL_VERSION_NOT_SUPPORTED = 4
    PROVIDER_NOT_REGISTERED = 5
    PROVIDER_DOES_NOT_EXIST = 6
    DESERIALIZING_BODY_FAILED = 7
    SERIALIZING_BODY_FAILED = 8
    OPCODE_DOES_NOT_EXIST = 9
    RESPONSE_TOO_LARGE = 10
    AUTHENTICATION_ERROR = 11
    AUTHENTICATOR_DOES_NOT_EXIST = 12
    AUTHENTICATOR_NOT_REGISTERED = 13
    KEY_INFO_MANAGER_ERROR = 14
    CONNECTION_ERROR = 15
    INVALID_ENCODING = 16
    INVALID_HEADER = 17
    WRONG_PROVIDER_UUID = 18
    NOT_AUTHENTICATED = 19
    BODY_SIZE_EXCEEDS_LIMIT = 20
    ADMIN_OPERATION = 21
    DEPRECATED_PRIMITIVE = 22

    # PSA Crypto API errors
    PSA_ERROR_GENERIC_ERROR = 1132
    PSA_ERROR_NOT_PERMITTED = 1133
    PSA_ERROR_NOT_SUPPORTED = 1134
    PSA_ERROR_INVALID_ARGUMENT = 1135
    PSA_ERROR_INVALID_HANDLE = 1136
    PSA_ERROR_BAD_STATE = 1137
    PSA_ERROR_BUFFER_TOO_SMALL = 1138
    PSA_ERROR_ALREADY_EXISTS = 1139
    PSA_ERROR_DOES_NOT_EXIST = 1140
    PSA_ERROR_INSUFFICIENT_MEMORY = 1141
    PSA_ERROR_INSUFFICIENT_STORAGE = 1142
    PSA_ERROR_INSUFFICIENT_DATA = 1143
    PSA_ERROR_COMMUNICATION_FAILURE = 1145
    PSA_ERROR_STORAGE_FAILURE = 1146
    PSA_ERROR_HARDWARE_FAILURE = 1147
    PSA_ERROR_INSUFFICIENT_ENTROPY = 1148
    PSA_ERROR_INVALID_SIGNATURE = 1149
    PSA_ERROR_INVALID_PADDING = 1150
    PSA_ERROR_CORRUPTION_DETECTED = 1151
    PSA_ERROR_DATA_CORRUPT = 1152

    @classmethod
    def from_code(cls, code: int) -> Union["ResponseStatus", int]:
        """Map a raw status code to a ResponseStatus, keeping unknown codes as int."""
        try:
            return cls(code)
        except ValueError:
            return code
