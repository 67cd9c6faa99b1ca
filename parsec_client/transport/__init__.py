"""
Transport module - opcodes, statuses and the transport collaborator interface.
"""

from parsec_client.transport.opcodes import Opcode, ResponseStatus

__all__ = ["Opcode", "ResponseStatus"]
