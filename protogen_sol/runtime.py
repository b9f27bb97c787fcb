"""The fixed Solidity runtime library the generated codecs call into.

The library provides the primitive wire-format operations: varint, fixed,
zigzag and length-delimited encoding and decoding, byte slicing and skipping of
unknown fields. It is hand-written and shipped as package data; the generator
only emits calls to it.
"""

import importlib.resources

from protogen_sol import SolIdent

RUNTIME_FILENAME = "ProtobufRuntime.sol"

RUNTIME = SolIdent(RUNTIME_FILENAME, "ProtobufRuntime")


def runtime_source() -> str:
    """Return the complete ProtobufRuntime.sol source."""
    return (
        importlib.resources.files("protogen_sol")
        .joinpath("sol", RUNTIME_FILENAME)
        .read_text(encoding="utf-8")
    )
