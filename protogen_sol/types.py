"""Mapping of protobuf field types to Solidity types and wire metadata."""

import enum
from typing import Dict, NamedTuple, Optional, Tuple

from protogen_sol import Kind, UnsupportedTypeError


class WireType(enum.IntEnum):
    """Protobuf wire types used by proto3 (groups are not supported)."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    FIXED32 = 5


class SolTypeInfo(NamedTuple):
    # Solidity type, empty for messages: resolved per field from the type name.
    sol_type: str
    wire_type: WireType
    # Runtime library functions, empty for messages: delegated to the codec
    # library of the message.
    encode_func: str
    decode_func: str
    default_value: str
    # Reference types need a data location in declarations.
    is_reference: bool = False


# Solidity has no floating point types: double and float values travel as
# their IEEE-754 bit patterns.
PROTO_TYPE_MAP: Dict[int, SolTypeInfo] = {
    Kind.DOUBLE: SolTypeInfo(
        "uint64", WireType.FIXED64, "_encode_fixed64", "_decode_fixed64", "0"
    ),
    Kind.FLOAT: SolTypeInfo(
        "uint32", WireType.FIXED32, "_encode_fixed32", "_decode_fixed32", "0"
    ),
    Kind.INT64: SolTypeInfo(
        "int64", WireType.VARINT, "_encode_int64", "_decode_int64", "0"
    ),
    Kind.UINT64: SolTypeInfo(
        "uint64", WireType.VARINT, "_encode_varint", "_decode_varint", "0"
    ),
    Kind.INT32: SolTypeInfo(
        "int32", WireType.VARINT, "_encode_int32", "_decode_int32", "0"
    ),
    Kind.FIXED64: SolTypeInfo(
        "uint64", WireType.FIXED64, "_encode_fixed64", "_decode_fixed64", "0"
    ),
    Kind.FIXED32: SolTypeInfo(
        "uint32", WireType.FIXED32, "_encode_fixed32", "_decode_fixed32", "0"
    ),
    Kind.BOOL: SolTypeInfo(
        "bool", WireType.VARINT, "_encode_bool", "_decode_bool", "false"
    ),
    Kind.STRING: SolTypeInfo(
        "string",
        WireType.LENGTH_DELIMITED,
        "_encode_string",
        "_decode_string",
        '""',
        is_reference=True,
    ),
    Kind.MESSAGE: SolTypeInfo(
        "", WireType.LENGTH_DELIMITED, "", "", "", is_reference=True
    ),
    Kind.BYTES: SolTypeInfo(
        "bytes",
        WireType.LENGTH_DELIMITED,
        "_encode_bytes",
        "_decode_bytes",
        '""',
        is_reference=True,
    ),
    Kind.UINT32: SolTypeInfo(
        "uint32", WireType.VARINT, "_encode_uint32", "_decode_uint32", "0"
    ),
    Kind.ENUM: SolTypeInfo(
        "uint64", WireType.VARINT, "_encode_varint", "_decode_varint", "0"
    ),
    Kind.SFIXED32: SolTypeInfo(
        "int32", WireType.FIXED32, "_encode_sfixed32", "_decode_sfixed32", "0"
    ),
    Kind.SFIXED64: SolTypeInfo(
        "int64", WireType.FIXED64, "_encode_sfixed64", "_decode_sfixed64", "0"
    ),
    Kind.SINT32: SolTypeInfo(
        "int32", WireType.VARINT, "_encode_zigzag32", "_decode_zigzag32", "0"
    ),
    Kind.SINT64: SolTypeInfo(
        "int64", WireType.VARINT, "_encode_zigzag64", "_decode_zigzag64", "0"
    ),
}


def type_info(code: int, ref: str = "") -> SolTypeInfo:
    """Look up the Solidity mapping of a proto field type code.

    Arguments
    ---------
    code : int
        A ``FieldDescriptorProto.Type`` value.
    ref : str, optional
        Full name of the field the lookup is made for, used in the error.

    Raises
    ------
    UnsupportedTypeError
        If the code has no mapping: TYPE_GROUP and codes outside 1..18.
    """
    info = PROTO_TYPE_MAP.get(code)
    if info is None:
        raise UnsupportedTypeError(code, ref)
    return info


def resolve_sol_type(code: int, type_name: Optional[str] = None) -> str:
    """Resolve the Solidity type of a field type.

    For messages the type is the last segment of the referenced type name.
    Package and parent message qualification is dropped since every struct is
    declared at file scope.

    >>> resolve_sol_type(Kind.MESSAGE, ".acme.library.v1.Book.Author")
    'Author'
    """
    if code == Kind.MESSAGE and type_name:
        return type_name.lstrip(".").split(".")[-1]
    return type_info(code).sol_type


def data_location(info: SolTypeInfo) -> str:
    """Return the data location suffix to declare a local of the type."""
    return " memory" if info.is_reference else ""


def field_tag(field_number: int, wire_type: WireType) -> int:
    """Build a protobuf field tag (field_number << 3 | wire_type)."""
    return (field_number << 3) | wire_type


def split_tag(tag: int) -> Tuple[int, WireType]:
    """Split a field tag into its field number and wire type."""
    return tag >> 3, WireType(tag & 0x7)
