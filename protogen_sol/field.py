"""Per-field Solidity code generation.

For one field three fragments are emitted, each into a :class:`GeneratedFile`
at the current indentation:

* the struct member declaration (:func:`gen_struct_member`),
* the statements appending the encoded field to ``buf`` inside the encode
  function of the codec library (:func:`gen_field_encode`),
* the tag-dispatch case inside the decode loop of the codec library
  (:func:`gen_field_decode`).

Repeated and map fields additionally need append helpers in the codec library
(:func:`gen_field_helpers`) since Solidity memory arrays can not grow.

The generated encode function has the message in ``m`` and accumulates into
``buf``. The decode function reads from ``data`` at position ``pos``, with the
current field tag in ``tag``, and decodes into ``m``.

Repeated fields use the unpacked encoding: one (tag, value) pair per element.
Map fields are flattened into two parallel arrays, ``<name>_keys`` and
``<name>_values``; each index is encoded as a length-delimited map entry with
the key as field 1 and the value as field 2.
"""

import enum
from typing import List, Optional, Union

from protogen_sol import (
    Cardinality,
    Field,
    GeneratedFile,
    Kind,
    Message,
    SolIdent,
    UnsupportedTypeError,
)
from protogen_sol.runtime import RUNTIME
from protogen_sol.types import (
    PROTO_TYPE_MAP,
    SolTypeInfo,
    WireType,
    data_location,
    field_tag,
    resolve_sol_type,
    type_info,
)


class FieldShape(enum.Enum):
    """The code generation rule that applies to a field."""

    UNSUPPORTED = 0
    SCALAR = 1
    MESSAGE = 2
    REPEATED_SCALAR = 3
    REPEATED_MESSAGE = 4
    MAP = 5


def unsupported_error(field: Field) -> Optional[UnsupportedTypeError]:
    """Return the error describing why the field can not be generated, if any."""
    if field.map_entry is not None:
        codes = [field.map_entry.key_type, field.map_entry.value_type]
    else:
        codes = [field.type]
    for code in codes:
        if code not in PROTO_TYPE_MAP:
            return UnsupportedTypeError(code, field.full_name)
    return None


def field_shape(field: Field) -> FieldShape:
    if unsupported_error(field) is not None:
        return FieldShape.UNSUPPORTED
    if field.map_entry is not None:
        return FieldShape.MAP
    repeated = field.cardinality == Cardinality.REPEATED
    if field.kind == Kind.MESSAGE:
        return FieldShape.REPEATED_MESSAGE if repeated else FieldShape.MESSAGE
    return FieldShape.REPEATED_SCALAR if repeated else FieldShape.SCALAR


def _sol_type(code: int, message: Optional[Message]) -> Union[str, SolIdent]:
    if code == Kind.MESSAGE:
        # Structs are declared at file scope under their local name.
        return SolIdent(
            message.sol_ident.sol_filename,
            resolve_sol_type(code, message.full_name),
        )
    return resolve_sol_type(code)


def _hex(tag: int) -> str:
    return f"0x{tag:x}"


def _gen_unsupported(g: GeneratedFile, field: Field):
    g.P("// ", unsupported_error(field))


def gen_struct_member(g: GeneratedFile, field: Field):
    """Emit the struct member declaration(s) of a field."""
    shape = field_shape(field)
    if shape == FieldShape.UNSUPPORTED:
        _gen_unsupported(g, field)
        return

    if shape == FieldShape.MAP:
        entry = field.map_entry
        g.P(_sol_type(entry.key_type, None), "[] ", field.sol_name, "_keys;")
        g.P(
            _sol_type(entry.value_type, entry.value_message),
            "[] ",
            field.sol_name,
            "_values;",
        )
        return

    sol_type = _sol_type(field.type, field.message)
    if shape in (FieldShape.REPEATED_SCALAR, FieldShape.REPEATED_MESSAGE):
        g.P(sol_type, "[] ", field.sol_name, ";")
    else:
        g.P(sol_type, " ", field.sol_name, ";")


def _gen_scalar_encode(
    g: GeneratedFile, buf: str, tag: int, info: SolTypeInfo, value: str
):
    g.P(
        buf,
        " = abi.encodePacked(",
        buf,
        ", ",
        RUNTIME,
        "._encode_key(",
        _hex(tag),
        "), ",
        RUNTIME,
        ".",
        info.encode_func,
        "(",
        value,
        "));",
    )


def _gen_message_encode(
    g: GeneratedFile, buf: str, tag: int, message: Message, value: str
):
    g.P("bytes memory _sub = ", message.codec_ident, ".encode(", value, ");")
    g.P(
        buf,
        " = abi.encodePacked(",
        buf,
        ", ",
        RUNTIME,
        "._encode_key(",
        _hex(tag),
        "), ",
        RUNTIME,
        "._encode_varint(uint64(_sub.length)), _sub);",
    )


def _gen_map_encode(g: GeneratedFile, field: Field):
    entry = field.map_entry
    key_info = type_info(entry.key_type)
    value_info = type_info(entry.value_type)
    keys = f"m.{field.sol_name}_keys"
    values = f"m.{field.sol_name}_values"

    g.P("for (uint256 i = 0; i < ", keys, ".length; i++) {")
    with g.indent():
        g.P('bytes memory _entry = "";')
        _gen_scalar_encode(
            g, "_entry", field_tag(1, key_info.wire_type), key_info, f"{keys}[i]"
        )
        value_tag = field_tag(2, value_info.wire_type)
        if entry.value_type == Kind.MESSAGE:
            _gen_message_encode(
                g, "_entry", value_tag, entry.value_message, f"{values}[i]"
            )
        else:
            _gen_scalar_encode(g, "_entry", value_tag, value_info, f"{values}[i]")
        g.P(
            "buf = abi.encodePacked(buf, ",
            RUNTIME,
            "._encode_key(",
            _hex(field_tag(field.number, WireType.LENGTH_DELIMITED)),
            "), ",
            RUNTIME,
            "._encode_varint(uint64(_entry.length)), _entry);",
        )
    g.P("}")


def gen_field_encode(g: GeneratedFile, field: Field):
    """Emit the statements appending the encoded field to ``buf``."""
    shape = field_shape(field)
    if shape == FieldShape.UNSUPPORTED:
        _gen_unsupported(g, field)
        return
    if shape == FieldShape.MAP:
        _gen_map_encode(g, field)
        return

    info = type_info(field.type)
    tag = field_tag(field.number, info.wire_type)
    value = f"m.{field.sol_name}"

    if shape == FieldShape.SCALAR:
        _gen_scalar_encode(g, "buf", tag, info, value)
    elif shape == FieldShape.MESSAGE:
        g.P("{")
        with g.indent():
            _gen_message_encode(g, "buf", tag, field.message, value)
        g.P("}")
    else:
        g.P("for (uint256 i = 0; i < ", value, ".length; i++) {")
        with g.indent():
            if shape == FieldShape.REPEATED_MESSAGE:
                _gen_message_encode(g, "buf", tag, field.message, f"{value}[i]")
            else:
                _gen_scalar_encode(g, "buf", tag, info, f"{value}[i]")
        g.P("}")


def _gen_sub_slice(g: GeneratedFile):
    """Emit the statements reading a length-delimited sub-buffer into ``_sub``."""
    g.P("uint64 _len;")
    g.P("(_len, pos) = ", RUNTIME, "._decode_varint(data, pos);")
    g.P(
        "bytes memory _sub = ",
        RUNTIME,
        "._slice(data, pos, pos + uint256(_len));",
    )
    g.P("pos += uint256(_len);")


def _gen_local(
    g: GeneratedFile, code: int, message: Optional[Message], name: str
):
    """Emit the declaration of a zero-initialized local."""
    info = type_info(code)
    sol_type = _sol_type(code, message)
    if info.default_value:
        g.P(sol_type, data_location(info), " ", name, " = ", info.default_value, ";")
    else:
        g.P(sol_type, data_location(info), " ", name, ";")


def _gen_map_decode(g: GeneratedFile, field: Field):
    entry = field.map_entry
    key_info = type_info(entry.key_type)
    value_info = type_info(entry.value_type)
    keys = f"m.{field.sol_name}_keys"
    values = f"m.{field.sol_name}_values"

    g.P("uint64 _entryLen;")
    g.P("(_entryLen, pos) = ", RUNTIME, "._decode_varint(data, pos);")
    g.P("uint256 _entryEnd = pos + uint256(_entryLen);")
    _gen_local(g, entry.key_type, None, "_key")
    _gen_local(g, entry.value_type, entry.value_message, "_val")
    g.P("while (pos < _entryEnd) {")
    with g.indent():
        g.P("uint64 _entryTag;")
        g.P("(_entryTag, pos) = ", RUNTIME, "._decode_key(data, pos);")
        g.P("if (_entryTag == ", field_tag(1, key_info.wire_type), ") {")
        with g.indent():
            g.P("(_key, pos) = ", RUNTIME, ".", key_info.decode_func, "(data, pos);")
        g.P("} else if (_entryTag == ", field_tag(2, value_info.wire_type), ") {")
        with g.indent():
            if entry.value_type == Kind.MESSAGE:
                _gen_sub_slice(g)
                g.P("_val = ", entry.value_message.codec_ident, ".decode(_sub);")
            else:
                g.P(
                    "(_val, pos) = ",
                    RUNTIME,
                    ".",
                    value_info.decode_func,
                    "(data, pos);",
                )
        g.P("} else {")
        with g.indent():
            g.P('revert("unknown map entry tag");')
        g.P("}")
    g.P("}")
    g.P('require(pos == _entryEnd, "map entry length mismatch");')
    g.P(keys, " = _append_", field.sol_name, "_keys(", keys, ", _key);")
    g.P(values, " = _append_", field.sol_name, "_values(", values, ", _val);")


def gen_field_decode(g: GeneratedFile, field: Field):
    """Emit the decode case of a field.

    The case matches the exact field tag. A repeated or map field appends on
    every occurrence of its tag.
    """
    shape = field_shape(field)
    if shape == FieldShape.UNSUPPORTED:
        _gen_unsupported(g, field)
        return

    if shape == FieldShape.MAP:
        wire_type = WireType.LENGTH_DELIMITED
    else:
        wire_type = type_info(field.type).wire_type
    value = f"m.{field.sol_name}"

    g.P("if (tag == ", field_tag(field.number, wire_type), ") {")
    with g.indent():
        if shape == FieldShape.SCALAR:
            info = type_info(field.type)
            g.P("(", value, ", pos) = ", RUNTIME, ".", info.decode_func, "(data, pos);")
        elif shape == FieldShape.MESSAGE:
            _gen_sub_slice(g)
            g.P(value, " = ", field.message.codec_ident, ".decode(_sub);")
        elif shape == FieldShape.REPEATED_MESSAGE:
            _gen_sub_slice(g)
            g.P(
                value,
                " = _append_",
                field.sol_name,
                "(",
                value,
                ", ",
                field.message.codec_ident,
                ".decode(_sub));",
            )
        elif shape == FieldShape.REPEATED_SCALAR:
            info = type_info(field.type)
            g.P(info.sol_type, data_location(info), " _elem;")
            g.P("(_elem, pos) = ", RUNTIME, ".", info.decode_func, "(data, pos);")
            g.P(value, " = _append_", field.sol_name, "(", value, ", _elem);")
        else:
            _gen_map_decode(g, field)
        g.P("continue;")
    g.P("}")


def _gen_append(
    g: GeneratedFile, helper: str, sol_type: Union[str, SolIdent], is_reference: bool
):
    location = " memory" if is_reference else ""
    g.P(
        "function ",
        helper,
        "(",
        sol_type,
        "[] memory arr, ",
        sol_type,
        location,
        " v) private pure returns (",
        sol_type,
        "[] memory out) {",
    )
    with g.indent():
        g.P("out = new ", sol_type, "[](arr.length + 1);")
        g.P("for (uint256 i = 0; i < arr.length; i++) {")
        with g.indent():
            g.P("out[i] = arr[i];")
        g.P("}")
        g.P("out[arr.length] = v;")
    g.P("}")


def field_helpers(field: Field) -> List[str]:
    """Return the names of the append helpers a field needs."""
    shape = field_shape(field)
    if shape in (FieldShape.REPEATED_SCALAR, FieldShape.REPEATED_MESSAGE):
        return [f"_append_{field.sol_name}"]
    if shape == FieldShape.MAP:
        return [f"_append_{field.sol_name}_keys", f"_append_{field.sol_name}_values"]
    return []


def gen_field_helpers(g: GeneratedFile, field: Field):
    """Emit the private append helpers of a repeated or map field.

    Helpers are separated by a blank line. Nothing is emitted for other
    fields.
    """
    shape = field_shape(field)
    helpers = field_helpers(field)
    if shape == FieldShape.MAP:
        entry = field.map_entry
        _gen_append(
            g,
            helpers[0],
            _sol_type(entry.key_type, None),
            type_info(entry.key_type).is_reference,
        )
        g.P()
        _gen_append(
            g,
            helpers[1],
            _sol_type(entry.value_type, entry.value_message),
            type_info(entry.value_type).is_reference,
        )
    elif helpers:
        _gen_append(
            g,
            helpers[0],
            _sol_type(field.type, field.message),
            type_info(field.type).is_reference,
        )
