"""Assembly of the struct and codec library of a message."""

from typing import List, Union

from protogen_sol import Diagnostics, File, GeneratedFile, Message
from protogen_sol.field import (
    field_helpers,
    gen_field_decode,
    gen_field_encode,
    gen_field_helpers,
    gen_struct_member,
    unsupported_error,
)
from protogen_sol.runtime import RUNTIME


def collect_messages(fm: Union[File, Message]) -> List[Message]:
    """Return every message of a file or message that gets a codec.

    Messages are listed in pre-order: each message comes before its nested
    messages. Map entries are left out.
    """
    messages = []
    for m in fm.messages:
        if m.is_map_entry:
            continue
        messages.append(m)
        messages.extend(collect_messages(m))
    return messages


def _gen_struct(g: GeneratedFile, message: Message, diagnostics: Diagnostics):
    g.P("struct ", message.sol_ident, " {")
    with g.indent():
        members = 0
        for field in message.fields:
            err = unsupported_error(field)
            if err is not None:
                diagnostics.report(err)
            else:
                members += 1
            gen_struct_member(g, field)
        if members == 0:
            # Solidity rejects empty structs. Never encoded.
            g.P("bool _placeholder;")
    g.P("}")


def _gen_encode(g: GeneratedFile, message: Message):
    g.P(
        "function encode(",
        message.sol_ident,
        " memory m) internal pure returns (bytes memory buf) {",
    )
    with g.indent():
        for field in message.fields:
            gen_field_encode(g, field)
    g.P("}")


def _gen_decode(g: GeneratedFile, message: Message):
    g.P(
        "function decode(bytes memory data) internal pure returns (",
        message.sol_ident,
        " memory m) {",
    )
    with g.indent():
        g.P("uint256 pos = 0;")
        g.P("while (pos < data.length) {")
        with g.indent():
            g.P("uint64 tag;")
            g.P("(tag, pos) = ", RUNTIME, "._decode_key(data, pos);")
            for field in message.fields:
                gen_field_decode(g, field)
            # Unknown field.
            g.P("pos = ", RUNTIME, "._skip_field(data, pos, tag & 7);")
        g.P("}")
    g.P("}")


def _gen_codec(g: GeneratedFile, message: Message):
    g.P("library ", message.codec_ident, " {")
    with g.indent():
        _gen_encode(g, message)
        g.P()
        _gen_decode(g, message)
        for field in message.fields:
            if field_helpers(field):
                g.P()
                gen_field_helpers(g, field)
    g.P("}")


def generate_message(g: GeneratedFile, message: Message, diagnostics: Diagnostics):
    """Emit the struct and codec library of a message and its nested messages.

    Arguments
    ---------
    g : GeneratedFile
        The file to emit to.
    message : Message
        The message to assemble. Nothing is emitted for map entries.
    diagnostics : Diagnostics
        Sink for fields whose type has no Solidity mapping. Such fields are
        emitted as comments and the rest of the message is generated as usual.
    """
    if message.is_map_entry:
        return

    _gen_struct(g, message, diagnostics)
    g.P()
    _gen_codec(g, message)
    for nested in message.messages:
        if nested.is_map_entry:
            continue
        g.P()
        generate_message(g, nested, diagnostics)
