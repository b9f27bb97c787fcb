import pytest
from google.protobuf import descriptor_pb2

import protogen_sol
from protogen_sol.field import (
    FieldShape,
    field_helpers,
    field_shape,
    gen_field_decode,
    gen_field_encode,
    gen_field_helpers,
    gen_struct_member,
    unsupported_error,
)
from protogen_sol.test import resolve

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


@pytest.fixture
def user(user_profile_proto):
    (file,) = resolve([user_profile_proto])
    return file.messages[0]


@pytest.fixture
def legacy():
    proto = descriptor_pb2.FileDescriptorProto(
        name="legacy.proto",
        message_type=[
            descriptor_pb2.DescriptorProto(
                name="Legacy",
                field=[
                    FieldDescriptorProto(
                        name="blob",
                        number=3,
                        label=FieldDescriptorProto.LABEL_OPTIONAL,
                        type=FieldDescriptorProto.TYPE_GROUP,
                        type_name=".Legacy.Blob",
                    )
                ],
                nested_type=[descriptor_pb2.DescriptorProto(name="Blob")],
            )
        ],
    )
    (file,) = resolve([proto])
    return file.messages[0]


def _field(message, name):
    return next(f for f in message.fields if f.name == name)


def _emit(gen, field):
    g = protogen_sol.GeneratedFile("demo/v1/UserProfile.pb.sol")
    gen(g, field)
    return g._buf


def test_field_shapes(user, legacy):
    assert field_shape(_field(user, "user_id")) == FieldShape.SCALAR
    assert field_shape(_field(user, "status")) == FieldShape.SCALAR
    assert field_shape(_field(user, "home")) == FieldShape.MESSAGE
    assert field_shape(_field(user, "tags")) == FieldShape.REPEATED_SCALAR
    assert field_shape(_field(user, "others")) == FieldShape.REPEATED_MESSAGE
    assert field_shape(_field(user, "labels")) == FieldShape.MAP
    assert field_shape(_field(user, "addresses")) == FieldShape.MAP
    assert field_shape(_field(legacy, "blob")) == FieldShape.UNSUPPORTED


def test_struct_members(user):
    assert _emit(gen_struct_member, _field(user, "user_id")) == ["uint64 userId;"]
    assert _emit(gen_struct_member, _field(user, "balance_delta")) == [
        "int32 balanceDelta;"
    ]
    assert _emit(gen_struct_member, _field(user, "tags")) == ["string[] tags;"]
    assert _emit(gen_struct_member, _field(user, "home")) == ["Address home;"]
    assert _emit(gen_struct_member, _field(user, "others")) == ["Address[] others;"]
    assert _emit(gen_struct_member, _field(user, "status")) == ["uint64 status;"]


def test_map_struct_members_are_parallel_arrays(user):
    assert _emit(gen_struct_member, _field(user, "labels")) == [
        "int32[] labels_keys;",
        "string[] labels_values;",
    ]
    assert _emit(gen_struct_member, _field(user, "addresses")) == [
        "string[] addresses_keys;",
        "Address[] addresses_values;",
    ]


def test_scalar_encode(user):
    assert _emit(gen_field_encode, _field(user, "user_id")) == [
        "buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x8), "
        "ProtobufRuntime._encode_varint(m.userId));"
    ]
    assert _emit(gen_field_encode, _field(user, "balance_delta")) == [
        "buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x18), "
        "ProtobufRuntime._encode_zigzag32(m.balanceDelta));"
    ]


def test_encode_records_runtime_import(user):
    g = protogen_sol.GeneratedFile("demo/v1/UserProfile.pb.sol")
    gen_field_encode(g, _field(user, "user_id"))
    assert g._imports == {"ProtobufRuntime.sol"}


def test_message_encode_is_length_delimited(user):
    assert _emit(gen_field_encode, _field(user, "home")) == [
        "{",
        "    bytes memory _sub = AddressCodec.encode(m.home);",
        "    buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x2a), "
        "ProtobufRuntime._encode_varint(uint64(_sub.length)), _sub);",
        "}",
    ]


def test_repeated_encode_is_unpacked(user):
    assert _emit(gen_field_encode, _field(user, "tags")) == [
        "for (uint256 i = 0; i < m.tags.length; i++) {",
        "    buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x22), "
        "ProtobufRuntime._encode_string(m.tags[i]));",
        "}",
    ]
    assert _emit(gen_field_encode, _field(user, "others")) == [
        "for (uint256 i = 0; i < m.others.length; i++) {",
        "    bytes memory _sub = AddressCodec.encode(m.others[i]);",
        "    buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x32), "
        "ProtobufRuntime._encode_varint(uint64(_sub.length)), _sub);",
        "}",
    ]


def test_map_encode(user):
    assert _emit(gen_field_encode, _field(user, "labels")) == [
        "for (uint256 i = 0; i < m.labels_keys.length; i++) {",
        '    bytes memory _entry = "";',
        "    _entry = abi.encodePacked(_entry, ProtobufRuntime._encode_key(0x8), "
        "ProtobufRuntime._encode_int32(m.labels_keys[i]));",
        "    _entry = abi.encodePacked(_entry, ProtobufRuntime._encode_key(0x12), "
        "ProtobufRuntime._encode_string(m.labels_values[i]));",
        "    buf = abi.encodePacked(buf, ProtobufRuntime._encode_key(0x3a), "
        "ProtobufRuntime._encode_varint(uint64(_entry.length)), _entry);",
        "}",
    ]


def test_map_encode_with_message_value(user):
    lines = _emit(gen_field_encode, _field(user, "addresses"))
    assert lines[2] == (
        "    _entry = abi.encodePacked(_entry, ProtobufRuntime._encode_key(0xa), "
        "ProtobufRuntime._encode_string(m.addresses_keys[i]));"
    )
    assert lines[3] == (
        "    bytes memory _sub = AddressCodec.encode(m.addresses_values[i]);"
    )
    assert lines[4] == (
        "    _entry = abi.encodePacked(_entry, ProtobufRuntime._encode_key(0x12), "
        "ProtobufRuntime._encode_varint(uint64(_sub.length)), _sub);"
    )
    assert "_encode_key(0x42)" in lines[5]


def test_scalar_decode(user):
    assert _emit(gen_field_decode, _field(user, "user_id")) == [
        "if (tag == 8) {",
        "    (m.userId, pos) = ProtobufRuntime._decode_varint(data, pos);",
        "    continue;",
        "}",
    ]
    assert _emit(gen_field_decode, _field(user, "status")) == [
        "if (tag == 72) {",
        "    (m.status, pos) = ProtobufRuntime._decode_varint(data, pos);",
        "    continue;",
        "}",
    ]


def test_message_decode(user):
    assert _emit(gen_field_decode, _field(user, "home")) == [
        "if (tag == 42) {",
        "    uint64 _len;",
        "    (_len, pos) = ProtobufRuntime._decode_varint(data, pos);",
        "    bytes memory _sub = ProtobufRuntime._slice(data, pos, pos + uint256(_len));",
        "    pos += uint256(_len);",
        "    m.home = AddressCodec.decode(_sub);",
        "    continue;",
        "}",
    ]


def test_repeated_decode_appends(user):
    assert _emit(gen_field_decode, _field(user, "tags")) == [
        "if (tag == 34) {",
        "    string memory _elem;",
        "    (_elem, pos) = ProtobufRuntime._decode_string(data, pos);",
        "    m.tags = _append_tags(m.tags, _elem);",
        "    continue;",
        "}",
    ]
    lines = _emit(gen_field_decode, _field(user, "others"))
    assert lines[0] == "if (tag == 50) {"
    assert "    m.others = _append_others(m.others, AddressCodec.decode(_sub));" in lines


def test_map_decode(user):
    assert _emit(gen_field_decode, _field(user, "labels")) == [
        "if (tag == 58) {",
        "    uint64 _entryLen;",
        "    (_entryLen, pos) = ProtobufRuntime._decode_varint(data, pos);",
        "    uint256 _entryEnd = pos + uint256(_entryLen);",
        "    int32 _key = 0;",
        '    string memory _val = "";',
        "    while (pos < _entryEnd) {",
        "        uint64 _entryTag;",
        "        (_entryTag, pos) = ProtobufRuntime._decode_key(data, pos);",
        "        if (_entryTag == 8) {",
        "            (_key, pos) = ProtobufRuntime._decode_int32(data, pos);",
        "        } else if (_entryTag == 18) {",
        "            (_val, pos) = ProtobufRuntime._decode_string(data, pos);",
        "        } else {",
        '            revert("unknown map entry tag");',
        "        }",
        "    }",
        '    require(pos == _entryEnd, "map entry length mismatch");',
        "    m.labels_keys = _append_labels_keys(m.labels_keys, _key);",
        "    m.labels_values = _append_labels_values(m.labels_values, _val);",
        "    continue;",
        "}",
    ]


def test_map_decode_with_message_value(user):
    lines = _emit(gen_field_decode, _field(user, "addresses"))
    assert lines[0] == "if (tag == 66) {"
    assert '    string memory _key = "";' in lines
    # Missing values stay zero-initialized.
    assert "    Address memory _val;" in lines
    assert "        if (_entryTag == 10) {" in lines
    assert "            _val = AddressCodec.decode(_sub);" in lines
    # The entry must end exactly where its length says.
    end_check = lines.index('    require(pos == _entryEnd, "map entry length mismatch");')
    assert lines[end_check - 1] == "    }"
    assert lines[end_check + 1].startswith("    m.addresses_keys = ")


def test_message_struct_name_is_local(user):
    home = _field(user, "home")
    assert home.type_name == ".demo.v1.User.Address"
    # Nested messages are declared at file scope under their local name.
    assert _emit(gen_struct_member, home) == ["Address home;"]

    g = protogen_sol.GeneratedFile("other/Other.pb.sol")
    gen_struct_member(g, home)
    assert g._buf == ["Address home;"]
    assert g._imports == {"demo/v1/UserProfile.pb.sol"}


def test_append_helpers(user):
    assert field_helpers(_field(user, "user_id")) == []
    assert field_helpers(_field(user, "home")) == []
    assert field_helpers(_field(user, "tags")) == ["_append_tags"]
    assert field_helpers(_field(user, "labels")) == [
        "_append_labels_keys",
        "_append_labels_values",
    ]

    assert _emit(gen_field_helpers, _field(user, "tags")) == [
        "function _append_tags(string[] memory arr, string memory v) "
        "private pure returns (string[] memory out) {",
        "    out = new string[](arr.length + 1);",
        "    for (uint256 i = 0; i < arr.length; i++) {",
        "        out[i] = arr[i];",
        "    }",
        "    out[arr.length] = v;",
        "}",
    ]
    assert _emit(gen_field_helpers, _field(user, "user_id")) == []


def test_map_append_helpers(user):
    lines = _emit(gen_field_helpers, _field(user, "labels"))
    assert lines[0] == (
        "function _append_labels_keys(int32[] memory arr, int32 v) "
        "private pure returns (int32[] memory out) {"
    )
    assert "" in lines
    assert (
        "function _append_labels_values(string[] memory arr, string memory v) "
        "private pure returns (string[] memory out) {"
    ) in lines


def test_unsupported_field_degrades_to_marker(legacy):
    blob = _field(legacy, "blob")
    marker = ["// unsupported protobuf field type GROUP for Legacy.blob"]

    assert isinstance(unsupported_error(blob), protogen_sol.UnsupportedTypeError)
    assert _emit(gen_struct_member, blob) == marker
    assert _emit(gen_field_encode, blob) == marker
    assert _emit(gen_field_decode, blob) == marker
    assert field_helpers(blob) == []


def test_supported_field_has_no_error(user):
    for field in user.fields:
        assert unsupported_error(field) is None
