"""Descriptor fixtures shared by the tests."""

import pytest
from google.protobuf import descriptor_pb2, text_format

# demo/user_profile.proto:
#
#   syntax = "proto3";
#   package demo.v1;
#
#   message User {
#     message Address {
#       string street = 1;
#       fixed32 zip = 2;
#     }
#     enum Status {
#       STATUS_UNKNOWN = 0;
#       STATUS_ACTIVE = 1;
#     }
#     uint64 user_id = 1;
#     string display_name = 2;
#     sint32 balance_delta = 3;
#     repeated string tags = 4;
#     Address home = 5;
#     repeated Address others = 6;
#     map<int32, string> labels = 7;
#     map<string, Address> addresses = 8;
#     Status status = 9;
#   }
USER_PROFILE_PROTO = """
name: "demo/user_profile.proto"
package: "demo.v1"
syntax: "proto3"
message_type {
  name: "User"
  field { name: "user_id" number: 1 label: LABEL_OPTIONAL type: TYPE_UINT64 }
  field { name: "display_name" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING }
  field { name: "balance_delta" number: 3 label: LABEL_OPTIONAL type: TYPE_SINT32 }
  field { name: "tags" number: 4 label: LABEL_REPEATED type: TYPE_STRING }
  field {
    name: "home" number: 5 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".demo.v1.User.Address"
  }
  field {
    name: "others" number: 6 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".demo.v1.User.Address"
  }
  field {
    name: "labels" number: 7 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".demo.v1.User.LabelsEntry"
  }
  field {
    name: "addresses" number: 8 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".demo.v1.User.AddressesEntry"
  }
  field {
    name: "status" number: 9 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".demo.v1.User.Status"
  }
  nested_type {
    name: "Address"
    field { name: "street" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "zip" number: 2 label: LABEL_OPTIONAL type: TYPE_FIXED32 }
  }
  nested_type {
    name: "LabelsEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_INT32 }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING }
    options { map_entry: true }
  }
  nested_type {
    name: "AddressesEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field {
      name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_MESSAGE
      type_name: ".demo.v1.User.Address"
    }
    options { map_entry: true }
  }
  enum_type {
    name: "Status"
    value { name: "STATUS_UNKNOWN" number: 0 }
    value { name: "STATUS_ACTIVE" number: 1 }
  }
}
"""

# deep.proto: three levels of nesting and a map, no package.
DEEP_PROTO = """
name: "deep.proto"
syntax: "proto3"
message_type {
  name: "Outer"
  field {
    name: "middle" number: 1 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".Outer.Middle"
  }
  field {
    name: "counts" number: 2 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".Outer.CountsEntry"
  }
  nested_type {
    name: "Middle"
    field {
      name: "inner" number: 1 label: LABEL_OPTIONAL type: TYPE_MESSAGE
      type_name: ".Outer.Middle.Inner"
    }
    nested_type {
      name: "Inner"
      field { name: "flag" number: 1 label: LABEL_OPTIONAL type: TYPE_BOOL }
    }
  }
  nested_type {
    name: "CountsEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_INT64 }
    options { map_entry: true }
  }
}
message_type {
  name: "Sibling"
}
"""


def parse_file(text: str) -> descriptor_pb2.FileDescriptorProto:
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


@pytest.fixture
def user_profile_proto() -> descriptor_pb2.FileDescriptorProto:
    return parse_file(USER_PROFILE_PROTO)


@pytest.fixture
def deep_proto() -> descriptor_pb2.FileDescriptorProto:
    return parse_file(DEEP_PROTO)
