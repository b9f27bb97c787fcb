"""Naming rules for generated Solidity code.

The rules are part of the output contract: the same proto input must always
produce the same identifiers and file names.
"""

import re

# Keywords, reserved words and builtin type names of Solidity. A field named
# like one of these can not be used as a struct member verbatim.
_RESERVED = frozenset(
    """
    abstract address after alias anonymous apply as assembly auto bool break
    byte bytes calldata case catch constant constructor continue contract
    copyof default define delete do else emit enum error event external
    fallback false final for function hex if immutable implements import
    in indexed inline int interface internal is let library macro mapping
    match memory modifier mutable new null of override partial payable pragma
    private promise public pure receive reference relocatable return returns
    sealed sizeof static storage string struct super supports switch this
    throw true try type typedef typeof ufixed uint unchecked unicode using var
    view virtual while leave fixed
    wei gwei szabo finney ether seconds minutes hours days weeks years
    """.split()
)

# Sized elementary types: int8..int256, uint8..uint256, bytes1..bytes32,
# fixedMxN and ufixedMxN.
_SIZED_TYPE_RE = re.compile(r"(u?int|bytes)\d+|u?fixed\d+x\d+")

_SNAKE_RE = re.compile(r"_([a-z])")
_FILENAME_SPLIT_RE = re.compile(r"[_\-.]")


def snake_to_camel(name: str) -> str:
    """Convert a snake case field name to camel case.

    >>> snake_to_camel("user_name")
    'userName'
    """
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), name)


def pascal_case(name: str) -> str:
    """Convert an underscore, dash or dot separated name to pascal case.

    >>> pascal_case("my_service")
    'MyService'
    """
    return "".join(s[:1].upper() + s[1:] for s in _FILENAME_SPLIT_RE.split(name))


def sanitize_name(name: str) -> str:
    if name in _RESERVED or _SIZED_TYPE_RE.fullmatch(name):
        return f"{name}_"
    return name


def member_name(field_name: str) -> str:
    """Return the struct member name for a proto field name."""
    return sanitize_name(snake_to_camel(field_name))


def codec_name(message_name: str) -> str:
    """Return the name of the codec library of a message.

    >>> codec_name("MyMessage")
    'MyMessageCodec'
    """
    return f"{message_name}Codec"


def sol_filename(proto_filename: str, package: str = "") -> str:
    """Return the name of the Solidity file generated for a proto file.

    The file is placed in a directory derived from the proto package, its base
    name is the pascal cased base name of the proto file.

    >>> sol_filename("protos/my_service.proto", "example.nested")
    'example/nested/MyService.pb.sol'
    """
    base = proto_filename
    if base.endswith(".proto"):
        base = base[: -len(".proto")]
    filename = base.split("/")[-1]
    sol_basename = pascal_case(filename) + ".pb.sol"
    if not package:
        return sol_basename
    return "/".join(package.split(".")) + "/" + sol_basename
