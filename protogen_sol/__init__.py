"""Package protogen_sol generates Solidity protobuf codecs from proto descriptors.

A protoc plugin turns a CodeGeneratorRequest from protoc into a
CodeGeneratorResponse. The CodeGeneratorRequest contains the raw proto
descriptors of the files code generation is requested for (and the descriptors
of every file they import). The CodeGeneratorResponse contains the files (name
and content) the plugin wants protoc to write to disk.

This module holds the descriptor model the generator works on and the small
framework that drives a generation run. :class:`File` represents a proto
FileDescriptor, :class:`Message` a proto Descriptor and :class:`Field` a proto
FieldDescriptor. Map fields are recognized during resolution: the synthetic
map-entry message protoc creates for every ``map<K, V>`` field is never emitted,
it only supplies the key and value types (see :class:`MapEntry`).

The classes :class:`Options`, :class:`Plugin` and :class:`GeneratedFile` make up
the framework. The Solidity generation itself lives in
:mod:`protogen_sol.generator`:

.. code-block:: python

    import protogen_sol
    from protogen_sol.generator import generate

    opts = protogen_sol.Options()
    opts.run(generate)

"""

import contextlib
import enum
import logging
import posixpath
import sys
from typing import BinaryIO, Callable, Dict, Iterator, List, Optional, Set

import google.protobuf.compiler.plugin_pb2
import google.protobuf.descriptor_pb2

import protogen_sol._case

_LOG = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class of all errors that abort the generation of a file."""


class ResolutionError(GenerationError):
    """Error raised when a type name or a file dependency can not be resolved.

    Attributes
    ----------
    file : str
        The proto file that contains the descriptor that refers to a type that
        could not be resolved.
    desc : str
        The full name of the descriptor that holds the reference.
    ref : str
        The type reference that can not be resolved.
    """

    def __init__(self, file: str, desc: str, ref: str):
        msg = f'{file}: failed to resolve "{ref}" from "{desc}"'
        super().__init__(msg)
        self.file = file
        self.desc = desc
        self.ref = ref


class InvalidDescriptorError(GenerationError):
    """Error raised when a descriptor is invalid.

    For example, a FieldDescriptor of TYPE_MESSAGE or TYPE_ENUM that does not
    declare a ``type_name``.
    """

    def __init__(self, full_name: str, msg: str):
        super().__init__(f"invalid descriptor ({full_name}): {msg}")
        self.full_name = full_name


class MalformedSchemaError(GenerationError):
    """Error raised when a map-entry message does not have the expected shape.

    A map entry must consist of exactly a ``key`` field numbered 1 and a
    ``value`` field numbered 2.
    """

    def __init__(self, full_name: str, msg: str):
        super().__init__(f"malformed map entry {full_name}: {msg}")
        self.full_name = full_name


class UnsupportedTypeError(GenerationError):
    """Error raised when a proto field type has no Solidity mapping.

    Raised by the type mapping lookup. The field code generator does not let it
    propagate: it degrades the field to a placeholder and reports the error to
    a :class:`Diagnostics` sink instead.

    Attributes
    ----------
    type : int
        The proto field type code.
    ref : str
        Full name of the field with the unsupported type, or empty if the
        lookup was not made on behalf of a field.
    """

    def __init__(self, type: int, ref: str = ""):
        kind = _kind(type)
        name = kind.name if kind is not None else type
        msg = f"unsupported protobuf field type {name}"
        if ref:
            msg += f" for {ref}"
        super().__init__(msg)
        self.type = type
        self.ref = ref


class Diagnostics:
    """A sink for non-fatal generation problems.

    Problems are collected and logged as warnings. The run continues; protoc
    only receives the log output on stderr.
    """

    def __init__(self):
        self.errors: List[GenerationError] = []

    def report(self, err: GenerationError):
        self.errors.append(err)
        _LOG.warning("%s", err)


class Kind(enum.IntEnum):
    """Kind is an enumeration of the different value types of a field."""

    DOUBLE = 1
    FLOAT = 2
    INT64 = 3
    UINT64 = 4
    INT32 = 5
    FIXED64 = 6
    FIXED32 = 7
    BOOL = 8
    STRING = 9
    GROUP = 10
    MESSAGE = 11
    BYTES = 12
    UINT32 = 13
    ENUM = 14
    SFIXED32 = 15
    SFIXED64 = 16
    SINT32 = 17
    SINT64 = 18


def _kind(code: int) -> Optional[Kind]:
    try:
        return Kind(code)
    except ValueError:
        return None


class Cardinality(enum.Enum):
    """Cardinality specifies whether a field is optional, required or repeated."""

    OPTIONAL = 1
    REQUIRED = 2
    REPEATED = 3


class SolIdent:
    """An identifier for a Solidity struct or library.

    A Solidity identifier is uniquely identified by the generated file it is
    defined in and its name. When printed into another generated file, that
    file records an import of the defining file (see :meth:`GeneratedFile.P`).

    Attributes
    ----------
    sol_filename : str
        Name of the generated file that defines the identifier.
    sol_name : str
        Name of the struct or library.
    """

    def __init__(self, sol_filename: str, sol_name: str):
        self.sol_filename = sol_filename
        self.sol_name = sol_name

    def __str__(self) -> str:
        return self.sol_name


class Registry:
    """A registry for resolved descriptors.

    A registry holds references to :class:`File`, :class:`Message` and
    :class:`Enum` objects of every file of a request, so that type names can be
    resolved across files.
    """

    def __init__(self):
        """Create a new, empty registry."""
        self._messages_by_name: Dict[str, "Message"] = {}
        self._enums_by_name: Dict[str, "Enum"] = {}
        self._files_by_name: Dict[str, "File"] = {}

    def _register_file(self, file: "File"):
        self._files_by_name[file.name] = file

    def _register_message(self, message: "Message"):
        self._messages_by_name[message.full_name] = message

    def _register_enum(self, enum: "Enum"):
        self._enums_by_name[enum.full_name] = enum

    def file_by_name(self, name: str) -> Optional["File"]:
        """Get a file by its full name.

        Arguments
        ---------
        name : str
            The full (proto) name of the file to retrieve.

        Returns
        -------
        file: File or None
            The file or `None` if no file with that name has been registered.
        """
        return self._files_by_name.get(name)

    def message_by_name(self, name: str) -> Optional["Message"]:
        """Get a message by its full name.

        Arguments
        ---------
        name : str
            The full (proto) name of the message to retrieve, without a leading
            dot.

        Returns
        -------
        message: Message or None
            The message or `None` if no message with that name has been
            registered.
        """
        return self._messages_by_name.get(name)

    def enum_by_name(self, name: str) -> Optional["Enum"]:
        """Get an enum by its full name, or `None`."""
        return self._enums_by_name.get(name)

    def resolve_message_type(self, scope: str, name: str) -> Optional["Message"]:
        """Resolve a relative message type name.

        Follows the protobuf scoping rules: the name is first looked up in the
        innermost scope and then in each enclosing scope.

        Arguments
        ---------
        scope : str
            Full name of the declaration the reference appears in, e.g.
            ``acme.library.v1.Book``.
        name : str
            The (possibly partially qualified) type name to resolve.

        Returns
        -------
        Message or None
            The message, or `None` if no scope contains it.
        """
        parts = scope.split(".") if scope else []
        while True:
            candidate = ".".join(parts + [name])
            if candidate in self._messages_by_name:
                return self._messages_by_name[candidate]
            if not parts:
                return None
            parts.pop()


def _resolve_message_type_name(
    registry: Registry, scope: str, type_name: str
) -> Optional["Message"]:
    """Resolve a `FieldDescriptorProto.type_name` referring to a message."""
    if type_name.startswith("."):
        return registry.message_by_name(type_name[1:])
    return registry.resolve_message_type(scope, type_name)


def _resolve_enum_type_name(
    registry: Registry, type_name: str
) -> Optional["Enum"]:
    if type_name.startswith("."):
        return registry.enum_by_name(type_name[1:])
    return None


def _full_name(parent_name: str, name: str) -> str:
    return f"{parent_name}.{name}" if parent_name else name


class MapEntry:
    """Key and value types of a map field.

    Attributes
    ----------
    key_type : int
        Proto type code of the map key.
    value_type : int
        Proto type code of the map value.
    value_type_name : str or None
        Referenced type name of the value, for message and enum values.
    value_message : Message or None
        The resolved value message for message values.
    """

    def __init__(
        self,
        key_type: int,
        value_type: int,
        value_type_name: Optional[str] = None,
        value_message: Optional["Message"] = None,
    ):
        self.key_type = key_type
        self.value_type = value_type
        self.value_type_name = value_type_name
        self.value_message = value_message


def _map_entry(message: "Message") -> MapEntry:
    """Build map metadata from a synthetic map-entry message."""
    fields = {f.name: f for f in message.fields}
    if len(message.fields) != 2 or set(fields) != {"key", "value"}:
        raise MalformedSchemaError(
            message.full_name,
            "expected exactly a key and a value field, got "
            + ", ".join(f.name for f in message.fields),
        )
    key, value = fields["key"], fields["value"]
    if key.number != 1 or value.number != 2:
        raise MalformedSchemaError(
            message.full_name, "key and value must be numbered 1 and 2"
        )
    return MapEntry(key.type, value.type, value.type_name, value.message)


class Enum:
    """A proto enum.

    Enums are not emitted; enum-typed fields travel as ``uint64`` varints.
    They are registered so that enum references can be resolved.

    Attributes
    ----------
    proto : google.protobuf.descriptor_pb2.EnumDescriptorProto
        The raw EnumDescriptor of the enum.
    name : str
        Local name of the enum.
    full_name : str
        Full proto name of the enum.
    parent_file : File
        The File the enum is declared in.
    """

    def __init__(
        self,
        proto: google.protobuf.descriptor_pb2.EnumDescriptorProto,
        parent_file: "File",
        parent_name: str,
    ):
        self.proto = proto
        self.name = proto.name
        self.full_name = _full_name(parent_name, proto.name)
        self.parent_file = parent_file


class Field:
    """A proto field.

    Attributes
    ----------
    proto : google.protobuf.descriptor_pb2.FieldDescriptorProto
        The raw FieldDescriptor of the field.
    name : str
        Declared (snake case) name of the field.
    sol_name : str
        Solidity member name of the field: camel case, with Solidity reserved
        words suffixed by an underscore.
    full_name : str
        Full proto name of the field.
    number : int
        The field number.
    type : int
        The raw proto type code. May have no :class:`Kind` (see :attr:`kind`).
    kind : Kind or None
        The field kind, ``None`` if the type code is unknown.
    type_name : str or None
        The referenced type name for message and enum fields.
    cardinality : Cardinality
        Cardinality of the field.
    oneof_index : int or None
        Index of the oneof the field is declared in. Not used for code
        generation.
    parent : Message
        The message the field is declared in.
    parent_file : File
        The file the field is declared in.
    message : Message or None
        The resolved message type for message fields.
    map_entry : MapEntry or None
        Key and value types if the field is a map field.
    """

    def __init__(
        self,
        proto: google.protobuf.descriptor_pb2.FieldDescriptorProto,
        parent: "Message",
        parent_file: "File",
    ):
        self.proto = proto
        self.name = proto.name
        self.sol_name = protogen_sol._case.member_name(proto.name)
        self.full_name = parent.full_name + "." + proto.name
        self.number = proto.number
        self.type = int(proto.type)
        self.kind = _kind(self.type)
        self.type_name = proto.type_name if proto.HasField("type_name") else None
        self.cardinality = Cardinality(proto.label)
        self.oneof_index = (
            proto.oneof_index if proto.HasField("oneof_index") else None
        )
        self.parent = parent
        self.parent_file = parent_file
        self.message: Optional["Message"] = None
        self.enum: Optional[Enum] = None
        self.map_entry: Optional[MapEntry] = None

        if self.number <= 0:
            raise InvalidDescriptorError(
                self.full_name, f"field number must be positive, got {self.number}"
            )

    def is_map(self) -> bool:
        """Whether the field is a map field."""
        return self.map_entry is not None

    def is_list(self) -> bool:
        """Whether the field is a repeated field that is not a map field."""
        return self.cardinality == Cardinality.REPEATED and not self.is_map()

    def _resolve(self, registry: Registry):
        if self.kind in (Kind.MESSAGE, Kind.ENUM) and not self.type_name:
            raise InvalidDescriptorError(
                self.full_name,
                f"is of kind {self.kind.name} but has no `type_name` set",
            )

        if self.kind == Kind.ENUM:
            self.enum = _resolve_enum_type_name(registry, self.type_name)
            if self.enum is None:
                raise ResolutionError(
                    file=self.parent_file.name,
                    desc=self.full_name,
                    ref=self.type_name,
                )

        if self.kind == Kind.MESSAGE:
            self.message = _resolve_message_type_name(
                registry, self.parent.full_name, self.type_name
            )
            if self.message is None:
                raise ResolutionError(
                    file=self.parent_file.name,
                    desc=self.full_name,
                    ref=self.type_name,
                )
            if self.message.is_map_entry:
                self.map_entry = _map_entry(self.message)


class Message:
    """A proto message.

    Attributes
    ----------
    proto : google.protobuf.descriptor_pb2.DescriptorProto
        The raw Descriptor of the message.
    name : str
        Local name of the message.
    full_name : str
        Full proto name of the message. Only used for type resolution.
    sol_ident : SolIdent
        Identifier of the Solidity struct of the message.
    codec_ident : SolIdent
        Identifier of the Solidity library holding the message codec.
    parent_file : File
        The file the message is defined in.
    parent : Message or None
        The parent message in case this is a nested message. ``None`` for
        top-level messages.
    fields : List[Field]
        Message field declarations in declaration order.
    messages : List[Message]
        Nested message declarations, map entries included.
    enums : List[Enum]
        Nested enum declarations.
    is_map_entry : bool
        Whether protoc synthesized the message for a map field.
    """

    def __init__(
        self,
        proto: google.protobuf.descriptor_pb2.DescriptorProto,
        parent_file: "File",
        parent: Optional["Message"],
    ):
        self.proto = proto
        self.name = proto.name
        if parent is not None:
            self.full_name = parent.full_name + "." + proto.name
        else:
            self.full_name = _full_name(parent_file.package, proto.name)
        self.sol_ident = SolIdent(parent_file.sol_filename, proto.name)
        self.codec_ident = SolIdent(
            parent_file.sol_filename, protogen_sol._case.codec_name(proto.name)
        )
        self.parent_file = parent_file
        self.parent = parent
        self.is_map_entry = bool(
            proto.HasField("options") and proto.options.map_entry
        )

        self.fields: List[Field] = [
            Field(field_proto, self, parent_file) for field_proto in proto.field
        ]
        self.messages: List[Message] = [
            Message(nested, parent_file, self) for nested in proto.nested_type
        ]
        self.enums: List[Enum] = [
            Enum(enum_proto, parent_file, self.full_name)
            for enum_proto in proto.enum_type
        ]

    def _register(self, registry: Registry):
        """Register the message and its nested messages and enums onto the registry."""
        registry._register_message(self)
        for message in self.messages:
            message._register(registry)
        for enum in self.enums:
            registry._register_enum(enum)

    def _resolve(self, registry: Registry):
        """Resolve references of the message.

        Nested messages are resolved first so that the value field of a map
        entry is resolved before the map field that refers to it.
        """
        for message in self.messages:
            message._resolve(registry)
        for field in self.fields:
            field._resolve(registry)


class File:
    """A proto file.

    Attributes
    ----------
    proto : google.protobuf.descriptor_pb2.FileDescriptorProto
        The raw FileDescriptor of the file.
    name : str
        Name of the proto file, e.g. ``acme/library/v1/book_shelf.proto``.
    package : str
        The proto package of the file, possibly empty.
    sol_filename : str
        Name of the generated Solidity file.
    generate : bool
        Whether code should be generated for the file.
    dependencies : List[File]
        Files imported by the file.
    messages : List[Message]
        Top-level message declarations.
    enums : List[Enum]
        Top-level enum declarations.
    """

    def __init__(
        self,
        proto: google.protobuf.descriptor_pb2.FileDescriptorProto,
        generate: bool,
    ):
        self.proto = proto
        self.name = proto.name
        self.package = proto.package
        self.sol_filename = protogen_sol._case.sol_filename(proto.name, proto.package)
        self.generate = generate
        self.dependencies: List[File] = []

        self.messages: List[Message] = [
            Message(message_proto, self, None) for message_proto in proto.message_type
        ]
        self.enums: List[Enum] = [
            Enum(enum_proto, self, proto.package) for enum_proto in proto.enum_type
        ]

    def _register(self, registry: Registry):
        """Register the file, all messages and enums on the registry."""
        registry._register_file(self)
        for message in self.messages:
            message._register(registry)
        for enum in self.enums:
            registry._register_enum(enum)

    def _resolve(self, registry: Registry):
        """Resolve dependencies."""
        for dep_name in self.proto.dependency:
            dep = registry.file_by_name(dep_name)
            if dep is None:
                raise ResolutionError(self.name, self.name, dep_name)
            self.dependencies.append(dep)

        for message in self.messages:
            message._resolve(registry)


def resolve_files(
    proto_files: List[google.protobuf.descriptor_pb2.FileDescriptorProto],
    files_to_generate: List[str],
) -> List[File]:
    """Turn raw file descriptors into resolved :class:`File` objects.

    protoc lists files in topological order: every file comes after the files
    it imports. Each file is resolved right after it is registered.

    Arguments
    ---------
    proto_files : List[google.protobuf.descriptor_pb2.FileDescriptorProto]
        All files of the request.
    files_to_generate : List[str]
        Names of the files code generation is requested for.

    Returns
    -------
    List[File]
        The files to generate, in request order.

    Raises
    ------
    GenerationError
        If a reference can not be resolved or a descriptor is invalid.
    """
    registry = Registry()
    to_generate: List[File] = []
    for proto in proto_files:
        generate = proto.name in files_to_generate
        file = File(proto, generate)
        file._register(registry)
        file._resolve(registry)
        if generate:
            to_generate.append(file)
    return to_generate


def _indent(s: str, width: int) -> str:
    lines = s.splitlines()
    prefix = " " * width
    prefix_lines = [prefix + line if line else line for line in lines]
    return "\n".join(prefix_lines)


class GeneratedFile:
    """An output buffer to write generated code to.

    A generated file is a buffer. New lines can be added to the output buffer by
    calling :func:`P`.

    Additionally, the generated file handles Solidity imports. Every
    :class:`SolIdent` printed with :func:`P` that is defined in another file
    adds that file to the imports. Use :meth:`print_imports` to mark the
    position in the output buffer the imports will be printed at. Import paths
    are relative to the generated file.

    Attributes
    ----------
    name : str
        Name of the generated file.
    """

    def __init__(self, name: str):
        self.name = name
        self._buf: List[str] = []
        self._import_mark = -1
        self._imports: Set[str] = set()
        self._indent = 0

    def set_indent(self, level: int) -> int:
        """Set the indentation level.

        Set the indentation level such that consecutive calls to :func:`P` are
        indented automatically to that level.

        Arguments
        ---------
        level : int
            The new indentation level.

        Returns
        -------
        int
            The old indentation level.

        Raises
        ------
        ValueError
            If level is less than zero.
        """
        if level < 0:
            raise ValueError("indent must be greater or equal zero")
        old = self._indent
        self._indent = level
        return old

    @contextlib.contextmanager
    def indent(self, width: int = 4) -> Iterator[None]:
        """Indent the lines printed within the context by ``width`` more spaces.

        Example
        -------
        >>> g.P("library FooCodec {")
        >>> with g.indent():
        ...     g.P("function encode() internal pure {}")
        >>> g.P("}")
        """
        old = self.set_indent(self._indent + width)
        try:
            yield
        finally:
            self.set_indent(old)

    def P(self, *args):
        """Add a new line to the output buffer.

        Add a new line to the output buffer containing a stringified version of
        the passed arguments. For arguments that are of class :class:`SolIdent`
        :meth:`qualified_sol_ident` is called, which records the import of the
        file the identifier is defined in.

        Arguments
        ---------
        *args
            Items that make up the content of the new line. All args are printed
            on the same line. There is no whitespace added between the
            individual args.
        """
        line = ""
        for arg in args:
            if isinstance(arg, SolIdent):
                line += self.qualified_sol_ident(arg)
            else:
                line += str(arg)
        self._buf.append(_indent(line, self._indent))

    def qualified_sol_ident(self, ident: SolIdent) -> str:
        """Obtain the name of ``ident`` and record the import it requires.

        Solidity imports every top-level name of the imported file into the
        importing file's scope, so the plain name is always returned.
        """
        if ident.sol_filename != self.name:
            self._imports.add(ident.sol_filename)
        return ident.sol_name

    def print_imports(self):
        """Set the mark to print the imports in the output buffer.

        The current location in the output buffer will be used to print the
        imports collected by :meth:`qualified_sol_ident`. Only one location can
        be set. Consecutive calls will overwrite previous calls.
        """
        self._import_mark = len(self._buf)

    def _import_path(self, filename: str) -> str:
        path = posixpath.relpath(filename, posixpath.dirname(self.name) or ".")
        if not path.startswith("../"):
            path = "./" + path
        return path

    def _content(self) -> str:
        if self._import_mark > -1:
            imports = [
                f'import "{self._import_path(name)}";' for name in sorted(self._imports)
            ]
            lines = (
                self._buf[: self._import_mark]
                + imports
                + self._buf[self._import_mark :]
            )
        else:
            lines = self._buf
        return "\n".join(lines) + "\n"

    def _proto(self) -> google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse.File:
        return google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse.File(
            name=self.name,
            content=self._content(),
        )


class Plugin:
    """An invocation of a protoc plugin.

    Provides access to the resolved files of the CodeGeneratorRequest and is
    used to create the CodeGeneratorResponse that is returned back to protoc.
    To add a new generated file to the response, use :meth:`new_generated_file`.

    Attributes
    ----------
    parameter : Dict[str, str]
        Parameter passed to the plugin using ``--solidity_opt=<key>=<value>``
        or ``--solidity_out=<key>=<value>:<dir>`` command line flags.
    files_to_generate : List[File]
        Files code generation is requested for. These are the files explicitly
        passed to protoc as command line arguments.
    """

    def __init__(
        self,
        parameter: Dict[str, str],
        files_to_generate: List[File],
    ):
        self.parameter = parameter
        self.files_to_generate = files_to_generate

        self._error: Optional[str] = None
        self._generated_files: List[GeneratedFile] = []

    def _response(self) -> google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse:
        response = google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse(
            supported_features=google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
        )
        if self._error is not None:
            response.error = self._error
            return response
        for f in self._generated_files:
            response.file.append(f._proto())
        return response

    def new_generated_file(self, name: str) -> GeneratedFile:
        """Create a new generated file.

        The generated file will be added to the output of the plugin.

        Arguments
        ---------
        name : str
            Filename of the generated file.

        Returns
        -------
        GeneratedFile
            The new generated file.
        """
        g = GeneratedFile(name)
        self._generated_files.append(g)
        return g

    def error(self, msg: str):
        """Record an error.

        The error will be reported back to protoc. No output will be produced
        in case of an error. Will act as a no-op for consecutive calls; only the
        first error is reported back.

        Arguments
        ---------
        msg : str
            Error message to report back to protoc. This will appear on the
            command line when the error is displayed.
        """
        if self._error is None:
            self._error = msg


def parse_parameter(parameter: str) -> Dict[str, str]:
    """Parse the parameter string of a CodeGeneratorRequest.

    Parameters are given as flags to protoc:

      --solidity_opt=key1=value1
      --solidity_opt=key2=value2,key3=value3
      --solidity_out=key4:./path

    All of them are joined with a "," in the CodeGeneratorRequest. Follow the
    convention of parameter pairs separated by commas in the form {k}={v}. If
    {k} has no value, an empty string is used. For {k}={v}={v2}, {k} is the key
    and {v}={v2} the value.
    """
    params: Dict[str, str] = {}
    for param in parameter.split(","):
        if param == "":
            continue
        splits = param.split("=", 1)
        if len(splits) == 1:
            k, v = splits[0], ""
        else:
            k, v = splits
        params[k.strip()] = v.strip()
    return params


class Options:
    """Options for a plugin run.

    Use :meth:`run` to run a code generation function.
    """

    def __init__(
        self,
        *,
        input: Optional[BinaryIO] = None,
        output: Optional[BinaryIO] = None,
    ):
        """Create options for a plugin run.

        Arguments
        ---------
        input : BinaryIO, optional
            The input stream to read the CodeGeneratorRequest from. Defaults
            to :attr:`sys.stdin.buffer`.
        output : BinaryIO, optional
            The output stream to write the CodeGeneratorResponse to.
            Defaults to :attr:`sys.stdout.buffer`.
        """
        self._input = input if input is not None else sys.stdin.buffer
        self._output = output if output is not None else sys.stdout.buffer

    def run(self, f: Callable[[Plugin], None]):
        """Resolve the CodeGeneratorRequest and run ``f`` on it.

        run reads the CodeGeneratorRequest from :attr:`input`, resolves the raw
        descriptors to :class:`File` objects and calls ``f`` with a
        :class:`Plugin` holding them. Once ``f`` returns, the
        CodeGeneratorResponse is written to :attr:`output`.

        A :class:`GenerationError` raised while resolving or generating is
        reported as the response error; no files are returned in that case.

        Arguments
        ---------
        f : Callable[[Plugin], None]
            Function to run with the Plugin containing the resolved files.
        """
        req = google.protobuf.compiler.plugin_pb2.CodeGeneratorRequest.FromString(
            self._input.read()
        )
        parameter = parse_parameter(req.parameter)
        plugin = Plugin(parameter, [])
        try:
            plugin.files_to_generate = resolve_files(
                list(req.proto_file), list(req.file_to_generate)
            )
            f(plugin)
        except GenerationError as err:
            _LOG.error("Plugin error: %s", err)
            plugin.error(str(err))

        resp = plugin._response()
        self._output.write(resp.SerializeToString())
