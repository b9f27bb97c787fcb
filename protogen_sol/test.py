"""Helpers to run the plugin in tests without protoc.

Requests are built in memory from FileDescriptorProtos, for example parsed
from the text format:

.. code-block:: python

    from google.protobuf import descriptor_pb2, text_format
    from protogen_sol.test import run_plugin

    proto = text_format.Parse(
        'name: "demo.proto" message_type { name: "Empty" }',
        descriptor_pb2.FileDescriptorProto(),
    )
    resp = run_plugin([proto], ["demo.proto"])
    content, ok = resp.file_content("Demo.pb.sol")
"""

import io
from typing import Callable, Dict, List, Optional, Tuple

import google.protobuf.compiler.plugin_pb2
import google.protobuf.descriptor_pb2

import protogen_sol
from protogen_sol.generator import generate


class Response:
    """A CodeGeneratorResponse returned by :func:`run_plugin`.

    Attributes
    ----------
    proto : google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse
        The raw response.
    file : list
        The generated files of the response.
    """

    def __init__(
        self, proto: google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse
    ):
        self.proto = proto
        self.file = proto.file

    def file_names(self) -> List[str]:
        return [f.name for f in self.file]

    def file_content(self, name: str) -> Tuple[str, bool]:
        """Return the content of the generated file ``name`` and whether it exists."""
        for f in self.file:
            if f.name == name:
                return f.content, True
        return "", False


def run_plugin(
    proto_files: List[google.protobuf.descriptor_pb2.FileDescriptorProto],
    files_to_generate: List[str],
    plugin: Callable[[protogen_sol.Plugin], None] = generate,
    parameter: Optional[Dict[str, str]] = None,
) -> Response:
    """Run a plugin on an in-memory CodeGeneratorRequest.

    Arguments
    ---------
    proto_files : List[FileDescriptorProto]
        All files of the request, dependencies before the files that import
        them.
    files_to_generate : List[str]
        Names of the files to generate code for.
    plugin : Callable[[Plugin], None], optional
        The generation function. Defaults to the Solidity generator.
    parameter : Dict[str, str], optional
        Plugin parameters.

    Returns
    -------
    Response
        The decoded CodeGeneratorResponse.
    """
    parameter = parameter or {}
    req = google.protobuf.compiler.plugin_pb2.CodeGeneratorRequest(
        file_to_generate=files_to_generate,
        parameter=",".join(f"{k}={v}" for k, v in parameter.items()),
        proto_file=proto_files,
    )
    input = io.BytesIO(req.SerializeToString())
    output = io.BytesIO()
    opts = protogen_sol.Options(input=input, output=output)
    opts.run(plugin)
    return Response(
        google.protobuf.compiler.plugin_pb2.CodeGeneratorResponse.FromString(
            output.getvalue()
        )
    )


def resolve(
    proto_files: List[google.protobuf.descriptor_pb2.FileDescriptorProto],
) -> List[protogen_sol.File]:
    """Resolve files without running a plugin; every file is marked for generation."""
    return protogen_sol.resolve_files(proto_files, [f.name for f in proto_files])
