"""Generation of Solidity files for a plugin run."""

import logging
from typing import Optional

import protogen_sol.log
from protogen_sol import Diagnostics, File, GeneratedFile, Plugin
from protogen_sol.message import collect_messages, generate_message
from protogen_sol.runtime import RUNTIME_FILENAME, runtime_source

_LOG = logging.getLogger(__name__)

SOL_PRAGMA = ">=0.8.0 <0.9.0"
SPDX_LICENSE = "MIT"

# Plugin parameters understood by generate.
PARAMETERS = ("log_level",)


def generate_file(
    gen: Plugin, file: File, diagnostics: Diagnostics
) -> Optional[GeneratedFile]:
    """Generate the Solidity file for one proto file.

    Returns
    -------
    GeneratedFile or None
        The generated file, or ``None`` if the proto file declares no message
        that gets a codec.
    """
    messages = collect_messages(file)
    if not messages:
        _LOG.info("No messages in %s, skipping", file.name)
        return None

    g = gen.new_generated_file(file.sol_filename)
    g.P("// SPDX-License-Identifier: ", SPDX_LICENSE)
    g.P("// Code generated by protoc-gen-solidity. DO NOT EDIT.")
    g.P("// source: ", file.name)
    g.P()
    g.P("pragma solidity ", SOL_PRAGMA, ";")
    g.P()
    g.print_imports()
    for message in file.messages:
        if message.is_map_entry:
            continue
        g.P()
        generate_message(g, message, diagnostics)

    _LOG.info("Generated %s (%d messages)", g.name, len(messages))
    return g


def generate(gen: Plugin):
    """Generate the runtime library and one Solidity file per requested file."""
    protogen_sol.log.set_level(gen.parameter.get("log_level"))
    for key in gen.parameter:
        if key not in PARAMETERS:
            _LOG.debug("Ignoring unknown parameter %r", key)

    _LOG.info("Generating for %d proto file(s)", len(gen.files_to_generate))

    runtime = gen.new_generated_file(RUNTIME_FILENAME)
    runtime.P(runtime_source().rstrip("\n"))

    diagnostics = Diagnostics()
    for f in gen.files_to_generate:
        _LOG.debug("Generating for %s", f.name)
        generate_file(gen, f, diagnostics)

    if diagnostics.errors:
        _LOG.warning(
            "%d field(s) were emitted as placeholders", len(diagnostics.errors)
        )
