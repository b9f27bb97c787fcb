"""protoc-gen-solidity entry point.

protoc invokes the plugin, writes a serialized CodeGeneratorRequest to stdin
and reads a serialized CodeGeneratorResponse from stdout.
"""

import logging

import protogen_sol
import protogen_sol.log
from protogen_sol.generator import generate

_LOG = logging.getLogger("protogen_sol")


def main() -> None:
    protogen_sol.log.install()
    _LOG.debug("protoc-gen-solidity starting")
    opts = protogen_sol.Options()
    opts.run(generate)


if __name__ == "__main__":
    main()
