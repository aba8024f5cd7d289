#!/usr/bin/env python3

'''
CLI for computing and inspecting multihashes.
'''

import inspect
import logging
import sys
from typing import Final, Literal, cast

from .config import CONFIG, Config
from .hashers import available
from .multihash import DEFAULT_ENGINE, Multihash, multihash
from .util import argparse, check_overflow, expected, named_value, warn

logger = logging.getLogger(__name__)

type codec_t = Literal['hex', 'b58']

FORMAT: Final = {"-f,--format": ('hex', 'b58')}

class CmdError(Exception):
    pass

def read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()

class MhApp:
    def __init__(self, *rest, help=None, config=None, verbose=False):
        self.rest = rest
        self.help = help
        self.config = config or CONFIG
        self.verbose = verbose

    @classmethod
    def argparse(cls, *argv: str):
        '''Build the app from command line arguments.'''

        try:
            opts = {}
            it = iter(argv)
            while True:
                match arg := next(it):
                    case "-h"|"--help":
                        try:
                            opts['help'] = next(it)
                            check_overflow(list(it))
                        except StopIteration:
                            opts['help'] = ''
                        return cls(**opts)

                    case '-c'|'--config':
                        opts['config'] = named_value(arg, it)

                    case '-v'|'--verbose':
                        opts['verbose'] = True

                    case _:
                        break

            return cls(arg, *it, **opts)
        except StopIteration:
            return None

    def run(self) -> int:
        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s"
        )
        if self.help is not None:
            print(self.usage(self.help))
            return 0

        if not self.rest:
            expected("subcommand")

        name, *rest = self.rest

        if (subcmd := getattr(self, f"subcmd_{name}", None)) is None:
            raise CmdError(f"Unknown subcommand {name!r}")
        return subcmd(*rest) or 0

    def usage(self, what: str=""):
        """
        usage: mh [-c config] [-v] cmd ...

        Commands:
          hash [file ...]         Compute the multihash of files or STDIN.
          decode [multihash]      Show the parts of a multihash.
          check multihash [file]  Verify a file against a multihash.
          algorithms              List the supported hash functions.
          help [cmd]              Show this help message.

        options:
          -c,--config     Configuration file (default {config}).
          -v,--verbose    Log debugging information.
        """

        if what == "":
            doc = inspect.cleandoc(self.usage.__doc__ or "")
        elif sub := getattr(self, f"subcmd_{what}", None):
            doc = inspect.cleandoc(sub.__doc__ or "")
            doc = "usage: mh " + f"{what} {doc}"
        else:
            doc = inspect.cleandoc(self.usage.__doc__ or "")
            doc = f"Unknown subcommand {what!r}\n\n{doc}"

        return doc.format(config=CONFIG)

    def get_config(self) -> Config:
        return Config.from_file(self.config)

    def codec(self, opts: dict[str, str]) -> codec_t:
        return cast(codec_t, opts.get('format') or self.get_config().codec)

    def subcmd_hash(self, *argv: str):
        '''
        [-a hash] [-f hex|b58] [file ...]

        Compute the multihash of each file, or STDIN if none are given.

        options:
          -a,--algorithm  Hash function to use (default from config).
          -f,--format     Output encoding, hex or b58 (default from config).
        '''
        args, opts = argparse(argv, {"-a,--algorithm": None, **FORMAT})
        algorithm = opts.get('algorithm') or self.get_config().hash
        codec = self.codec(opts)

        for path in args or ["-"]:
            mh = multihash(algorithm, read_input(path))
            print(f"{mh.encode(codec)}  {path}")

    def subcmd_decode(self, *argv: str):
        '''
        [-f hex|b58] [multihash]

        Show the function, length, and digest of a multihash read from the
        arguments or STDIN.

        options:
          -f,--format     Input encoding, hex or b58 (default from config).
        '''
        args, opts = argparse(argv, FORMAT)
        check_overflow(args[1:])
        codec = self.codec(opts)

        data = args[0] if args else sys.stdin.read().strip()
        mh = Multihash.decode(data, codec)
        print(f"function: {mh.function_name} (0x{mh.function:02x})")
        print(f"length:   {mh.length}")
        print(f"digest:   {mh.digest.hex()}")

    def subcmd_check(self, *argv: str):
        '''
        [-f hex|b58] multihash [file]

        Verify the contents of a file, or STDIN, against a multihash. Exits
        with status 1 if they don't match.

        options:
          -f,--format     Input encoding, hex or b58 (default from config).
        '''
        args, opts = argparse(argv, FORMAT)
        match args:
            case []: expected("multihash")
            case [data]: path = "-"
            case [data, path, *rest]: check_overflow(rest)

        mh = Multihash.decode(data, self.codec(opts))
        actual = DEFAULT_ENGINE.hash_and_encode(mh.function, read_input(path))
        if actual != mh.buffer:
            logger.debug("Expected %s, got %s", mh.hex(), actual.hex())
            print(f"{path}: FAILED")
            return 1
        print(f"{path}: OK")

    def subcmd_algorithms(self, *argv: str):
        '''

        List the registered hash functions with their code and digest size.
        Functions without a local backend are marked with "-".
        '''
        check_overflow(argv)
        for desc in DEFAULT_ENGINE.registry:
            size = "var" if desc.size is None else str(desc.size)
            mark = " " if available(desc) else "-"
            print(f"{mark} 0x{desc.code:04x} {size:>4} {desc.name}")

    def subcmd_help(self, *argv: str):
        '''
        [cmd]

        Show help for the given command or all commands.
        '''
        check_overflow(argv[1:])
        print(self.usage(*argv[:1]))

def main(name, *argv) -> int:
    try:
        if app := MhApp.argparse(*argv):
            return app.run()
        warn("Expected a command.")
        print(MhApp().usage())
        return 2
    except BrokenPipeError:
        return 0 # head and tail close stdout
    except KeyboardInterrupt:
        print()
        return 130
    except (CmdError, ValueError, OSError) as e:
        print("Error:", e, file=sys.stderr)
        return 1

def entry():
    sys.exit(main(*sys.argv))

if __name__ == "__main__":
    entry()
