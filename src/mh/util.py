'''
Command line helpers.
'''

from collections.abc import Iterator, Sequence
from typing import NoReturn, Optional
import sys

__all__ = (
    'expected', 'warn', 'check_overflow',
    'named_value', 'argparse'
)

type choices_t = Optional[tuple[str, ...]]

def expected(name: str) -> NoReturn:
    raise ValueError(f"Expected a {name}.")

def warn(msg: str):
    print(f"Warning: {msg}", file=sys.stderr)

def check_overflow[T](rest: Sequence[T]):
    if rest: warn("Too many arguments.")

def named_value(arg: str, it: Iterator[str]) -> str:
    try: return next(it)
    except StopIteration:
        expected(f"value after {arg}")

def _split(arg: str) -> tuple[str, Optional[str]]:
    """Split an option into its key and any inline value."""
    if arg.startswith("--"):
        key, eq, val = arg[2:].partition('=')
        return key, val if eq else None
    # -fhex is -f hex
    return arg[1:2], arg[2:] or None

def argparse(argv: Sequence[str], config: dict[str, choices_t]):
    '''
    Split `argv` into positional arguments and string-valued options. Keys
    of `config` are comma-separated aliases, eg "-f,--format", and values
    are the accepted choices or None to accept anything. Options are named
    by their long alias. A lone "-" is positional (STDIN).
    '''
    which = dict[str, tuple[str, choices_t]]()
    for aliases, choices in config.items():
        als = aliases.split(',')
        match [a for a in als if a.startswith("--")]:
            case [name]: name = name.removeprefix('--')
            case long: raise ValueError(f"Expected one long option in {aliases!r}, got {long}")

        for k in als:
            which[k.lstrip('-')] = name, choices

    pos = list[str]()
    opts = dict[str, str]()

    it = iter(argv)
    for arg in it:
        if arg == "-" or not arg.startswith("-"):
            pos.append(arg)
            continue

        if arg == "--":
            pos.extend(it)
            break

        key, val = _split(arg)
        if (c := which.get(key)) is None:
            raise ValueError(f"Unknown option {arg!r}")

        name, choices = c
        if val is None:
            val = named_value(arg, it)
        if choices is not None and val not in choices:
            raise ValueError(
                f"Invalid value {val!r} for {arg}, expected one of {', '.join(choices)}"
            )
        opts[name] = val

    return pos, opts
