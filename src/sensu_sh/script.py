"""Loading scripts from files, stdin, or inline command strings."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, TextIO

from .shell.syntax import Script, parse

INLINE_PREFIX = "#!sensu-sh\n"


def inline_script(commands: Sequence[str]) -> str:
    """Join command strings into inline script source."""
    return INLINE_PREFIX + "\n".join(commands)


def read_script(source: str, stdin: TextIO) -> Script:
    """Read and parse a script.

    Args:
        source: Inline source (starting with the sensu-sh shebang), a file
            path, or "-" for stdin
        stdin: Stream used when source is "-"

    Raises:
        OSError: If the script file cannot be read
        UnicodeDecodeError: If the script is not valid UTF-8
        ScriptSyntaxError: If the script does not parse
    """
    if source.startswith(INLINE_PREFIX):
        return parse(source, "<inline>")
    if source == "-":
        return parse(stdin.read(), "<stdin>")
    return parse(Path(source).read_text(encoding="utf-8"), source)


__all__ = ["INLINE_PREFIX", "inline_script", "read_script"]
