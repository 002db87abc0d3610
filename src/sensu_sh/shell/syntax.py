"""Tokenizer and parser for the bash subset sensu-sh scripts use.

Supported: simple commands, ``;``/newline lists, ``&&``/``||``, pipelines,
``!``, single and double quotes, backslash escapes, comments, parameter
expansion (``$NAME``, ``${NAME}``, ``${NAME[i]}``, ``${NAME[@]}``, special
parameters), command substitution ``$(...)``, scalar and array
assignments.

Not supported: redirections, background jobs, subshells, compound
commands (if/for/while/case), functions, arithmetic, globbing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..errors import IncompleteScriptError, ScriptSyntaxError

NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
ASSIGN_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_]*)(?:\[(-?[0-9]+)\])?=")
BRACED_RE = re.compile(
    r"([A-Za-z_][A-Za-z0-9_]*|[0-9]+|[?#@*])(?:\[(-?[0-9]+|[@*])\])?"
)
SPECIAL_PARAMS = "0123456789?#@*"
WORD_BREAK = " \t\n;|&()<>"


# --- AST ---------------------------------------------------------------


@dataclass
class Lit:
    """Literal text. Quoted literals keep an empty word alive (``""``)."""

    text: str
    quoted: bool = False


@dataclass
class ParamExp:
    """``$name``, ``${name}``, ``${name[index]}``."""

    name: str
    index: Optional[str] = None
    quoted: bool = False

    @property
    def is_list(self) -> bool:
        """True for ``$@``, ``$*``, ``${a[@]}`` and ``${a[*]}``."""
        return self.name in ("@", "*") or self.index in ("@", "*")

    @property
    def splits_fields(self) -> bool:
        """True when quoted expansion still yields one field per element."""
        return self.name == "@" or self.index == "@"


@dataclass
class CmdSubst:
    """``$(...)``."""

    script: "Script"
    quoted: bool = False


WordPart = Union[Lit, ParamExp, CmdSubst]


@dataclass
class Word:
    parts: List[WordPart] = field(default_factory=list)

    def literal(self) -> Optional[str]:
        """Return the word's text if it is a single unquoted literal."""
        if len(self.parts) == 1 and isinstance(self.parts[0], Lit):
            if not self.parts[0].quoted:
                return self.parts[0].text
        return None


@dataclass
class Assign:
    name: str
    index: Optional[int] = None
    value: Optional[Word] = None
    items: Optional[List[Word]] = None


@dataclass
class Command:
    assigns: List[Assign] = field(default_factory=list)
    args: List[Word] = field(default_factory=list)
    line: int = 1


@dataclass
class Pipeline:
    commands: List[Command]
    negated: bool = False


@dataclass
class AndOr:
    pipelines: List[Pipeline]
    ops: List[str] = field(default_factory=list)


@dataclass
class Script:
    statements: List[AndOr] = field(default_factory=list)
    name: str = ""


# --- Tokens ------------------------------------------------------------


@dataclass
class Token:
    kind: str  # "word", "array", "op", "newline", "eof"
    value: str = ""
    word: Optional[Word] = None
    line: int = 1

    def describe(self) -> str:
        if self.kind == "eof":
            return "end of file"
        if self.kind == "newline":
            return "newline"
        if self.kind == "word":
            return "word"
        return repr(self.value)


class Parser:
    """Recursive-descent parser that tokenizes on demand.

    Command substitutions are parsed by re-entering the list grammar from
    inside the tokenizer, so ``$(...)`` may nest and contain any quoting.
    """

    def __init__(self, text: str, name: str = ""):
        self.text = text
        self.name = name
        self.pos = 0
        self.line = 1
        self._peeked: Optional[Token] = None

    # -- grammar --------------------------------------------------------

    def parse(self) -> Script:
        script = self._parse_list(close=None)
        script.name = self.name
        return script

    def _parse_list(self, close: Optional[str]) -> Script:
        script = Script()
        while True:
            tok = self._peek()
            if tok.kind == "newline" or (tok.kind == "op" and tok.value == ";"):
                self._next()
                continue
            if tok.kind == "eof":
                if close is not None:
                    raise IncompleteScriptError(
                        "reached end of file while looking for matching ')'",
                        self.line,
                    )
                return script
            if tok.kind == "op" and tok.value == ")":
                if close != ")":
                    raise ScriptSyntaxError("unexpected ')'", tok.line)
                self._next()
                return script
            script.statements.append(self._parse_and_or())
            tok = self._peek()
            if tok.kind not in ("newline", "eof") and not (
                tok.kind == "op" and tok.value in (";", ")")
            ):
                raise ScriptSyntaxError(
                    f"unexpected {tok.describe()}", tok.line
                )

    def _parse_and_or(self) -> AndOr:
        node = AndOr([self._parse_pipeline()])
        while True:
            tok = self._peek()
            if tok.kind != "op" or tok.value not in ("&&", "||"):
                return node
            self._next()
            self._skip_newlines(after=tok.value)
            node.ops.append(tok.value)
            node.pipelines.append(self._parse_pipeline())

    def _parse_pipeline(self) -> Pipeline:
        negated = False
        tok = self._peek()
        if tok.kind == "word" and tok.word.literal() == "!":
            self._next()
            negated = True
        commands = [self._parse_command()]
        while True:
            tok = self._peek()
            if tok.kind != "op" or tok.value != "|":
                return Pipeline(commands, negated)
            self._next()
            self._skip_newlines(after="|")
            commands.append(self._parse_command())

    def _parse_command(self) -> Command:
        cmd = Command(line=self._peek().line)
        while True:
            tok = self._peek()
            if tok.kind == "array":
                if cmd.args:
                    raise ScriptSyntaxError(
                        f"unexpected '(' after {tok.value}=", tok.line
                    )
                self._next()
                cmd.assigns.append(Assign(tok.value, items=self._parse_array()))
            elif tok.kind == "word":
                self._next()
                assign = None if cmd.args else _as_assignment(tok.word)
                if assign is not None:
                    cmd.assigns.append(assign)
                else:
                    cmd.args.append(tok.word)
            else:
                break

        if not cmd.assigns and not cmd.args:
            tok = self._peek()
            if tok.kind == "eof":
                raise IncompleteScriptError("expected a command", tok.line)
            raise ScriptSyntaxError(
                f"unexpected {tok.describe()}, expected a command", tok.line
            )
        return cmd

    def _parse_array(self) -> List[Word]:
        items: List[Word] = []
        while True:
            tok = self._next()
            if tok.kind == "newline":
                continue
            if tok.kind == "word":
                items.append(tok.word)
            elif tok.kind == "op" and tok.value == ")":
                return items
            elif tok.kind == "eof":
                raise IncompleteScriptError(
                    "reached end of file inside array assignment", tok.line
                )
            else:
                raise ScriptSyntaxError(
                    f"unexpected {tok.describe()} in array assignment", tok.line
                )

    def _skip_newlines(self, after: str) -> None:
        while self._peek().kind == "newline":
            self._next()
        if self._peek().kind == "eof":
            raise IncompleteScriptError(
                f"expected a command after '{after}'", self.line
            )

    # -- tokens ---------------------------------------------------------

    def _peek(self) -> Token:
        if self._peeked is None:
            self._peeked = self._lex()
        return self._peeked

    def _next(self) -> Token:
        tok = self._peek()
        self._peeked = None
        return tok

    def _lex(self) -> Token:
        text = self.text
        while self.pos < len(text):
            c = text[self.pos]
            if c in " \t":
                self.pos += 1
            elif text.startswith("\\\n", self.pos):
                self.pos += 2
                self.line += 1
            elif c == "#":
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end
            else:
                break
        else:
            return Token("eof", line=self.line)

        line = self.line
        c = text[self.pos]
        if c == "\n":
            self.pos += 1
            self.line += 1
            return Token("newline", line=line)
        for op in ("&&", "||"):
            if text.startswith(op, self.pos):
                self.pos += 2
                return Token("op", op, line=line)
        if c in "|;)":
            self.pos += 1
            return Token("op", c, line=line)
        if c == "&":
            raise ScriptSyntaxError("background jobs are not supported", line)
        if c in "<>":
            raise ScriptSyntaxError("redirections are not supported", line)
        if c == "(":
            raise ScriptSyntaxError("subshells are not supported", line)
        return self._lex_word()

    def _lex_word(self) -> Token:
        text = self.text
        line = self.line
        parts: List[WordPart] = []
        buf: List[str] = []

        def flush() -> None:
            if buf:
                parts.append(Lit("".join(buf)))
                buf.clear()

        while self.pos < len(text):
            c = text[self.pos]
            if c in WORD_BREAK:
                if c == "(" and not parts:
                    m = ASSIGN_RE.fullmatch("".join(buf))
                    if m and m.group(2) is None:
                        self.pos += 1
                        return Token("array", m.group(1), line=line)
                break
            if c == "\\":
                if self.pos + 1 >= len(text):
                    buf.append(c)
                    self.pos += 1
                elif text[self.pos + 1] == "\n":
                    self.pos += 2
                    self.line += 1
                else:
                    flush()
                    parts.append(Lit(text[self.pos + 1], quoted=True))
                    self.pos += 2
            elif c == "'":
                end = text.find("'", self.pos + 1)
                if end < 0:
                    raise IncompleteScriptError(
                        "reached end of file while looking for matching \"'\"",
                        line,
                    )
                flush()
                body = text[self.pos + 1 : end]
                self.line += body.count("\n")
                parts.append(Lit(body, quoted=True))
                self.pos = end + 1
            elif c == '"':
                flush()
                parts.extend(self._lex_double_quoted())
            elif c == "$":
                part = self._lex_dollar(quoted=False)
                if part is None:
                    buf.append(c)
                    self.pos += 1
                else:
                    flush()
                    parts.append(part)
            elif c == "`":
                raise ScriptSyntaxError(
                    "backquote substitution is not supported, use $(...)",
                    self.line,
                )
            else:
                buf.append(c)
                self.pos += 1
        flush()
        return Token("word", word=Word(parts), line=line)

    def _lex_double_quoted(self) -> List[WordPart]:
        text = self.text
        start_line = self.line
        self.pos += 1
        parts: List[WordPart] = []
        buf: List[str] = []
        while True:
            if self.pos >= len(text):
                raise IncompleteScriptError(
                    "reached end of file while looking for matching '\"'",
                    start_line,
                )
            c = text[self.pos]
            if c == '"':
                self.pos += 1
                break
            if c == "\\" and self.pos + 1 < len(text):
                nxt = text[self.pos + 1]
                if nxt == "\n":
                    self.pos += 2
                    self.line += 1
                    continue
                if nxt in '$`"\\':
                    buf.append(nxt)
                    self.pos += 2
                    continue
            if c == "$":
                part = self._lex_dollar(quoted=True)
                if part is not None:
                    if buf:
                        parts.append(Lit("".join(buf), quoted=True))
                        buf.clear()
                    parts.append(part)
                    continue
            if c == "`":
                raise ScriptSyntaxError(
                    "backquote substitution is not supported, use $(...)",
                    self.line,
                )
            if c == "\n":
                self.line += 1
            buf.append(c)
            self.pos += 1
        if buf or not parts:
            parts.append(Lit("".join(buf), quoted=True))
        return parts

    def _lex_dollar(self, quoted: bool) -> Optional[WordPart]:
        """Lex an expansion at ``$``; return None if ``$`` is literal."""
        text = self.text
        nxt = text[self.pos + 1] if self.pos + 1 < len(text) else ""

        if nxt == "(":
            if text.startswith("$((", self.pos):
                raise ScriptSyntaxError(
                    "arithmetic expansion is not supported", self.line
                )
            self.pos += 2
            saved, self._peeked = self._peeked, None
            script = self._parse_list(close=")")
            self._peeked = saved
            return CmdSubst(script, quoted=quoted)

        if nxt == "{":
            end = text.find("}", self.pos + 2)
            if end < 0:
                raise IncompleteScriptError(
                    "reached end of file while looking for matching '}'",
                    self.line,
                )
            inner = text[self.pos + 2 : end]
            m = BRACED_RE.fullmatch(inner)
            if m is None:
                raise ScriptSyntaxError(
                    f"${{{inner}}}: bad substitution", self.line
                )
            self.pos = end + 1
            return ParamExp(m.group(1), m.group(2), quoted=quoted)

        if nxt and nxt in SPECIAL_PARAMS:
            self.pos += 2
            return ParamExp(nxt, quoted=quoted)

        m = NAME_RE.match(text, self.pos + 1)
        if m is not None:
            self.pos = m.end()
            return ParamExp(m.group(0), quoted=quoted)
        return None


def _as_assignment(word: Word) -> Optional[Assign]:
    """Split ``NAME=value`` or ``NAME[i]=value`` into an Assign."""
    if not word.parts:
        return None
    first = word.parts[0]
    if not isinstance(first, Lit) or first.quoted:
        return None
    m = ASSIGN_RE.match(first.text)
    if m is None:
        return None
    rest = first.text[m.end() :]
    parts: List[WordPart] = [Lit(rest)] if rest else []
    parts.extend(word.parts[1:])
    index = int(m.group(2)) if m.group(2) is not None else None
    return Assign(m.group(1), index=index, value=Word(parts))


def parse(text: str, name: str = "") -> Script:
    """Parse script text.

    Raises:
        IncompleteScriptError: If the text ends mid-construct
        ScriptSyntaxError: On any other syntax error
    """
    return Parser(text, name).parse()


__all__ = [
    "AndOr",
    "Assign",
    "CmdSubst",
    "Command",
    "Lit",
    "ParamExp",
    "Parser",
    "Pipeline",
    "Script",
    "Word",
    "parse",
]
