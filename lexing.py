"""
Clarice Scanner
Turns source text into a lazily pulled stream of immutable tokens
"""

from dataclasses import dataclass
from typing import Iterator, Union

from pyparsing import Char, ParseResults, Regex

from utilities import parse_i64, require_exhaustive


KEYWORDS = frozenset({
    'with', 'set', 'as', 'to', 'then', 'do', 'print',
    'where', 'otherwise', 'loop', 'iter',
})

OPERATORS = "+-*/="
SEPARATORS = "(){}[]:;,."


# ============================================================================
# TOKENS
# ============================================================================

@dataclass(frozen=True)
class Keyword:
    text: str


@dataclass(frozen=True)
class Identifier:
    text: str


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


@dataclass(frozen=True)
class StringLiteral:
    text: str


@dataclass(frozen=True)
class Operator:
    symbol: str


@dataclass(frozen=True)
class Separator:
    symbol: str


@dataclass(frozen=True)
class EndOfInput:
    pass


Token = Union[Keyword, Identifier, IntegerLiteral, StringLiteral, Operator, Separator, EndOfInput]
TOKEN_TYPES = (Keyword, Identifier, IntegerLiteral, StringLiteral, Operator, Separator, EndOfInput)

END_OF_INPUT = EndOfInput()


# ============================================================================
# TOKEN PATTERNS
# ============================================================================

def _classify_word(tokens: ParseResults) -> Union[Keyword, Identifier]:
    word = tokens[0]
    if word in KEYWORDS:
        return Keyword(word)
    return Identifier(word)


def _string_body(tokens: ParseResults) -> StringLiteral:
    # An unterminated literal runs to the end of input and has no closing quote
    text = tokens[0][1:]
    if text.endswith('"'):
        text = text[:-1]
    return StringLiteral(text)


def _setup_token_patterns():
    """Setup the token patterns, tried in classification order"""
    integer = Regex(r'[0-9]+').set_parse_action(lambda t: IntegerLiteral(parse_i64(t[0])))
    word = Regex(r'[^\W\d_]\w*').set_parse_action(_classify_word)
    operator = Char(OPERATORS).set_parse_action(lambda t: Operator(t[0]))
    separator = Char(SEPARATORS).set_parse_action(lambda t: Separator(t[0]))
    string = Regex(r'"[^"]*"?').set_parse_action(_string_body)

    pattern = (integer | word | operator | separator | string).set_name("token")
    # Tab characters belong to string literals as written
    return pattern.parse_with_tabs()


TOKEN_PATTERN = _setup_token_patterns()


# ============================================================================
# SCANNER
# ============================================================================

class ClariceScanner:
    """Pull-based scanner; characters no pattern accepts are skipped silently"""

    def __init__(self, source: str, debug: bool = False):
        self.source = source
        self.debug = debug
        self._matches = TOKEN_PATTERN.scan_string(source)
        self._exhausted = False

    def next_token(self) -> Token:
        """Return the next token, then EndOfInput forever once the text is used up"""
        if self._exhausted:
            return END_OF_INPUT

        for tokens, start, end in self._matches:
            token = tokens[0]
            if self.debug:
                print(f"Scanning: {token} at {start}-{end}")
            return token

        self._exhausted = True
        return END_OF_INPUT

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if isinstance(token, EndOfInput):
                return


def create_scanner(source: str, debug: bool = False) -> ClariceScanner:
    """Create a scanner over one piece of source text"""
    return ClariceScanner(source, debug=debug)


def tokenize(source: str) -> list:
    """Scan a whole text eagerly, EndOfInput included"""
    return list(create_scanner(source))


# ============================================================================
# RENDERING
# ============================================================================

_RENDERERS = {
    Keyword: lambda t: t.text,
    Identifier: lambda t: t.text,
    IntegerLiteral: lambda t: str(t.value),
    StringLiteral: lambda t: f'"{t.text}"',
    Operator: lambda t: t.symbol,
    Separator: lambda t: t.symbol,
    EndOfInput: lambda t: "",
}
require_exhaustive(_RENDERERS, TOKEN_TYPES, "render_token")


def render_token(token: Token) -> str:
    """Source text of a token"""
    return _RENDERERS[type(token)](token)


def describe_token(token: Token) -> str:
    """Short human description used in diagnostics"""
    if isinstance(token, EndOfInput):
        return "end of input"
    kind = type(token).__name__
    return f"{kind} `{render_token(token)}`"
