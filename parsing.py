"""
Clarice Programming Language Parser
Recursive descent over the scanner's token stream, one constructor per keyword,
with statement-level error recovery
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import lexing
from lexing import ClariceScanner, EndOfInput, Token, create_scanner, describe_token
from error_handling import Diagnostic, make_diagnostic
from semantics import SymbolTable, check_program
from syntax import (
    As, BooleanLiteral, Do, Expression, FunctionCall, Identifier, IntegerLiteral,
    Iter, ListLiteral, Loop, Print, Program, Set, Statement, StringLiteral, Then,
    To, Where, With, placeholder_expression, placeholder_statement,
)


BOOLEAN_WORDS = {'true': True, 'false': False}


@dataclass
class ParseResult:
    """A fully built program plus the diagnostics recovery produced"""
    program: Program
    diagnostics: List[Diagnostic] = field(default_factory=list)
    symbols: Optional[SymbolTable] = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class StatementParser:
    """Parses one source text; holds the single token of lookahead"""

    def __init__(self, scanner: ClariceScanner, debug: bool = False):
        self.scanner = scanner
        self.debug = debug
        self.diagnostics: List[Diagnostic] = []
        self.current: Token = lexing.END_OF_INPUT
        self._statement_parsers: Dict[str, Callable[[], Statement]] = {
            'with': self.parse_with_statement,
            'set': self.parse_set_statement,
            'as': self.parse_as_statement,
            'to': self.parse_to_statement,
            'then': self.parse_then_statement,
            'do': self.parse_do_statement,
            'print': self.parse_print_statement,
            'where': self.parse_where_statement,
            'loop': self.parse_loop_statement,
            'iter': self.parse_iter_statement,
        }
        self.advance()

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def advance(self) -> None:
        self.current = self.scanner.next_token()

    def at_keyword(self, text: str) -> bool:
        return isinstance(self.current, lexing.Keyword) and self.current.text == text

    def at_separator(self, symbol: str) -> bool:
        return isinstance(self.current, lexing.Separator) and self.current.symbol == symbol

    def at_end(self, nested: bool) -> bool:
        if isinstance(self.current, EndOfInput):
            return True
        return nested and self.at_keyword('otherwise')

    def take_identifier(self) -> Optional[str]:
        """Consume and return an identifier's text, or None without consuming"""
        if isinstance(self.current, lexing.Identifier):
            name = self.current.text
            self.advance()
            return name
        return None

    def report(self, message: str) -> None:
        diagnostic = make_diagnostic("parse", message)
        self.diagnostics.append(diagnostic)
        if self.debug:
            print(f"Parse diagnostic: {message}")

    def recover(self, message: str, description: str) -> Statement:
        """Record the problem, skip the offending token, stand in a placeholder"""
        self.report(message)
        if not isinstance(self.current, EndOfInput):
            self.advance()
        return placeholder_statement(description)

    # ------------------------------------------------------------------
    # Programs and statements
    # ------------------------------------------------------------------

    def parse_program(self, nested: bool = False) -> Program:
        """Parse statements up to end of input, or up to `otherwise` when nested"""
        statements = []
        while not self.at_end(nested):
            statements.append(self.parse_statement())
        return Program(tuple(statements))

    def parse_statement(self) -> Statement:
        token = self.current
        if self.debug:
            print(f"Parsing statement: {describe_token(token)}")

        if isinstance(token, lexing.Keyword):
            constructor = self._statement_parsers.get(token.text)
            if constructor is not None:
                return constructor()
            return self.recover(f"`{token.text}` cannot start a statement", "Unknown Keyword.")

        if isinstance(token, lexing.Identifier):
            return self.recover(f"Expected a statement, got {describe_token(token)}",
                                "Unexpected Identifier.")

        return self.recover(f"Expected a statement, got {describe_token(token)}", "No Statement.")

    def parse_with_statement(self) -> Statement:
        self.advance()  # with
        name = self.take_identifier()
        if name is None:
            return self.recover(
                f"Expected identifier after `with`, got {describe_token(self.current)}",
                "No Identifier (With)")
        if not self.at_keyword('as'):
            return self.recover(
                f"Expected `as` after `with {name}`, got {describe_token(self.current)}",
                "No Expression (With)")
        self.advance()  # as
        return With(name, self.parse_expression())

    def parse_set_statement(self) -> Statement:
        self.advance()  # set
        name = self.take_identifier()
        if name is None:
            return self.recover(
                f"Expected identifier after `set`, got {describe_token(self.current)}",
                "No Identifier (Set)")
        if not self.at_keyword('to'):
            return self.recover(
                f"Expected `to` after `set {name}`, got {describe_token(self.current)}",
                "No Expression (Set)")
        self.advance()  # to
        return Set(name, self.parse_expression())

    def parse_as_statement(self) -> Statement:
        self.advance()  # as
        name = self.take_identifier()
        if name is None:
            return self.recover(
                f"Expected identifier after `as`, got {describe_token(self.current)}",
                "No Expression (As)")
        return As(name, self.parse_expression())

    def parse_to_statement(self) -> Statement:
        self.advance()  # to
        name = self.take_identifier()
        if name is None:
            return self.recover(
                f"Expected identifier after `to`, got {describe_token(self.current)}",
                "No Expression (To)")
        return To(name, self.parse_expression())

    def parse_then_statement(self) -> Statement:
        self.advance()  # then
        return Then(self.parse_statement())

    def parse_do_statement(self) -> Statement:
        self.advance()  # do
        return Do(self.parse_program(nested=True))

    def parse_print_statement(self) -> Statement:
        self.advance()  # print
        return Print(self.parse_expression())

    def parse_where_statement(self) -> Statement:
        self.advance()  # where
        condition = self.parse_expression()
        true_branch = self.parse_program(nested=True)
        false_branch = None
        if self.at_keyword('otherwise'):
            self.advance()
            false_branch = self.parse_program(nested=True)
        return Where(condition, true_branch, false_branch)

    def parse_loop_statement(self) -> Statement:
        self.advance()  # loop
        return Loop(self.parse_statement())

    def parse_iter_statement(self) -> Statement:
        self.advance()  # iter
        variable = self.take_identifier()
        if variable is None:
            return self.recover(
                f"Expected identifier after `iter`, got {describe_token(self.current)}",
                "No Identifier (Iter).")
        if not (isinstance(self.current, lexing.Identifier) and self.current.text == 'in'):
            return self.recover(
                f"Expected `in` after `iter {variable}`, got {describe_token(self.current)}",
                "No Iterable (Iter)")
        self.advance()  # in
        iterable = self.parse_expression()
        return Iter(variable, iterable, self.parse_statement())

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> Expression:
        token = self.current

        if isinstance(token, lexing.Identifier):
            self.advance()
            if token.text in BOOLEAN_WORDS:
                return BooleanLiteral(BOOLEAN_WORDS[token.text])
            if self.at_separator('('):
                return FunctionCall(token.text, self.parse_delimited('(', ')'))
            return Identifier(token.text)

        if isinstance(token, lexing.IntegerLiteral):
            self.advance()
            return IntegerLiteral(token.value)

        if isinstance(token, lexing.StringLiteral):
            self.advance()
            return StringLiteral(token.text)

        if self.at_separator('['):
            return ListLiteral(self.parse_delimited('[', ']'))

        self.report(f"Expected an expression, got {describe_token(token)}")
        if not isinstance(token, EndOfInput):
            self.advance()
        return placeholder_expression("No Expression.")

    def parse_delimited(self, opening: str, closing: str) -> tuple:
        """Comma-separated expressions between a pair of separators"""
        self.advance()  # opening
        elements = []
        if self.at_separator(closing):
            self.advance()
            return tuple(elements)

        while True:
            elements.append(self.parse_expression())
            if self.at_separator(','):
                self.advance()
                continue
            if self.at_separator(closing):
                self.advance()
                break
            self.report(f"Expected `,` or `{closing}` after `{opening}` element, "
                        f"got {describe_token(self.current)}")
            break

        return tuple(elements)


class ClariceParser:
    """Main Clarice parser combining scanner, grammar and checker"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str) -> ParseResult:
        """Recovering parse of source text; no checking"""
        statement_parser = StatementParser(create_scanner(text, self.debug), self.debug)
        program = statement_parser.parse_program()
        return ParseResult(program, statement_parser.diagnostics)

    def parse(self, text: str) -> ParseResult:
        """Parse then check; raises ClariceCheckError on the first check failure"""
        result = self.parse_string(text)
        result.symbols = check_program(result.program, self.debug)
        return result


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> ClariceParser:
    """Create a Clarice parser"""
    return ClariceParser(debug=debug)


def create_debug_parser() -> ClariceParser:
    """Create a Clarice parser with debug enabled"""
    return ClariceParser(debug=True)
