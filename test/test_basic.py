"""
Basic scanning and parsing tests for Clarice
Tests the token stream and the shape of parsed programs
"""

import pytest

from error_handling import ClariceCheckError
from lexing import (
  KEYWORDS, EndOfInput, Identifier, IntegerLiteral, Keyword, Operator, Separator,
  StringLiteral, create_scanner, render_token, tokenize,
)
import syntax
from syntax import (
  BooleanLiteral, Do, FunctionCall, Iter, ListLiteral, Loop, Print, Program, Set,
  Then, Where, With, placeholder_statement,
)


class TestScanner:
  """Test the scanner's classification rules"""

  def test_statement_tokens(self):
    """Test a whole statement scans in order with an end marker"""
    assert tokenize("with x as 1") == [
      Keyword("with"), Identifier("x"), Keyword("as"), IntegerLiteral(1), EndOfInput()
    ]

  def test_every_keyword(self):
    """Test the fixed keyword set"""
    for word in ["with", "set", "as", "to", "then", "do", "print",
                 "where", "otherwise", "loop", "iter"]:
      assert tokenize(word)[0] == Keyword(word)
    assert len(KEYWORDS) == 11

  def test_non_keywords_are_identifiers(self):
    """Test that `in`, `true` and near-keywords stay identifiers"""
    for word in ["in", "true", "false", "printer", "With", "my_var2"]:
      assert tokenize(word)[0] == Identifier(word)

  def test_integer_literal(self):
    """Test digit runs become integers"""
    assert tokenize("42")[0] == IntegerLiteral(42)
    assert tokenize("9223372036854775807")[0] == IntegerLiteral(9223372036854775807)

  def test_integer_overflow_collapses_to_zero(self):
    """Test that a numeral outside 64 bits scans as 0 instead of failing"""
    assert tokenize("99999999999999999999") == [IntegerLiteral(0), EndOfInput()]

  def test_digits_then_letters(self):
    """Test that a digit run stops at the first letter"""
    assert tokenize("12abc") == [IntegerLiteral(12), Identifier("abc"), EndOfInput()]

  def test_operators_and_separators(self):
    """Test single-character operator and separator tokens"""
    tokens = tokenize("+ - * / = ( ) { } [ ] : ; , .")
    assert tokens[:5] == [Operator(s) for s in "+-*/="]
    assert tokens[5:-1] == [Separator(s) for s in "(){}[]:;,."]
    assert tokens[-1] == EndOfInput()

  def test_unknown_characters_are_skipped(self):
    """Test that characters no rule accepts vanish silently"""
    assert tokenize("x @ # $ ! y") == [Identifier("x"), Identifier("y"), EndOfInput()]

  def test_leading_underscore_is_skipped(self):
    """Test that an identifier must start with a letter"""
    assert tokenize("_x") == [Identifier("x"), EndOfInput()]

  def test_string_literal(self):
    """Test string literals keep their contents verbatim"""
    assert tokenize('"hello, world!"')[0] == StringLiteral("hello, world!")
    assert tokenize('"a\tb"')[0] == StringLiteral("a\tb")
    assert tokenize('""')[0] == StringLiteral("")

  def test_unterminated_string_runs_to_end(self):
    """Test an unterminated string consumes the rest of the input"""
    assert tokenize('print "abc def') == [
      Keyword("print"), StringLiteral("abc def"), EndOfInput()
    ]

  def test_no_escape_sequences(self):
    """Test that a backslash does not escape the closing quote"""
    assert tokenize(r'"a\"b"') == [
      StringLiteral("a\\"), Identifier("b"), StringLiteral(""), EndOfInput()
    ]

  def test_whitespace_is_insignificant(self):
    """Test newlines and tabs separate tokens and nothing more"""
    assert tokenize("print\n\t 1") == tokenize("print 1")

  def test_tokens_are_pulled_one_at_a_time(self):
    """Test the scanner hands out tokens lazily and then repeats the end marker"""
    scanner = create_scanner("print 1")
    assert scanner.next_token() == Keyword("print")
    assert scanner.next_token() == IntegerLiteral(1)
    assert scanner.next_token() == EndOfInput()
    assert scanner.next_token() == EndOfInput()

  def test_render_round_trip(self):
    """Test re-rendering a token gives back its source text"""
    for text in ["with", "tomato", "42", '"hello, world!"', "+", ";"]:
      assert render_token(tokenize(text)[0]) == text


class TestStatementParsing:
  """Test statement shapes"""

  def test_set_then_print(self, parser):
    """Test `set` followed by a `then` statement"""
    result = parser.parse_string("set x to 5 then print x")
    assert result.ok
    assert result.program == Program((
      Set("x", syntax.IntegerLiteral(5)),
      Then(Print(syntax.Identifier("x"))),
    ))

  def test_with_statement(self, parser):
    """Test `with` consumes its `as` continuation"""
    result = parser.parse_string('with x as "a" print x')
    assert result.ok
    assert result.program.statements == (
      With("x", syntax.StringLiteral("a")),
      Print(syntax.Identifier("x")),
    )

  def test_where_with_otherwise(self, parser):
    """Test both branches are parsed as their own programs"""
    result = parser.parse_string('where true do print "A" otherwise do print "B"')
    assert result.ok
    assert result.program.statements == (
      Where(
        BooleanLiteral(True),
        Program((Do(Program((Print(syntax.StringLiteral("A")),))),)),
        Program((Do(Program((Print(syntax.StringLiteral("B")),))),)),
      ),
    )

  def test_where_without_otherwise(self, parser):
    """Test the false branch is absent rather than empty"""
    result = parser.parse_string('where false do print "A"')
    (where,) = result.program.statements
    assert where.false_branch is None

  def test_otherwise_binds_to_innermost_where(self, parser):
    """Test nested `where` statements each take one `otherwise`"""
    result = parser.parse_string('where a do where b do print 1 otherwise do print 2 otherwise do print 3')
    assert result.ok
    (outer,) = result.program.statements
    (outer_do,) = outer.true_branch.statements
    (inner,) = outer_do.body.statements
    assert inner.false_branch == Program((Do(Program((Print(syntax.IntegerLiteral(2)),))),))
    assert outer.false_branch == Program((Do(Program((Print(syntax.IntegerLiteral(3)),))),))

  def test_iter_statement(self, parser):
    """Test `iter name in expression body`"""
    result = parser.parse_string('iter c in "ab" do print c')
    assert result.ok
    assert result.program.statements == (
      Iter("c", syntax.StringLiteral("ab"), Do(Program((Print(syntax.Identifier("c")),)))),
    )

  def test_loop_statement(self, parser):
    """Test `loop` wraps one statement"""
    result = parser.parse_string('loop do print "x"')
    assert result.program.statements == (
      Loop(Do(Program((Print(syntax.StringLiteral("x")),)))),
    )

  def test_do_block_runs_to_end(self, parser):
    """Test a `do` block owns every statement after it"""
    result = parser.parse_string('do print 1 print 2')
    (block,) = result.program.statements
    assert len(block.body) == 2


class TestExpressionParsing:
  """Test the expression grammar"""

  def test_boolean_words(self, parser):
    """Test `true` and `false` become boolean literals"""
    result = parser.parse_string("print true print false")
    assert [s.expression for s in result.program] == [BooleanLiteral(True), BooleanLiteral(False)]

  def test_list_literal(self, parser):
    """Test list literals keep their member expressions"""
    result = parser.parse_string('print [1, "a", x]')
    assert result.ok
    assert result.program.statements[0].expression == ListLiteral((
      syntax.IntegerLiteral(1), syntax.StringLiteral("a"), syntax.Identifier("x"),
    ))

  def test_function_call(self, parser):
    """Test calls keep their name and arguments"""
    result = parser.parse_string("print f(1, 2) print g()")
    assert result.ok
    assert result.program.statements[0].expression == FunctionCall(
      "f", (syntax.IntegerLiteral(1), syntax.IntegerLiteral(2)))
    assert result.program.statements[1].expression == FunctionCall("g", ())

  def test_operators_are_not_composed(self, parser):
    """Test that `1 + 2` is not an expression"""
    result = parser.parse_string("print 1 + 2")
    assert result.program.statements[0] == Print(syntax.IntegerLiteral(1))
    assert len(result.program) == 3
    assert len(result.diagnostics) == 2


class TestErrorRecovery:
  """Test statement-level recovery with placeholders"""

  def test_identifier_cannot_start_statement(self, parser):
    """Test a stray identifier becomes a placeholder print"""
    result = parser.parse_string("x print 1")
    assert result.program.statements == (
      placeholder_statement("Unexpected Identifier."),
      Print(syntax.IntegerLiteral(1)),
    )
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].stage == "parse"

  def test_with_missing_identifier(self, parser):
    """Test recovery skips the offending token and carries on"""
    result = parser.parse_string("with 5 print 1")
    assert result.program.statements == (
      placeholder_statement("No Identifier (With)"),
      Print(syntax.IntegerLiteral(1)),
    )
    assert "Expected identifier after `with`" in result.diagnostics[0].message

  def test_set_missing_to(self, parser):
    """Test `set` without `to`"""
    result = parser.parse_string("set x 5 print x")
    assert result.program.statements == (
      placeholder_statement("No Expression (Set)"),
      Print(syntax.Identifier("x")),
    )

  def test_bad_expression_keeps_statement(self, parser):
    """Test a bad expression inside a good statement shape"""
    result = parser.parse_string("print = print 2")
    assert result.program.statements == (
      Print(syntax.StringLiteral("No Expression.")),
      Print(syntax.IntegerLiteral(2)),
    )
    assert len(result.diagnostics) == 1

  def test_stray_otherwise(self, parser):
    """Test `otherwise` outside a `where`"""
    result = parser.parse_string("otherwise print 1")
    assert result.program.statements[0] == placeholder_statement("Unknown Keyword.")
    assert len(result.program) == 2

  def test_truncated_input(self, parser):
    """Test statements cut off by the end of input"""
    result = parser.parse_string("print")
    assert result.program.statements == (Print(syntax.StringLiteral("No Expression.")),)
    assert "end of input" in result.diagnostics[0].message

    result = parser.parse_string("then")
    assert result.program.statements == (Then(placeholder_statement("No Statement.")),)

  def test_unclosed_list(self, parser):
    """Test a list missing its closing bracket keeps what it has"""
    result = parser.parse_string("print [1, 2")
    assert result.program.statements[0].expression == ListLiteral(
      (syntax.IntegerLiteral(1), syntax.IntegerLiteral(2)))
    assert len(result.diagnostics) == 1


class TestParseAndCheck:
  """Test that parse() hands the tree to the checker"""

  def test_parse_runs_checker(self, parser):
    """Test parse() fails when the checker does"""
    with pytest.raises(ClariceCheckError):
      parser.parse("print y")

  def test_parse_returns_symbols(self, parser):
    """Test parse() keeps the tree and the checked names"""
    result = parser.parse("set x to 1 then print x")
    assert len(result.program) == 2
    assert "x" in result.symbols
