"""
While Language Parser
pyparsing grammar producing the statement and expression trees in syntax.py
"""

from typing import List

from pyparsing import (
    Forward, Keyword, Literal, MatchFirst, Opt, ParseBaseException,
    ParserElement, ParseResults, Regex, StringEnd, Suppress, ZeroOrMore,
    dbl_slash_comment, infix_notation, one_of, python_style_comment, OpAssoc
)

from syntax import (
    Stm, Aexpr, Bexpr, Num, Var, Add, Sub, Mul,
    TrueConst, FalseConst, BoolVar, Eq, Le, Lt, Not, And, Or,
    Skip, Ass, If, While, sequence
)
from error_handling import WhileErrorHandler, WhileParseError

# Enable packrat parsing for performance
ParserElement.enable_packrat()


KEYWORDS = ["skip", "if", "then", "else", "while", "do", "true", "false", "not", "and", "or"]

ARITHMETIC_OPERATORS = {"+": Add, "-": Sub, "*": Mul}
LOGICAL_OPERATORS = {"and": And, "&&": And, "or": Or, "||": Or}


# ============================================================================
# PARSE ACTIONS
# ============================================================================

def _fold_left(tokens: ParseResults, operators: dict):
    """Fold [a, op, b, op, c] into ((a op b) op c)"""
    items = tokens[0]
    result = items[0]
    for i in range(1, len(items), 2):
        result = operators[items[i]](result, items[i + 1])
    return result


def _make_negation(tokens: ParseResults) -> Aexpr:
    operand = tokens[0][1]
    if isinstance(operand, Num):
        return Num(-operand.value)
    return Sub(Num(0), operand)


def _make_comparison(tokens: ParseResults) -> Bexpr:
    left, op, right = tokens[0], tokens[1], tokens[2]
    if op in ("=", "=="):
        return Eq(left, right)
    elif op == "!=":
        return Not(Eq(left, right))
    elif op == "<":
        return Lt(left, right)
    elif op == "<=":
        return Le(left, right)
    elif op == ">":
        return Lt(right, left)
    elif op == ">=":
        return Le(right, left)
    raise ValueError(f"Unknown comparison operator: {op}")


# ============================================================================
# GRAMMAR
# ============================================================================

class WhileGrammar:
    """While grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        keyword = MatchFirst([Keyword(k) for k in KEYWORDS])
        name = Regex(r"[A-Za-z_][A-Za-z0-9_']*")

        def identifier():
            return ~keyword + name.copy()

        # Arithmetic expressions
        integer = Regex(r"\d+").set_parse_action(lambda t: Num(int(t[0])))
        variable = identifier().set_parse_action(lambda t: Var(t[0]))

        aexpr = infix_notation(integer | variable, [
            (Literal("-"), 1, OpAssoc.RIGHT, _make_negation),
            (Literal("*"), 2, OpAssoc.LEFT, lambda t: _fold_left(t, ARITHMETIC_OPERATORS)),
            (one_of("+ -"), 2, OpAssoc.LEFT, lambda t: _fold_left(t, ARITHMETIC_OPERATORS)),
        ])

        # Boolean expressions
        true_const = Keyword("true").set_parse_action(lambda t: TrueConst())
        false_const = Keyword("false").set_parse_action(lambda t: FalseConst())
        comparison = (aexpr + one_of("== != <= >= < > =") + aexpr).set_parse_action(_make_comparison)
        bool_var = identifier().set_parse_action(lambda t: BoolVar(t[0]))

        not_op = Keyword("not") | Literal("!")
        and_op = Keyword("and") | Literal("&&")
        or_op = Keyword("or") | Literal("||")

        bexpr = infix_notation(true_const | false_const | comparison | bool_var, [
            (not_op, 1, OpAssoc.RIGHT, lambda t: Not(t[0][1])),
            (and_op, 2, OpAssoc.LEFT, lambda t: _fold_left(t, LOGICAL_OPERATORS)),
            (or_op, 2, OpAssoc.LEFT, lambda t: _fold_left(t, LOGICAL_OPERATORS)),
        ])

        # Statements
        stm = Forward()
        semicolon = Suppress(";")

        block = (
            (Suppress("{") + stm + Opt(semicolon) + Suppress("}")) |
            (Suppress("(") + stm + Opt(semicolon) + Suppress(")"))
        )
        skip_stm = Keyword("skip").set_parse_action(lambda t: Skip())
        assignment = (identifier() + Suppress(":=") + aexpr).set_parse_action(
            lambda t: Ass(t[0], t[1])
        )

        stm_atom = Forward()
        if_stm = (
            Suppress(Keyword("if")) + bexpr + Opt(Suppress(Keyword("then"))) +
            stm_atom + Suppress(Keyword("else")) + stm_atom
        ).set_parse_action(lambda t: If(t[0], t[1], t[2]))
        while_stm = (
            Suppress(Keyword("while")) + bexpr + Opt(Suppress(Keyword("do"))) + stm_atom
        ).set_parse_action(lambda t: While(t[0], t[1]))

        stm_atom <<= skip_stm | if_stm | while_stm | block | assignment
        stm <<= (stm_atom + ZeroOrMore(semicolon + stm_atom)).set_parse_action(
            lambda t: sequence(list(t))
        )

        comment = Suppress(dbl_slash_comment | python_style_comment)
        empty_program = StringEnd().set_parse_action(lambda t: Skip())
        program = empty_program | (stm + Opt(semicolon) + StringEnd())
        program.ignore(comment)

        self.aexpr = aexpr
        self.bexpr = bexpr
        self.statement = stm
        self.program = program
        self.aexpr_only = aexpr + StringEnd()
        self.bexpr_only = bexpr + StringEnd()
        self.aexpr_only.ignore(comment)
        self.bexpr_only.ignore(comment)

    def _parse(self, element: ParserElement, text: str, filename: str):
        try:
            return element.parse_string(text, parse_all=True)[0]
        except ParseBaseException as e:
            raise WhileErrorHandler(text, filename).enhance_parse_exception(e) from e

    def parse_program(self, text: str, filename: str = "<input>") -> Stm:
        """Parse a complete While program"""
        stm = self._parse(self.program, text, filename)
        if self.debug:
            print(f"Parsed {filename}: {type(stm).__name__}")
        return stm

    def parse_aexpr(self, text: str, filename: str = "<input>") -> Aexpr:
        return self._parse(self.aexpr_only, text, filename)

    def parse_bexpr(self, text: str, filename: str = "<input>") -> Bexpr:
        return self._parse(self.bexpr_only, text, filename)


class WhileParser:
    """Main While parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = WhileGrammar(debug)

    def parse_file(self, filepath: str) -> Stm:
        """Parse a While source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise WhileParseError(f"File not found: {filepath}", filename=filepath)
        except UnicodeDecodeError as e:
            raise WhileParseError(f"Cannot decode file {filepath}: {e}", filename=filepath)
        return self.grammar.parse_program(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> Stm:
        """Parse While source code from string"""
        return self.grammar.parse_program(text, filename)

    def parse_statements(self, texts: List[str]) -> List[Stm]:
        return [self.parse_string(text, f"<program {i}>") for i, text in enumerate(texts)]

    def parse_aexpr(self, text: str) -> Aexpr:
        """Parse a single arithmetic expression"""
        return self.grammar.parse_aexpr(text)

    def parse_bexpr(self, text: str) -> Bexpr:
        """Parse a single boolean expression"""
        return self.grammar.parse_bexpr(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> WhileParser:
    """Create a While parser"""
    return WhileParser(debug=debug)


def create_debug_parser() -> WhileParser:
    """Create a While parser with debug enabled"""
    return WhileParser(debug=True)
