"""
Error handling for the While evaluator
Parse errors carry detailed context; runtime errors mirror the evaluator's
error taxonomy (unbound variable, ill-typed operand, undefined state)
"""

from typing import List, Optional, Dict
from pyparsing import ParseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None,
    filename: str = "<input>"
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or [],
        'filename': filename
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error in {error['filename']} at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    # pyparsing doesn't always expose what it expected, so read the message
    msg = str(exc)
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
    if expected_match:
        return [expected_match.group(1)]
    return ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if 0 < line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "end of input"


def generate_suggestions(got: str, expected: List[str], source_line: str = "") -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if re.search(r"[A-Za-z_]\w*\s*=(?!=)", source_line) and ":=" not in source_line:
        suggestions.append("Assignment is written 'x := a', '=' only compares numbers")

    if got.startswith("'{") or got.startswith("'}"):
        suggestions.append("Check that every '{' block has a matching '}'")

    if got.startswith("';"):
        suggestions.append("';' separates statements, it cannot start or follow another ';'")

    if "else" in got:
        suggestions.append("A conditional needs both branches: 'if b then S1 else S2'")

    if "then" in str(expected) or "do" in str(expected):
        suggestions.append("Guards are boolean expressions such as 'x < 3' or 'not (x = 0)'")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str, filename: str = "<input>") -> Dict:
    """Convert pyparsing exception to an enhanced error dict"""
    line_num = exc.lineno
    col_num = exc.column
    lines = source_text.split('\n')
    source_line = lines[line_num - 1] if 0 < line_num <= len(lines) else ""

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(got, expected, source_line)

    return make_parse_error(
        message=str(exc),
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions,
        filename=filename
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class WhileParseError(Exception):
    """Syntax error in While source text"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    @classmethod
    def from_dict(cls, error: Dict) -> 'WhileParseError':
        return cls(**error)

    def __str__(self) -> str:
        if not self.line:
            return f"Parse error: {self.message}"
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions, self.filename
        )
        return format_parse_error(error_dict)


class WhileErrorHandler:
    """Turns pyparsing exceptions for one source text into WhileParseError"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseException) -> WhileParseError:
        error_dict = enhance_parse_exception_dict(exc, self.source_text, self.filename)
        return WhileParseError.from_dict(error_dict)


class WhileRuntimeError(Exception):
    """Error reported while evaluating a program"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnboundVariableError(WhileRuntimeError):
    """An expression read a name the state does not bind"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unbound variable: {name}")


class IllTypedOperandError(WhileRuntimeError):
    """An operator was applied to values outside its domain"""
    def __init__(self, message: str, operator_name: str = "", operand_types: Optional[List[str]] = None):
        self.operator_name = operator_name
        self.operand_types = operand_types or []
        super().__init__(message)


class UndefinedStateError(WhileRuntimeError):
    """Applied the undefined state transformer (bottom)"""
    def __init__(self, message: str = "State transformer is undefined on this state"):
        super().__init__(message)


class BudgetExceededError(Exception):
    """Evaluation did not terminate within the caller's step or time budget

    Not a WhileRuntimeError: running out of budget says nothing about the
    program's meaning, only that the caller stopped waiting for it.
    """
    def __init__(self, message: str, steps: int = 0, elapsed: Optional[float] = None):
        self.message = message
        self.steps = steps
        self.elapsed = elapsed
        super().__init__(message)
