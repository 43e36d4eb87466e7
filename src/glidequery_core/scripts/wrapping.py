"""Test-mode script wrapping.

Test mode caps the number of records a script can return. The cap is
applied on the instance by embedding the caller's script, unchanged, as
the expression of a wrapper function. If the expression yields an array or
a Stream, the wrapper returns a tagged envelope instead:

    {"__testMode": true, "__truncated": bool, "__originalCount": n, "data": [...]}

Only single-expression scripts can be embedded safely. A shallow scanner
(skipping strings and comments) refuses scripts with top-level statement
separators, statement keywords at the start of a top-level line, lines
that would be split into statements by automatic semicolon insertion, or
unbalanced brackets, since those would either lose their result or break
out of the wrapper.
"""

import re

from glidequery_core.exceptions import UnsupportedScriptError

TEST_MODE_TAG = "__testMode"
TRUNCATED_TAG = "__truncated"
ORIGINAL_COUNT_TAG = "__originalCount"

# Matched at the first token of each top-level line
_STATEMENT_KEYWORDS = re.compile(
    r"(var|let|const|if|for|while|do|switch|try|function|return|throw|class)\b"
)
_BINARY_KEYWORDS = re.compile(r"(in|instanceof)\b")
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = set(_OPENERS.values())
_QUOTES = "'\"`"


def _ends_operand(ch: str) -> bool:
    return ch.isalnum() or ch in "_$)]}" or ch in _QUOTES


def _starts_operand(ch: str) -> bool:
    return ch.isalnum() or ch in "_$" or ch in _QUOTES


_WRAPPER_TEMPLATE = """(function() {{
  var __testModeMaxResults = {max_results};
  var result = (
{body}
  );
  var array = null;
  if (result && typeof result.toArray === 'function') {{
    array = result.toArray();
  }} else if (Array.isArray(result)) {{
    array = result;
  }}
  if (array === null) {{
    return result;
  }}
  return {{
    {test_mode_tag}: true,
    {truncated_tag}: array.length > __testModeMaxResults,
    {original_count_tag}: array.length,
    data: array.slice(0, __testModeMaxResults)
  }};
}})();"""


def _strip_trailing_semicolons(script: str) -> str:
    body = script.strip()
    while body.endswith(";"):
        body = body[:-1].rstrip()
    return body


def expression_problem(script: str) -> str | None:
    """
    Explain why a script cannot be embedded as an expression.

    Args:
        script: Script content to check

    Returns:
        Reason string, or None if the script is expression-shaped
    """
    body = _strip_trailing_semicolons(script)
    if not body:
        return "script is empty"

    stack: list[str] = []
    quote: str | None = None
    # Last character outside strings and comments
    last: str | None = None
    line_start = True
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch.isspace():
            if ch == "\n" and not stack:
                line_start = True
            i += 1
            continue
        if body.startswith("//", i):
            newline = body.find("\n", i)
            if newline == -1:
                break
            i = newline
            continue
        if body.startswith("/*", i):
            end = body.find("*/", i + 2)
            if end == -1:
                return "unterminated block comment"
            if not stack and "\n" in body[i:end]:
                line_start = True
            i = end + 2
            continue

        if line_start:
            keyword = _STATEMENT_KEYWORDS.match(body, i)
            if keyword and last is None:
                return f"script starts with a '{keyword.group(1)}' statement"
            if keyword:
                return f"script contains a '{keyword.group(1)}' statement"
            # A newline between two operands ends the statement
            if (
                last is not None
                and _ends_operand(last)
                and _starts_operand(ch)
                and not _BINARY_KEYWORDS.match(body, i)
            ):
                return "script contains multiple statements"
            line_start = False

        if ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return f"unbalanced '{ch}' at offset {i}"
        elif ch == ";" and not stack:
            return "script contains multiple statements"
        last = ch
        i += 1

    if quote is not None:
        return "unterminated string literal"
    if stack:
        return "unbalanced brackets"
    return None


def wrap_for_test_mode(script: str, max_results: int) -> str:
    """
    Embed a script in the result-limiting test-mode wrapper.

    Args:
        script: Single-expression GlideQuery script
        max_results: Maximum number of records to return

    Returns:
        Wrapped script text

    Raises:
        ValueError: If max_results is not positive
        UnsupportedScriptError: If the script is not a single expression
    """
    if max_results < 1:
        raise ValueError(f"max_results must be at least 1, got {max_results}")

    problem = expression_problem(script)
    if problem is not None:
        raise UnsupportedScriptError(problem)

    return _WRAPPER_TEMPLATE.format(
        max_results=int(max_results),
        body=_strip_trailing_semicolons(script),
        test_mode_tag=TEST_MODE_TAG,
        truncated_tag=TRUNCATED_TAG,
        original_count_tag=ORIGINAL_COUNT_TAG,
    )
