"""Pattern definitions for GlideQuery script screening and linting.

This module is pure data. The security screener uses the blacklist and the
operation table; the syntax validator uses the method, operator and field
flag tables. Nothing here has behavior beyond simple lookups.
"""

from dataclasses import dataclass

DEFAULT_MAX_SCRIPT_LENGTH = 10000

# Blacklisted patterns
# Matched case-insensitively against the whole script. The pattern source
# is what appears in violation messages.
BLACKLISTED_PATTERNS = [
    r"gs\.executeNow\s*\(",
    r"gs\.eval\s*\(",
    r"eval\s*\(",
    r"Function\s*\(",
    r"GlideRecord\s*\(",  # GlideQuery only
    r"GlideAggregate\s*\(",
    r"GlideSysAttachment",
    r"GlideScriptedProcessor",
    r"XMLDocument",
    r"SOAPMessage",
    r"require\s*\(",  # module loading
    r"import\s+",  # ES6 imports
    r"\.readLine\(",  # file system access
    r"\.write\(",
    r"\.getFile\(",
    r"\.setFile\(",
    r"GlideHTTPRequest",  # network requests
    r"RESTMessageV2",
    r"SOAPMessageV2",
    r"new\s+Packages\.",  # Rhino Java bridge
    r"java\.io\.",
    r"java\.net\.",
    r"java\.lang\.Runtime",
    r"XMLHttpRequest",
    r"fetch\s*\(",
]


@dataclass(frozen=True)
class OperationSpec:
    """A named GlideQuery operation with its policy flags.

    Attributes:
        name: Method name as written in scripts (e.g. "deleteMultiple")
        requires_confirmation: Caller should confirm before running it
        writes: Persists changes on the instance
    """

    name: str
    requires_confirmation: bool = False
    writes: bool = False


# Unified operation table
# Shared by the screener (confirmation flags) and the executor (write
# warnings in test mode) so the two lists cannot drift apart.
OPERATIONS = [
    OperationSpec("insert", writes=True),
    OperationSpec("update", writes=True),
    OperationSpec("updateMultiple", requires_confirmation=True, writes=True),
    OperationSpec("delete", writes=True),
    OperationSpec("deleteMultiple", requires_confirmation=True, writes=True),
    OperationSpec("insertOrUpdate", writes=True),
    OperationSpec("disableWorkflow", requires_confirmation=True),
    OperationSpec("disableAutoSysFields", requires_confirmation=True),
    OperationSpec("forceUpdate", requires_confirmation=True),
]

CONFIRMATION_OPERATIONS = [op.name for op in OPERATIONS if op.requires_confirmation]
WRITE_OPERATIONS = [op.name for op in OPERATIONS if op.writes]

# Every method the fluent API exposes, including Stream and Optional helpers
VALID_METHODS = [
    "where", "orWhere", "whereNull", "whereNotNull", "orWhereNull", "orWhereNotNull",
    "select", "selectOne", "get", "getBy",
    "insert", "update", "updateMultiple", "insertOrUpdate", "deleteMultiple",
    "orderBy", "orderByDesc", "limit",
    "disableWorkflow", "disableAutoSysFields", "forceUpdate", "withAcls",
    "withSecurityDataFilters",
    "count", "avg", "sum", "min", "max", "aggregate", "groupBy", "having",
    "toGlideRecord", "parse",
    "forEach", "map", "filter", "reduce", "toArray", "skip",
    "orElse", "isPresent", "flatMap",
]

# Calls that conclude a chain and trigger work on the instance
TERMINAL_OPERATIONS = [
    "select", "selectOne", "get", "getBy",
    "insert", "update", "updateMultiple", "insertOrUpdate", "deleteMultiple",
    "count", "avg", "sum", "min", "max",
]

VALID_OPERATORS = [
    "=", "!=", ">", ">=", "<", "<=",
    "IN", "NOT IN", "STARTSWITH", "ENDSWITH", "CONTAINS", "DOES NOT CONTAIN",
    "INSTANCEOF", "SAMEAS", "NSAMEAS", "GT_FIELD", "LT_FIELD",
    "GT_OR_EQUALS_FIELD", "LT_OR_EQUALS_FIELD", "BETWEEN",
    "DYNAMIC", "EMPTYSTRING", "ANYTHING", "LIKE", "NOT LIKE", "ON",
]

VALID_FIELD_FLAGS = ["$DISPLAY", "$CURRENCY_CODE", "$CURRENCY_DISPLAY", "$CURRENCY_STRING"]

# Plausible-but-wrong method names mapped to a suggestion
UNDEFINED_METHODS = [
    ("selectAll", "Use .select() instead"),
    ("findOne", "Use .selectOne() or .get() instead"),
    ("find", "Use .select() instead"),
    ("query", "Use .select() instead (GlideQuery does not have .query())"),
    ("addQuery", "Use .where() instead (GlideQuery method)"),
    ("addEncodedQuery", "Use GlideQuery.parse() instead"),
    ("next", "Use .forEach() or .toArray() on Stream results instead"),
    ("getValue", "Use direct field access (e.g., record.field) instead"),
    ("setValue", "Use .update() or .insert() with object syntax instead"),
]
