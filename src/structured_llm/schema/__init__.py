"""Schema handling for structured extraction.

This module provides:
- Screening of schemas for well-formedness and the supported keyword subset
- Local ``$ref`` resolution into a fully inlined tree
- Compilation of schemas into minimal prompt shapes and descriptions
- Validation of extracted values with structured errors
- Multi-source schema resolution with caching
"""

from .compiler import (
    CompiledPrompt,
    collect_descriptions,
    compile_schema,
    minimal_schema,
)
from .guard import (
    DISALLOWED_KEYWORDS,
    check_schema,
    ensure_valid_schema,
    find_disallowed_keyword,
)
from .manager import SchemaManager
from .refs import dereference_schema
from .validators import (
    ResultValidator,
    ValidationIssue,
    ValidationOutcome,
    format_validation_errors,
)

__all__ = [
    # Compiler
    "CompiledPrompt",
    "collect_descriptions",
    "compile_schema",
    "minimal_schema",
    # Guard
    "DISALLOWED_KEYWORDS",
    "check_schema",
    "ensure_valid_schema",
    "find_disallowed_keyword",
    # Manager
    "SchemaManager",
    # References
    "dereference_schema",
    # Validators
    "ResultValidator",
    "ValidationIssue",
    "ValidationOutcome",
    "format_validation_errors",
]
