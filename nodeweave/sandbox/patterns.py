"""Dangerous code patterns.

A static scan that runs before sandboxed code is executed. It is a
deny-list and therefore a speed bump rather than a security boundary;
the isolate (JavaScript) and the process boundary (Python) are what
actually contain user code.

Bump PATTERN_TABLE_VERSION whenever an entry is added or changed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

PATTERN_TABLE_VERSION = "2"


@dataclass(frozen=True)
class DangerousPattern:
    """One deny-list entry.

    ``module`` names the module the pattern guards; the entry is skipped
    when that module is listed in the sandbox's allowed modules. Entries
    without a module guard dynamic evaluation and always apply.
    """

    regex: str
    description: str
    languages: frozenset[str]
    module: str | None = None
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", re.compile(self.regex, re.MULTILINE))


_JS = frozenset({"javascript"})
_PY = frozenset({"python"})

DANGEROUS_PATTERNS: tuple[DangerousPattern, ...] = (
    DangerousPattern(
        r"require\s*\(\s*['\"]child_process['\"]\s*\)",
        "child_process module access",
        _JS,
        module="child_process",
    ),
    DangerousPattern(
        r"require\s*\(\s*['\"]fs['\"]\s*\)", "file system module access", _JS, module="fs"
    ),
    DangerousPattern(r"\beval\s*\(", "dynamic code evaluation (eval)", _JS | _PY),
    DangerousPattern(r"\bFunction\s*\(", "dynamic function construction", _JS),
    DangerousPattern(r"__dirname", "directory path access", _JS),
    DangerousPattern(r"__filename", "file path access", _JS),
    DangerousPattern(r"process\.exit", "process termination", _JS),
    DangerousPattern(r"process\.kill", "process signalling", _JS),
    DangerousPattern(r"\bimport\s+os\b", "os module import", _PY, module="os"),
    DangerousPattern(r"\bfrom\s+os(\.\w+)*\s+import\b", "os module import", _PY, module="os"),
    DangerousPattern(
        r"\bimport\s+subprocess\b", "subprocess module import", _PY, module="subprocess"
    ),
    DangerousPattern(
        r"\bfrom\s+subprocess\s+import\b",
        "subprocess module import",
        _PY,
        module="subprocess",
    ),
    DangerousPattern(r"__import__", "dynamic import", _PY),
    DangerousPattern(r"\bexec\s*\(", "dynamic code execution (exec)", _PY),
)


def find_dangerous_pattern(
    code: str,
    language: str,
    allowed_modules: list[str] | tuple[str, ...] = (),
) -> DangerousPattern | None:
    """Return the first pattern ``code`` matches, or None."""
    allowed = set(allowed_modules)
    for pattern in DANGEROUS_PATTERNS:
        if language not in pattern.languages:
            continue
        if pattern.module is not None and pattern.module in allowed:
            continue
        if pattern.compiled.search(code):
            return pattern
    return None
