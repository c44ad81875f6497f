"""Restricted expression evaluation.

Conditions and mapping transforms are written by workflow authors in a
JavaScript flavoured syntax (``context.count > 3 && context.ok``,
``x => x.length``). They are evaluated with simpleeval, never with the
host ``eval``: JavaScript operators are rewritten to their Python
equivalents outside string literals, and a small set of JavaScript
members (``length``, ``toUpperCase()`` ...) is provided on values.
"""

from __future__ import annotations

import ast
import re
from typing import Any, Callable

from simpleeval import EvalWithCompoundTypes, InvalidExpression

from nodeweave.errors.exceptions import ExpressionError, TransformError

JS_CONSTANTS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "True": True,
    "False": False,
    "None": None,
}


def _js_number(value: Any) -> float | int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    number = float(str(value).strip())
    return int(number) if number.is_integer() else number


def _js_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


SAFE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "len": len,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "abs": abs,
    "min": min,
    "max": max,
    "round": round,
    "any": any,
    "all": all,
    "sorted": sorted,
    "Number": _js_number,
    "String": _js_string,
    "Boolean": bool,
}


def _js_member(value: Any, name: str) -> Any:
    """Resolve a JavaScript member on a Python value, or raise AttributeError."""
    if name == "length" and isinstance(value, (str, list, tuple, dict)):
        return len(value)
    if isinstance(value, str):
        methods: dict[str, Callable[..., Any]] = {
            "toUpperCase": value.upper,
            "toLowerCase": value.lower,
            "trim": value.strip,
            "includes": lambda sub: sub in value,
            "startsWith": value.startswith,
            "endsWith": value.endswith,
            "split": value.split,
            "indexOf": value.find,
            "toString": lambda: value,
        }
        if name in methods:
            return methods[name]
    if isinstance(value, (list, tuple)):
        if name == "includes":
            return lambda item: item in value
        if name == "indexOf":
            return lambda item: value.index(item) if item in value else -1
        if name == "join":
            return lambda sep=",": sep.join(_js_string(v) for v in value)
    if isinstance(value, (int, float)) and name == "toString":
        return lambda: _js_string(value)
    raise AttributeError(name)


class ExpressionEvaluator(EvalWithCompoundTypes):
    """simpleeval evaluator with JavaScript member aliases.

    Attribute access prefers mapping keys, so ``context.value`` reads
    ``context["value"]``.
    """

    def __init__(
        self,
        names: dict[str, Any] | None = None,
        functions: dict[str, Callable[..., Any]] | None = None,
    ) -> None:
        super().__init__(
            names={**JS_CONSTANTS, **(names or {})},
            functions={**SAFE_FUNCTIONS, **(functions or {})},
        )

    def _eval_attribute(self, node: ast.Attribute) -> Any:
        if node.attr.startswith("_"):
            return super()._eval_attribute(node)
        value = self._eval(node.value)
        if isinstance(value, dict) and node.attr in value:
            return value[node.attr]
        try:
            return _js_member(value, node.attr)
        except AttributeError:
            pass
        if isinstance(value, dict):
            # Missing keys read as undefined, as in JavaScript
            return None
        return super()._eval_attribute(node)


_TWO_CHAR = {"&&": " and ", "||": " or "}


def translate_js(expression: str) -> str:
    """Rewrite JavaScript operators to Python outside string literals."""
    out: list[str] = []
    quote: str | None = None
    i = 0
    n = len(expression)
    while i < n:
        ch = expression[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(expression[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue
        if ch in ("'", '"'):
            quote = ch
            out.append(ch)
            i += 1
            continue
        if expression.startswith("===", i) or expression.startswith("!==", i):
            out.append("==" if ch == "=" else "!=")
            i += 3
            continue
        pair = expression[i:i + 2]
        if pair in _TWO_CHAR:
            out.append(_TWO_CHAR[pair])
            i += 2
            continue
        if ch == "!" and not expression.startswith("!=", i):
            out.append(" not ")
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out).strip()


def evaluate(expression: str, names: dict[str, Any] | None = None) -> Any:
    """Evaluate a JavaScript flavoured expression against ``names``.

    Raises:
        ExpressionError: On syntax errors, unknown names or runtime failures.
    """
    evaluator = ExpressionEvaluator(names=names)
    try:
        return evaluator.eval(translate_js(expression))
    except SyntaxError as e:
        raise ExpressionError(f"SyntaxError: {e.msg}", expression=expression) from e
    except InvalidExpression as e:
        raise ExpressionError(str(e), expression=expression) from e
    except Exception as e:
        raise ExpressionError(f"{type(e).__name__}: {e}", expression=expression) from e


_ARROW = re.compile(
    r"^\s*(?:\(\s*([A-Za-z_]\w*)\s*\)|([A-Za-z_]\w*))\s*=>\s*(.+?)\s*$", re.DOTALL
)
_LAMBDA = re.compile(r"^\s*lambda\s+([A-Za-z_]\w*)\s*:\s*(.+?)\s*$", re.DOTALL)
_BLOCK_BODY = re.compile(r"^\{\s*return\s+(.+?);?\s*\}$", re.DOTALL)


def compile_transform(transform: str) -> Callable[[Any], Any]:
    """Compile a single-argument function expression into a callable.

    Accepted forms are ``x => expr``, ``(x) => expr``,
    ``x => { return expr; }`` and ``lambda x: expr``.

    Raises:
        TransformError: If the text is not a single-argument function or
            its body does not parse.
    """
    arrow = _ARROW.match(transform)
    if arrow:
        param = arrow.group(1) or arrow.group(2)
        body = arrow.group(3)
        block = _BLOCK_BODY.match(body)
        if block:
            body = block.group(1)
        body = translate_js(body)
    else:
        lam = _LAMBDA.match(transform)
        if not lam:
            raise TransformError(transform, "expected a single-argument function")
        param, body = lam.group(1), lam.group(2)

    evaluator = ExpressionEvaluator()
    try:
        parsed = evaluator.parse(body)
    except SyntaxError as e:
        raise TransformError(transform, f"SyntaxError: {e.msg}") from e
    except InvalidExpression as e:
        raise TransformError(transform, str(e)) from e

    def apply(value: Any) -> Any:
        runner = ExpressionEvaluator(names={param: value})
        try:
            return runner.eval(body, previously_parsed=parsed)
        except Exception as e:
            raise TransformError(transform, str(e)) from e

    return apply


def js_type_name(value: Any) -> str:
    """Name of a value's type as the workflow editor displays it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
