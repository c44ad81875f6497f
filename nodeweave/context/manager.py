"""Context manager.

Resolves variables and JSONPath expressions, evaluates simple
conditions, substitutes ``{{name}}`` templates and maps values into and
out of nodes. Supports simple mode (everything is passed automatically)
and advanced mode (explicit mappings).
"""

from __future__ import annotations

import json
import operator
import re
from typing import Any, Mapping

from jsonpath_ng.ext import parse as jsonpath_parse

from nodeweave.context.expressions import compile_transform, js_type_name
from nodeweave.core.context import WorkflowExecutionContext
from nodeweave.core.nodes import BaseNode
from nodeweave.core.types import (
    ContextConfig,
    ContextMapping,
    NodeContextResult,
    NodeExecutionResult,
    VariableExtractionResult,
    VariableReference,
)
from nodeweave.errors.exceptions import (
    ContextError,
    ExpressionError,
    NoResultsFoundError,
    VariableNotFoundError,
)
from nodeweave.logging import get_logger

_VARIABLE_REF = re.compile(r"^\{\{\s*(.+?)\s*\}\}$")
_TEMPLATE_REF = re.compile(r"\{\{(.+?)\}\}")
_QUOTED = re.compile(r"'(?:[^'\\]|\\.)*'" r'|"(?:[^"\\]|\\.)*"')
# Longest first so that === wins over ==
_OPERATORS = ("===", "!==", "==", "!=", ">=", "<=", ">", "<")
_OPENERS = {"[": "]", "(": ")", "{": "}"}
_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

_ORDERING = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}

_MISSING = object()


def _as_number(value: Any) -> Any:
    """Return value as a number when it is one or parses as one, else _MISSING."""
    if isinstance(value, bool):
        return _MISSING
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMBER.match(value.strip()):
        return float(value)
    return _MISSING


def _loose_equal(left: Any, right: Any) -> bool:
    a, b = _as_number(left), _as_number(right)
    if a is not _MISSING and b is not _MISSING:
        return a == b
    return left == right


def _split_condition(expression: str) -> tuple[str, str, str] | None:
    """Split on the first operator outside brackets, braces and quotes.

    Comparisons inside a JSONPath filter such as ``[?(@.n > 1)]`` stay
    part of the operand.
    """
    closers: list[str] = []
    quote = None
    i = 0
    while i < len(expression):
        char = expression[i]
        if quote:
            if char == "\\":
                i += 1
            elif char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            closers.append(_OPENERS[char])
        elif closers and char == closers[-1]:
            closers.pop()
        elif not closers and i > 0:
            for op in _OPERATORS:
                if expression.startswith(op, i):
                    left, right = expression[:i].strip(), expression[i + len(op):].strip()
                    if left and right:
                        return left, op, right
                    return None
        i += 1
    return None


def _path_key(key: str) -> str:
    """Render ``key`` as a quoted JSONPath member, which any id or name survives."""
    escaped = key.replace("\\", "\\\\").replace("'", "\\'")
    return f"['{escaped}']"


def stringify(value: Any) -> str:
    """Render a value the way templates display it."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


class ContextManager:
    """Builds node contexts and resolves references against them.

    Example:
        >>> manager = ContextManager()
        >>> manager.evaluate_jsonpath("$.books[0].title", {"books": [{"title": "Dune"}]})
        'Dune'
        >>> manager.substitute("Hello {{user}}", {"variables": {"user": "Ana"}})
        'Hello Ana'
    """

    def evaluate_jsonpath(self, expression: str, data: Any) -> Any:
        """Resolve a ``{{name}}`` reference or a JSONPath against ``data``.

        A path containing a wildcard or recursive descent always returns
        the list of matches; any other path returns its single match.

        Raises:
            VariableNotFoundError: ``{{name}}`` is neither in ``variables`` nor at the root.
            NoResultsFoundError: The JSONPath matched nothing.
            ExpressionError: The JSONPath does not parse.
        """
        if isinstance(data, WorkflowExecutionContext):
            data = data.as_scope()

        expression = expression.strip()
        ref = _VARIABLE_REF.match(expression)
        if ref:
            name = ref.group(1)
            variables = data.get("variables") if isinstance(data, Mapping) else None
            if isinstance(variables, Mapping) and name in variables:
                return variables[name]
            if isinstance(data, Mapping) and name in data:
                return data[name]
            raise VariableNotFoundError(name)

        try:
            compiled = jsonpath_parse(expression)
        except Exception as e:
            raise ExpressionError(
                f"JSONPath evaluation failed: {e}", expression=expression
            ) from e

        matches = [match.value for match in compiled.find(data)]
        if not matches:
            raise NoResultsFoundError(expression)

        unquoted = _QUOTED.sub("", expression)
        if "*" in unquoted or ".." in unquoted or len(matches) > 1:
            return matches
        return matches[0]

    def _parse_operand(self, text: str, data: Any) -> Any:
        text = text.strip()
        if text.startswith("{{") or text.startswith("$"):
            return self.evaluate_jsonpath(text, data)
        if _NUMBER.match(text):
            number = float(text)
            return int(number) if number.is_integer() and "." not in text else number
        literals = {"true": True, "false": False, "null": None, "undefined": None}
        if text in literals:
            return literals[text]
        if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
            return text[1:-1]
        return text

    def evaluate_condition(
        self, expression: str, data: Any, *, strict: bool = False
    ) -> bool:
        """Evaluate ``<left> <op> <right>``.

        ``===`` and ``!==`` compare loosely, like ``==`` and ``!=``.
        Numeric strings are compared as numbers. Operands that cannot be
        ordered compare false.

        Args:
            expression: Condition text, e.g. ``$.score >= 70``.
            data: Evaluation root.
            strict: Raise resolution errors instead of returning False.
        """
        try:
            parts = _split_condition(expression.strip())
            if parts is None:
                raise ExpressionError(
                    f"Invalid condition format: {expression}", expression=expression
                )
            left_text, op, right_text = parts
            left = self.evaluate_jsonpath(left_text, data)
            right = self._parse_operand(right_text, data)
        except ContextError as e:
            if strict:
                raise
            get_logger().warning(
                "Condition evaluation failed", condition=expression, error=str(e)
            )
            return False

        if op in ("==", "==="):
            return _loose_equal(left, right)
        if op in ("!=", "!=="):
            return not _loose_equal(left, right)

        a, b = _as_number(left), _as_number(right)
        if a is not _MISSING and b is not _MISSING:
            return bool(_ORDERING[op](a, b))
        try:
            return bool(_ORDERING[op](left, right))
        except TypeError:
            return False

    def substitute(self, template: str, data: Any) -> str:
        """Replace every ``{{name}}`` in ``template``.

        Unresolved references are left verbatim.
        """
        if "{{" not in template:
            return template

        def replace(match: re.Match[str]) -> str:
            try:
                value = self.evaluate_jsonpath(f"{{{{{match.group(1)}}}}}", data)
            except ContextError as e:
                get_logger().debug(
                    "Template variable left unresolved", variable=match.group(1), error=str(e)
                )
                return match.group(0)
            return stringify(value)

        return _TEMPLATE_REF.sub(replace, template)

    def _evaluate_mapping(self, mapping: ContextMapping, data: Any) -> Any:
        value = self.evaluate_jsonpath(mapping.source, data)
        if mapping.transform:
            value = compile_transform(mapping.transform)(value)
        return value

    @staticmethod
    def _config_of(node: BaseNode) -> ContextConfig:
        return node.context_config or ContextConfig()

    def build_node_context(
        self,
        node: BaseNode,
        global_context: WorkflowExecutionContext,
    ) -> NodeContextResult:
        """Build the context ``node`` executes against.

        Simple mode exposes all global variables and a ``previousOutputs``
        map of node id to that node's variables. Advanced mode resolves each
        input mapping; if any fails, the call fails as a whole and no
        partial context is returned.
        """
        config = self._config_of(node)
        context: dict[str, Any] = {
            "projectFolder": global_context.project_folder,
            "instanceId": global_context.instance_id,
            "workflowId": global_context.workflow_id,
        }

        if config.mode == "simple":
            context["previousOutputs"] = {
                node_id: dict(result.variables)
                for node_id, result in global_context.node_outputs.items()
            }
            context["variables"] = dict(global_context.variables)
            context["mcpData"] = global_context.mcp_data
            return NodeContextResult(success=True, context=context)

        scope = global_context.as_scope()
        missing: list[str] = []
        for mapping in config.inputs:
            try:
                context[mapping.target] = self._evaluate_mapping(mapping, scope)
            except ContextError as e:
                get_logger().warning(
                    f"Failed to map input {mapping.source} -> {mapping.target}",
                    node=node.id,
                    error=str(e),
                )
                missing.append(mapping.source)

        if missing:
            return NodeContextResult(
                success=False,
                context={},
                missing_variables=missing,
                error=f"Missing variables: {', '.join(missing)}",
            )

        context["mcpData"] = global_context.mcp_data
        return NodeContextResult(success=True, context=context)

    def extract_outputs(
        self,
        node: BaseNode,
        result: NodeExecutionResult,
        global_context: WorkflowExecutionContext,
    ) -> VariableExtractionResult:
        """Extract variables from a node result.

        In advanced mode, sources are evaluated against the workflow scope
        extended with ``currentNodeOutput``; extracted values are also
        written into ``global_context.variables``.
        """
        config = self._config_of(node)
        if config.mode == "simple" or not config.outputs:
            return VariableExtractionResult(
                success=True, variables={"output": result.output}
            )

        scope = {**global_context.as_scope(), "currentNodeOutput": result.output}
        outputs: dict[str, Any] = {}
        warnings: list[str] = []
        for mapping in config.outputs:
            try:
                value = self._evaluate_mapping(mapping, scope)
            except ContextError as e:
                warnings.append(
                    f"Failed to extract {mapping.source} -> {mapping.target}: {e}"
                )
                continue
            outputs[mapping.target] = value
            global_context.variables[mapping.target] = value

        for warning in warnings:
            get_logger().warning(warning, node=node.id)

        return VariableExtractionResult(success=True, variables=outputs, warnings=warnings)

    def get_available_variables(
        self,
        exclude_node_id: str | None,
        global_context: WorkflowExecutionContext,
    ) -> list[VariableReference]:
        """List variables a node can reference, globals first."""
        references = [
            VariableReference(
                node_id="global",
                node_name="Global Variables",
                variable_name=name,
                path=f"{{{{{name}}}}}",
                type=js_type_name(value),
                value=value,
            )
            for name, value in global_context.variables.items()
        ]

        for node_id, result in global_context.node_outputs.items():
            if node_id == exclude_node_id:
                continue
            for name, value in result.variables.items():
                references.append(
                    VariableReference(
                        node_id=node_id,
                        node_name=result.node_name,
                        variable_name=name,
                        path=f"$.nodeOutputs{_path_key(node_id)}.variables{_path_key(name)}",
                        type=js_type_name(value),
                        value=value,
                    )
                )

        return references
