# File: apitypes/validators.py
"""
apitypes - Description & Configuration Validators
===================================================
A **pure-function validation pipeline** over a loaded
:class:`~apitypes.loader.ApiDescription` and the project configuration.

The type engine itself never rejects input: unresolved references render
as bare names and malformed fragments as ``unknown``.  This module is
where such situations are *reported*, so that the generator and CLI can
surface them (and, with ``--fail-on-warnings``, refuse to continue).

All functions are single-pass over the operations and named schemas.

Usage by downstream modules:
    from apitypes.validators import validate_full
    result = validate_full(description, config)
    if not result.is_valid:
        raise SystemExit(...)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from apitypes.loader import ApiDescription
from apitypes.models import (
    AnyValue,
    ArrayNode,
    CompositeNode,
    GenerateOptions,
    ObjectNode,
    ParameterLocation,
    ProjectConfig,
    ReferenceNode,
    SchemaNode,
)
from apitypes.utils import (
    extract_path_params,
    is_valid_spec_name,
    is_valid_ts_identifier,
    to_type_name,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """
    Accumulates :class:`ValidationIssue` instances produced by the pipeline.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "❌",
                "warning": "⚠️",
                "info": "ℹ️",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            if item.context:
                for k, v in item.context.items():
                    lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Node traversal
# ---------------------------------------------------------------------------


def iter_reference_names(node: SchemaNode) -> Iterator[str]:
    """
    Yield every reference name written inside *node*, without following
    references into the registry.
    """
    stack: List[Any] = [node]
    while stack:
        current: Any = stack.pop()
        if isinstance(current, ReferenceNode):
            yield current.name
        elif isinstance(current, ArrayNode):
            stack.append(current.items)
        elif isinstance(current, ObjectNode):
            stack.extend(reversed([p.node for p in current.properties]))
            if current.open_value is not None and not isinstance(current.open_value, AnyValue):
                stack.append(current.open_value)
        elif isinstance(current, CompositeNode):
            stack.extend(reversed(current.members))


def _operation_roots(description: ApiDescription) -> Iterator[Tuple[str, SchemaNode]]:
    for op in description.operations:
        for param in op.parameters:
            if param.node is not None:
                yield op.operation_id, param.node
        if op.request_body is not None:
            yield op.operation_id, op.request_body
        for node in op.responses.values():
            if node is not None:
                yield op.operation_id, node


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_references(description: ApiDescription) -> ValidationResult:
    """
    Report references that the engine will render as bare names.

    - ``EXTERNAL_REFERENCE``: points outside ``#/components/schemas``.
    - ``UNRESOLVED_REFERENCE``: local name missing from the registry.

    Each distinct name is reported once, with its first owner.
    """
    result: ValidationResult = ValidationResult()
    registry = description.registry
    reported: Set[str] = set()

    owners: List[Tuple[str, SchemaNode]] = [
        (f"schema {name}", node) for name, node in registry.items()
    ]
    owners.extend((f"operation {op_id}", node) for op_id, node in _operation_roots(description))

    for owner, root in owners:
        for name in iter_reference_names(root):
            if name in registry or name in reported:
                continue
            reported.add(name)
            ctx: Dict[str, Any] = {"reference": name, "owner": owner}
            if "#" in name or "/" in name:
                result.add_warning(
                    "EXTERNAL_REFERENCE",
                    f"Reference '{name}' in {owner} points outside "
                    f"#/components/schemas and will not be expanded.",
                    ctx,
                )
            else:
                result.add_warning(
                    "UNRESOLVED_REFERENCE",
                    f"Reference '{name}' in {owner} does not resolve; "
                    f"it will be emitted as a bare type name.",
                    ctx,
                )

    logger.debug("validate_references: %d issue(s).", len(result))
    return result


def validate_operations(description: ApiDescription) -> ValidationResult:
    """
    Operation-level checks:

    - duplicate operation ids (generated type names would clash)
    - distinct operation ids that fold to the same type name
    - path template parameters without a matching ``in: path`` parameter
    """
    result: ValidationResult = ValidationResult()

    if not description.operations:
        result.add_warning(
            "NO_OPERATIONS",
            "The description declares no operations; nothing will be generated.",
        )
        return result

    seen_ids: Set[str] = set()
    type_names: Dict[str, str] = {}

    for op in description.operations:
        ctx: Dict[str, Any] = {
            "operation": op.operation_id,
            "method": op.method,
            "path": op.path,
        }

        if op.operation_id in seen_ids:
            result.add_warning(
                "DUPLICATE_OPERATION_ID",
                f"Operation id '{op.operation_id}' is used more than once.",
                ctx,
            )
        else:
            seen_ids.add(op.operation_id)
            type_name: str = to_type_name(op.operation_id)
            other: Optional[str] = type_names.get(type_name)
            if other is not None:
                result.add_warning(
                    "TYPE_NAME_COLLISION",
                    f"Operation ids '{other}' and '{op.operation_id}' both "
                    f"map to type name '{type_name}'.",
                    ctx,
                )
            else:
                type_names[type_name] = op.operation_id

        declared: Set[str] = {
            p.name for p in op.parameters if p.location == ParameterLocation.PATH
        }
        for param_name in extract_path_params(op.path):
            if param_name not in declared:
                result.add_warning(
                    "UNDECLARED_PATH_PARAMETER",
                    f"Path parameter '{param_name}' of {op.method.upper()} "
                    f"{op.path} has no parameter declaration.",
                    {**ctx, "parameter": param_name},
                )

    return result


def validate_schema_names(description: ApiDescription) -> ValidationResult:
    """Named schemas become declarations, so their names must be identifiers."""
    result: ValidationResult = ValidationResult()
    for name in description.registry.names():
        if not is_valid_ts_identifier(name):
            result.add_warning(
                "INVALID_TYPE_NAME",
                f"Schema name '{name}' is not a valid TypeScript identifier.",
                {"schema": name},
            )
    return result


def validate_project_config(config: ProjectConfig) -> ValidationResult:
    """
    Semantic checks on the project configuration beyond the model's
    field constraints.
    """
    result: ValidationResult = ValidationResult()

    if not config.specs:
        result.add_info(
            "NO_SPECS",
            "No specs are registered in the configuration.",
        )

    for spec_name, spec in config.specs.items():
        if not is_valid_spec_name(spec_name):
            result.add_warning(
                "INVALID_SPEC_NAME",
                f"Spec name '{spec_name}' should be UPPER_SNAKE_CASE.",
                {"spec": spec_name},
            )
        if not spec.url.strip():
            result.add_error(
                "EMPTY_SPEC_URL",
                f"Spec '{spec_name}' has an empty url.",
                {"spec": spec_name},
            )

    options: GenerateOptions = config.generate
    for key in (options.model_extra or {}):
        result.add_warning(
            "UNKNOWN_GENERATE_OPTION",
            f"Unknown option 'generate.{key}' is ignored.",
            {"option": key},
        )

    if not (options.include_params or options.include_request or options.include_response):
        result.add_warning(
            "NOTHING_TO_GENERATE",
            "includeParams, includeRequest and includeResponse are all "
            "disabled; operation files will only contain schema declarations.",
        )

    return result


# ---------------------------------------------------------------------------
# Composite validation orchestrators
# ---------------------------------------------------------------------------


def validate_description(description: ApiDescription) -> ValidationResult:
    """Run all description-level validators."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[ApiDescription], ValidationResult]] = [
        validate_references,
        validate_operations,
        validate_schema_names,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(description))

    result.add_info(
        "DESCRIPTION_STATS",
        f"Description: {len(description.registry)} schema(s), "
        f"{description.operation_count} operation(s).",
        {
            "schemas": len(description.registry),
            "operations": description.operation_count,
        },
    )

    logger.info("Description validation complete: %s", result.summary())
    return result


def validate_full(
    description: ApiDescription,
    config: Optional[ProjectConfig] = None,
) -> ValidationResult:
    """
    **Master validation entry point** used by the generator and the CLI.
    """
    result: ValidationResult = ValidationResult()
    result.merge(validate_description(description))
    if config is not None:
        result.merge(validate_project_config(config))

    if result.has_errors:
        logger.error(
            "Validation FAILED with %d error(s). %s",
            result.error_count,
            result.summary(),
        )
    else:
        logger.info("Validation PASSED. %s", result.summary())

    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "iter_reference_names",
    "validate_references",
    "validate_operations",
    "validate_schema_names",
    "validate_project_config",
    "validate_description",
    "validate_full",
]

logger.debug("apitypes.validators loaded — %d public symbols.", len(__all__))
