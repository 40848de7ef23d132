# File: apitypes/loader.py
"""
apitypes - API Description Loader
==================================
Fetches an OpenAPI 3.x description from a URL or a local file, parses it
(JSON or YAML) and converts it into the engine's input: a
:class:`~apitypes.registry.SchemaRegistry` plus an ordered tuple of
:class:`~apitypes.models.OperationDescriptor`.

Local ``#/components/{parameters,requestBodies,responses}/...`` pointers
are followed here; schema references stay symbolic and are resolved by
name through the registry.  References into other documents are not
followed.

Error handling strategy:
    - Every failure to obtain or understand the document raises
      :class:`DescriptionLoadError` with the underlying cause chained.
    - Malformed individual fragments never raise; they degrade to
      ``UnknownNode`` or are skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import httpx
import yaml

from apitypes.models import (
    OperationDescriptor,
    ParameterLocation,
    ParameterSpec,
    SchemaNode,
    TagInfo,
    parse_schema_node,
)
from apitypes.registry import SchemaRegistry

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.loader")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HTTP_METHODS: Tuple[str, ...] = (
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "options",
    "trace",
)

JSON_MEDIA_TYPE: str = "application/json"
DEFAULT_TIMEOUT: float = 30.0

_COMPONENT_PREFIX: str = "#/components/"


class DescriptionLoadError(Exception):
    """The API description could not be fetched, parsed or accepted."""


@dataclass(frozen=True, slots=True)
class ApiDescription:
    """A loaded description, ready for the generation engine."""

    title: str
    version: str
    openapi_version: str
    registry: SchemaRegistry
    operations: Tuple[OperationDescriptor, ...]
    tags: Tuple[TagInfo, ...] = ()
    source: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def operation_count(self) -> int:
        return len(self.operations)

    def find_operation(self, operation_id: str) -> Optional[OperationDescriptor]:
        for op in self.operations:
            if op.operation_id == operation_id:
                return op
        return None


# ---------------------------------------------------------------------------
# Document retrieval
# ---------------------------------------------------------------------------


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _parse_text(text: str, hint: str) -> Dict[str, Any]:
    """
    Parse JSON or YAML text.

    ``.yaml`` / ``.yml`` hints go straight to YAML; everything else is
    tried as JSON first and then as YAML.
    """
    lowered: str = hint.lower().split("?", 1)[0]
    data: Any
    try:
        if lowered.endswith((".yaml", ".yml")):
            data = yaml.safe_load(text)
        else:
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DescriptionLoadError(f"Could not parse {hint}: {exc}") from exc

    if not isinstance(data, dict):
        raise DescriptionLoadError(
            f"Expected a mapping at the top level of {hint}, "
            f"got {type(data).__name__}."
        )
    return data


def fetch_document(
    url: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    """
    Download and parse a description over HTTP(S).

    Args:
        url: Absolute ``http://`` or ``https://`` URL.
        client: Optional pre-configured client (its lifetime stays with
                the caller).
        timeout: Request timeout in seconds for an internally created client.
    """
    logger.info("Fetching API description from %s", url)
    try:
        if client is not None:
            response: httpx.Response = client.get(url)
        else:
            with httpx.Client(timeout=timeout, follow_redirects=True) as own_client:
                response = own_client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DescriptionLoadError(
            f"HTTP {exc.response.status_code} while fetching {url}"
        ) from exc
    except httpx.HTTPError as exc:
        raise DescriptionLoadError(f"Could not fetch {url}: {exc}") from exc

    return _parse_text(response.text, url)


def read_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse a local JSON or YAML description file."""
    file_path: Path = Path(path)
    if not file_path.exists():
        raise DescriptionLoadError(f"Description file not found: {file_path}")
    if not file_path.is_file():
        raise DescriptionLoadError(f"Description path is not a file: {file_path}")
    try:
        text: str = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DescriptionLoadError(f"Could not read {file_path}: {exc}") from exc
    return _parse_text(text, file_path.name)


def load_raw_document(
    source: Union[str, Path],
    *,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """Dispatch to :func:`fetch_document` or :func:`read_document`."""
    if isinstance(source, str) and is_url(source):
        return fetch_document(source, client=client)
    return read_document(source)


# ---------------------------------------------------------------------------
# Local component pointers
# ---------------------------------------------------------------------------


def _follow_component_ref(value: Any, document: Mapping[str, Any]) -> Any:
    """
    Follow ``#/components/<section>/<name>`` pointers until a non-pointer
    value is reached.  Loops and foreign pointers resolve to ``None``.
    """
    seen: set = set()
    while isinstance(value, Mapping) and isinstance(value.get("$ref"), str):
        ref: str = value["$ref"]
        if ref in seen or not ref.startswith(_COMPONENT_PREFIX):
            logger.warning("Cannot follow reference '%s'.", ref)
            return None
        seen.add(ref)
        section, _, name = ref[len(_COMPONENT_PREFIX):].partition("/")
        components: Any = document.get("components")
        bucket: Any = components.get(section) if isinstance(components, Mapping) else None
        value = bucket.get(name) if isinstance(bucket, Mapping) else None
    return value


def _base_media_type(media_type: str) -> str:
    return media_type.split(";", 1)[0].strip().lower()


def is_json_media_type(media_type: str) -> bool:
    """``application/json`` (any parameters) or a ``+json`` suffix type."""
    base: str = _base_media_type(media_type)
    return base == JSON_MEDIA_TYPE or base.endswith("+json")


def _json_schema(container: Any) -> Optional[SchemaNode]:
    """
    Parse the JSON-content schema of a request body or response.

    ``application/json`` wins whatever its position in ``content``; a
    ``+json`` type is only read when no ``application/json`` entry has a
    schema.
    """
    if not isinstance(container, Mapping):
        return None
    content: Any = container.get("content")
    if not isinstance(content, Mapping):
        return None

    candidates: List[Tuple[str, Any]] = [
        (_base_media_type(str(media_type)), media)
        for media_type, media in content.items()
        if is_json_media_type(str(media_type))
        and isinstance(media, Mapping)
        and "schema" in media
    ]
    for base, media in candidates:
        if base == JSON_MEDIA_TYPE:
            return parse_schema_node(media["schema"])
    if candidates:
        return parse_schema_node(candidates[0][1]["schema"])
    return None


# ---------------------------------------------------------------------------
# Operation extraction
# ---------------------------------------------------------------------------


def default_operation_id(method: str, path: str) -> str:
    """``get`` + ``/pet/{petId}`` → ``get_pet_{petId}``."""
    return f"{method}{path.replace('/', '_')}"


def _parse_parameters(
    raw_params: Any, document: Mapping[str, Any]
) -> List[ParameterSpec]:
    params: List[ParameterSpec] = []
    if not isinstance(raw_params, list):
        return params
    for raw in raw_params:
        resolved: Any = _follow_component_ref(raw, document)
        if not isinstance(resolved, Mapping) or not resolved.get("name"):
            logger.warning("Skipping malformed parameter: %r", raw)
            continue
        try:
            location: ParameterLocation = ParameterLocation(resolved.get("in", "query"))
        except ValueError:
            logger.warning(
                "Parameter '%s' has unknown location '%s'; treated as query.",
                resolved["name"],
                resolved.get("in"),
            )
            location = ParameterLocation.QUERY
        params.append(
            ParameterSpec(
                name=str(resolved["name"]),
                location=location,
                required=bool(resolved.get("required", location == ParameterLocation.PATH)),
                node=parse_schema_node(resolved["schema"]) if "schema" in resolved else None,
                description=resolved.get("description"),
            )
        )
    return params


def _merge_parameters(
    path_level: List[ParameterSpec], op_level: List[ParameterSpec]
) -> Tuple[ParameterSpec, ...]:
    """Operation-level parameters override path-level ones with the same name and location."""
    overridden = {(p.name, p.location) for p in op_level}
    merged: List[ParameterSpec] = [
        p for p in path_level if (p.name, p.location) not in overridden
    ]
    merged.extend(op_level)
    return tuple(merged)


def extract_operations(
    raw_paths: Any,
    document: Optional[Mapping[str, Any]] = None,
) -> Tuple[OperationDescriptor, ...]:
    """
    Build operation descriptors from a raw ``paths`` mapping.

    Paths keep declaration order; within a path, methods follow
    :data:`HTTP_METHODS`.
    """
    doc: Mapping[str, Any] = document if document is not None else {}
    operations: List[OperationDescriptor] = []
    if not isinstance(raw_paths, Mapping):
        return ()

    for path, path_item in raw_paths.items():
        if not isinstance(path_item, Mapping):
            continue
        path_params: List[ParameterSpec] = _parse_parameters(
            path_item.get("parameters"), doc
        )
        for method in HTTP_METHODS:
            raw_op: Any = path_item.get(method)
            if not isinstance(raw_op, Mapping):
                continue

            body: Any = _follow_component_ref(raw_op.get("requestBody"), doc)
            responses: Dict[str, Optional[SchemaNode]] = {}
            raw_responses: Any = raw_op.get("responses")
            if isinstance(raw_responses, Mapping):
                for status, raw_response in raw_responses.items():
                    responses[str(status)] = _json_schema(
                        _follow_component_ref(raw_response, doc)
                    )

            raw_tags: Any = raw_op.get("tags")
            operations.append(
                OperationDescriptor(
                    method=method,
                    path=str(path),
                    operation_id=str(
                        raw_op.get("operationId") or default_operation_id(method, str(path))
                    ),
                    summary=raw_op.get("summary"),
                    description=raw_op.get("description"),
                    tags=tuple(str(t) for t in raw_tags) if isinstance(raw_tags, list) else (),
                    parameters=_merge_parameters(
                        path_params, _parse_parameters(raw_op.get("parameters"), doc)
                    ),
                    request_body=_json_schema(body),
                    request_body_required=bool(
                        isinstance(body, Mapping) and body.get("required", False)
                    ),
                    responses=responses,
                )
            )

    logger.debug("Extracted %d operation(s).", len(operations))
    return tuple(operations)


# ---------------------------------------------------------------------------
# Full description
# ---------------------------------------------------------------------------


def parse_description(raw: Mapping[str, Any], source: str = "") -> ApiDescription:
    """
    Validate the version marker and build an :class:`ApiDescription`.

    Raises:
        DescriptionLoadError: Missing or non-3.x ``openapi`` field.
    """
    version_marker: Any = raw.get("openapi")
    if not isinstance(version_marker, str) or not version_marker.startswith("3."):
        if "swagger" in raw:
            raise DescriptionLoadError(
                "Only OpenAPI 3.x is supported. Convert the Swagger 2.0 "
                "description to OpenAPI 3.x first."
            )
        raise DescriptionLoadError(
            f"Unsupported or missing 'openapi' version: {version_marker!r}."
        )

    info: Any = raw.get("info") if isinstance(raw.get("info"), Mapping) else {}
    components: Any = raw.get("components") if isinstance(raw.get("components"), Mapping) else {}

    registry: SchemaRegistry = SchemaRegistry.from_components(components.get("schemas"))
    operations: Tuple[OperationDescriptor, ...] = extract_operations(raw.get("paths"), raw)

    tags: List[TagInfo] = []
    raw_tags: Any = raw.get("tags")
    if isinstance(raw_tags, list):
        for tag in raw_tags:
            if isinstance(tag, Mapping) and tag.get("name"):
                tags.append(TagInfo(name=str(tag["name"]), description=tag.get("description")))

    description: ApiDescription = ApiDescription(
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
        openapi_version=version_marker,
        registry=registry,
        operations=operations,
        tags=tuple(tags),
        source=source,
        raw=raw,
    )
    logger.info(
        "Loaded '%s' %s: %d schema(s), %d operation(s).",
        description.title,
        description.version,
        len(registry),
        len(operations),
    )
    return description


def load_description(
    source: Union[str, Path],
    *,
    client: Optional[httpx.Client] = None,
) -> ApiDescription:
    """Load a description from a URL or a local path."""
    raw: Dict[str, Any] = load_raw_document(source, client=client)
    return parse_description(raw, str(source))


__all__: List[str] = [
    "HTTP_METHODS",
    "JSON_MEDIA_TYPE",
    "DescriptionLoadError",
    "ApiDescription",
    "is_url",
    "fetch_document",
    "read_document",
    "load_raw_document",
    "is_json_media_type",
    "default_operation_id",
    "extract_operations",
    "parse_description",
    "load_description",
]

logger.debug("apitypes.loader loaded — %d public symbols.", len(__all__))
