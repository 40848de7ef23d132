# File: apitypes/registry.py
"""
apitypes - Schema Registry
===========================
Immutable, read-only index of the named schemas found under
``components.schemas``.  Built once per generation run; every engine
operation only ever reads from it, so a single registry can be shared
across threads without locking.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from apitypes.models import SCHEMA_REF_PREFIX, SchemaNode, parse_schema_node, ref_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.registry")


class SchemaRegistry:
    """
    Name → :data:`SchemaNode` lookup.

    Names are compared verbatim (case-sensitive, no normalisation).
    """

    __slots__ = ("_schemas",)

    def __init__(self, schemas: Optional[Mapping[str, SchemaNode]] = None) -> None:
        self._schemas: Mapping[str, SchemaNode] = MappingProxyType(dict(schemas or {}))

    @classmethod
    def from_components(cls, raw_schemas: Any) -> "SchemaRegistry":
        """
        Index every entry of a raw ``components.schemas`` mapping.

        Non-mapping input yields an empty registry.
        """
        if not isinstance(raw_schemas, Mapping):
            if raw_schemas is not None:
                logger.warning(
                    "components.schemas is a %s, not a mapping; registry is empty.",
                    type(raw_schemas).__name__,
                )
            return cls()

        nodes: Dict[str, SchemaNode] = {
            str(name): parse_schema_node(raw) for name, raw in raw_schemas.items()
        }
        logger.debug("SchemaRegistry built with %d named schemas.", len(nodes))
        return cls(nodes)

    # -- Lookup ---------------------------------------------------------------

    def resolve(self, name: str) -> Optional[SchemaNode]:
        """O(1) lookup; ``None`` when *name* is not registered."""
        return self._schemas.get(name)

    def resolve_ref(self, ref: str) -> Optional[SchemaNode]:
        """Resolve a raw ``#/components/schemas/...`` pointer."""
        if not ref.startswith(SCHEMA_REF_PREFIX):
            return None
        return self.resolve(ref_name(ref))

    def names(self) -> Tuple[str, ...]:
        """Registered names in declaration order."""
        return tuple(self._schemas)

    def items(self) -> List[Tuple[str, SchemaNode]]:
        return list(self._schemas.items())

    @property
    def schemas(self) -> Mapping[str, SchemaNode]:
        """Read-only view of the underlying mapping."""
        return self._schemas

    # -- Container protocol -----------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __repr__(self) -> str:
        return f"<SchemaRegistry {len(self._schemas)} schemas>"


__all__: List[str] = ["SchemaRegistry"]
