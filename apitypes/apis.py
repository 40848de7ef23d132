# File: apitypes/apis.py
"""
apitypes - Operation Listing Helpers
=====================================
Display-oriented views over a loaded description: flat listing, grouping
and counting by tag.  Operations without tags are filed under
:data:`UNTAGGED`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from apitypes.loader import ApiDescription
from apitypes.models import ApiInfo

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.apis")

UNTAGGED: str = "untagged"


def extract_all_apis(description: ApiDescription) -> List[ApiInfo]:
    """One :class:`ApiInfo` per operation, in description order."""
    return [
        ApiInfo(
            method=op.method,
            path=op.path,
            operation_id=op.operation_id,
            summary=op.summary,
            description=op.description,
            tags=list(op.tags),
        )
        for op in description.operations
    ]


def _tags_of(api: ApiInfo) -> List[str]:
    return api.tags if api.tags else [UNTAGGED]


def group_apis_by_tag(apis: List[ApiInfo]) -> Dict[str, List[ApiInfo]]:
    """
    Group operations by tag, first-seen tag order.

    An operation with several tags appears in each of their groups.
    """
    groups: Dict[str, List[ApiInfo]] = {}
    for api in apis:
        for tag in _tags_of(api):
            groups.setdefault(tag, []).append(api)
    return groups


def format_api_display(api: ApiInfo) -> str:
    """
    One-line listing entry.

    Example:
        >>> format_api_display(ApiInfo(method="get", path="/pet", operation_id="x", summary="List"))
        'GET     /pet - List'
    """
    method: str = api.method.upper().ljust(7)
    summary: str = f" - {api.summary}" if api.summary else ""
    return f"{method} {api.path}{summary}"


def count_apis_by_tag(
    description: ApiDescription,
) -> List[Tuple[str, int, Optional[str]]]:
    """``(tag, operation count, tag description)`` in first-seen order."""
    descriptions: Dict[str, Optional[str]] = {
        tag.name: tag.description for tag in description.tags
    }
    counts: Dict[str, int] = {}
    for api in extract_all_apis(description):
        for tag in _tags_of(api):
            counts[tag] = counts.get(tag, 0) + 1
    return [(name, count, descriptions.get(name)) for name, count in counts.items()]


__all__: List[str] = [
    "UNTAGGED",
    "extract_all_apis",
    "group_apis_by_tag",
    "format_api_display",
    "count_apis_by_tag",
]

logger.debug("apitypes.apis loaded — %d public symbols.", len(__all__))
