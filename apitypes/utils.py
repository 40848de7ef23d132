# File: apitypes/utils.py
"""
apitypes - Utility Functions & Helpers
========================================
String transformation, identifier checks, output-path helpers and small
profiling / checksum utilities used throughout the generation pipeline.

Performance strategy:
- Pure string-conversion functions are decorated with
  ``@lru_cache(maxsize=None)``: schema names and operation ids are
  converted over and over while files are rendered.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import re
import time
from typing import Dict, List, Mapping, Optional, Sequence, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_TS_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")
_SPEC_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)*$")
_PATH_PARAM_RE: re.Pattern[str] = re.compile(r"\{([^}]+)\}")
_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[-_](.)")
_NON_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"[^0-9a-zA-Z$]+")

# Characters that must be escaped inside a double-quoted TypeScript string
_TS_STRING_ESCAPES: Dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert a dash/underscore separated or camelCase string to PascalCase.

    Inner casing is preserved, only separators are folded.

    Examples:
        >>> to_pascal_case("get_user_by_id")
        'GetUserById'
        >>> to_pascal_case("getUserById")
        'GetUserById'
    """
    if not name:
        return ""
    folded: str = _SEPARATOR_RE.sub(lambda m: m.group(1).upper(), name)
    return folded[0].upper() + folded[1:]


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert a dash/underscore separated string to camelCase.

    Examples:
        >>> to_camel_case("get_user_by_id")
        'getUserById'
    """
    if not name:
        return ""
    folded: str = _SEPARATOR_RE.sub(lambda m: m.group(1).upper(), name)
    return folded[0].lower() + folded[1:]


@functools.lru_cache(maxsize=None)
def to_type_name(name: str) -> str:
    """
    Turn an arbitrary operation id into a PascalCase TypeScript type name.

    Underscores and runs of characters that cannot appear in an identifier
    collapse into a single separator before the PascalCase fold; a leading
    digit gets an underscore prefix.

    Examples:
        >>> to_type_name("get_pet_{petId}")
        'GetPetPetId'
        >>> to_type_name("3dModels")
        '_3dModels'
    """
    cleaned: str = _NON_IDENTIFIER_RE.sub("_", name).strip("_")
    result: str = to_pascal_case(cleaned)
    if not result:
        return "_Unnamed"
    if result[0].isdigit():
        result = f"_{result}"
    return result


@functools.lru_cache(maxsize=None)
def is_valid_ts_identifier(name: str) -> bool:
    """True when *name* can be used as a bare TypeScript property key."""
    return bool(_TS_IDENTIFIER_RE.fullmatch(name))


def is_valid_spec_name(name: str) -> bool:
    """Spec names in the project config are UPPER_SNAKE_CASE."""
    return bool(_SPEC_NAME_RE.fullmatch(name))


def quote_ts_string(value: str) -> str:
    """Wrap a string value in double quotes, escaping internals."""
    escaped: str = "".join(_TS_STRING_ESCAPES.get(ch, ch) for ch in value)
    return f'"{escaped}"'


@functools.lru_cache(maxsize=None)
def safe_property_key(key: str) -> str:
    """Render an object key verbatim when possible, quoted otherwise."""
    return key if is_valid_ts_identifier(key) else quote_ts_string(key)


# ---------------------------------------------------------------------------
# URL path helpers
# ---------------------------------------------------------------------------


def extract_path_params(path: str) -> List[str]:
    """
    Return the parameter names of a templated URL path.

    Example:
        >>> extract_path_params("/pet/{petId}/photos/{photoId}")
        ['petId', 'photoId']
    """
    return _PATH_PARAM_RE.findall(path)


def replace_path_params(
    path: str,
    params: Mapping[str, Union[str, int]],
) -> str:
    """
    Substitute known path parameters; unknown ones are left templated.

    Example:
        >>> replace_path_params("/pet/{petId}", {"petId": 123})
        '/pet/123'
    """

    def _sub(match: re.Match[str]) -> str:
        value = params.get(match.group(1))
        return str(value) if value is not None else match.group(0)

    return _PATH_PARAM_RE.sub(_sub, path)


def generate_file_name(method: str, api_path: str) -> str:
    """
    Relative output file for one operation.

    Example:
        >>> generate_file_name("GET", "/pet/{petId}")
        'get/pet/{petId}.ts'
    """
    clean_path: str = api_path.lstrip("/").rstrip("/") or "index"
    return f"{method.lower()}/{clean_path}.ts"


def generate_spec_file_path(spec_name: str, method: str, api_path: str) -> str:
    """Relative output file for one operation under its spec directory."""
    return f"{spec_name}/{generate_file_name(method, api_path)}"


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, returning a new list. O(n)."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("collect dependencies") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_pascal_case",
    "to_camel_case",
    "to_type_name",
    "is_valid_ts_identifier",
    "is_valid_spec_name",
    "quote_ts_string",
    "safe_property_key",
    "extract_path_params",
    "replace_path_params",
    "generate_file_name",
    "generate_spec_file_path",
    "indent_lines",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("apitypes.utils loaded — %d public symbols.", len(__all__))
