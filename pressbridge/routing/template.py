"""
URL Template Compiler.

Turns a declarative path template such as ``/post/{id}/edit`` into an
anchored regular expression plus the positions of its named segments.

Templates are slash-separated; a segment is either a literal or a whole
``{name}`` capture. Partial captures (``id-{id}``) are not supported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from ..faults import MalformedTemplateFault

# Non-greedy, never crosses a segment boundary
CAPTURE = "([^/]*?)"

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class CompiledTemplate:
    """
    Result of compiling one URL template.

    Attributes:
        template: Original template as declared
        pattern: Anchored regex source matched against the trimmed path
        parameter_positions: Capture name -> zero-based segment index
        parameter_count: Number of captures
    """

    template: str
    pattern: str
    parameter_positions: Mapping[str, int]
    parameter_count: int

    @property
    def regex(self) -> "re.Pattern[str]":
        return pattern_regex(self.pattern)

    @property
    def is_static(self) -> bool:
        return self.parameter_count == 0

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """
        Match a path and extract named values.

        Values are recovered by position from the slash-split path rather
        than from regex groups, the same way the dispatcher does it.
        """
        trimmed = path.strip("/")
        if self.regex.match(trimmed) is None:
            return None
        return extract_parameters(trimmed, self.parameter_positions)


@lru_cache(maxsize=1024)
def pattern_regex(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern)


def split_segments(path: str) -> Tuple[str, ...]:
    """Trim leading/trailing slashes and split on ``/``."""
    return tuple(path.strip("/").split("/"))


def extract_parameters(path: str, positions: Mapping[str, int]) -> Dict[str, str]:
    """Pick segment values out of ``path`` by index."""
    parts = split_segments(path)
    return {name: parts[index] for name, index in positions.items()}


def _capture_name(template: str, segment: str) -> Optional[str]:
    """Return the capture name of ``segment``, None for a literal."""
    if "{" not in segment and "}" not in segment:
        return None

    if not (segment.startswith("{") and segment.endswith("}")):
        raise MalformedTemplateFault(template, f"segment '{segment}' is not a whole {{name}} capture")

    name = segment[1:-1]
    if "{" in name or "}" in name:
        raise MalformedTemplateFault(template, f"unbalanced braces in segment '{segment}'")
    if not name:
        raise MalformedTemplateFault(template, "empty capture name")
    if not _NAME_RE.match(name):
        raise MalformedTemplateFault(template, f"invalid capture name '{name}'")
    return name


@lru_cache(maxsize=1024)
def compile_template(template: str) -> CompiledTemplate:
    """
    Compile a URL template.

    Args:
        template: Path template, e.g. ``/a/{x}/b/{y}``

    Returns:
        CompiledTemplate with pattern ``^a/([^/]*?)/b/([^/]*?)$``

    Raises:
        MalformedTemplateFault: Bad brace pairing, empty or duplicate names
    """
    segments = split_segments(template)
    compiled_segments = []
    positions: Dict[str, int] = {}

    for index, segment in enumerate(segments):
        name = _capture_name(template, segment)
        if name is None:
            compiled_segments.append(re.escape(segment))
            continue
        if name in positions:
            raise MalformedTemplateFault(template, f"duplicate capture name '{name}'")
        positions[name] = index
        compiled_segments.append(CAPTURE)

    pattern = "^" + "/".join(compiled_segments) + "$"
    return CompiledTemplate(
        template=template,
        pattern=pattern,
        parameter_positions=MappingProxyType(positions),
        parameter_count=len(positions),
    )
