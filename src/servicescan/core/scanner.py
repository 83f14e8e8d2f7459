"""Line-oriented detection of hidden dependency lookups in source files.

The scanner does not parse Python. Each line of a source file is matched
against an ordered list of regular expressions, one per lookup idiom, and
every match becomes a ``HiddenDependencyFinding``.

Default idioms:
    self_lookup:     ``self.get_di("mailer")``
    registry_lookup: ``Registry.get("mailer")``

Only string-literal keys are captured. Calls with computed arguments, such
as ``self.get_di(name)``, are not reported, and matches inside comments or
strings are. Both are accepted limitations of textual matching.

Example:
    >>> scanner = HiddenDependencyScanner()
    >>> scanner.scan_lines(["noop()", "x = self.get_di('Logger')"], "/app/report.py")
    [HiddenDependencyFinding(lookup_key='Logger', source_file='/app/report.py',
    line_number=2, context="x = self.get_di('Logger')")]
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .errors import FileUnreadableError
from .types import HiddenDependencyFinding, TypeDescriptor

DEFAULT_CONTEXT_LENGTH = 50
ELLIPSIS = "..."


@dataclass(frozen=True)
class LookupPattern:
    """A named lookup idiom.

    The regex should capture the looked-up key in a group named ``key``.
    Patterns without that group still produce findings, with an empty key.
    """

    name: str
    regex: str
    _compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_compiled", re.compile(self.regex))

    def compile(self) -> re.Pattern:
        return self._compiled


SELF_LOOKUP = LookupPattern(
    "self_lookup",
    r"""self\s*\.\s*get_di\s*\(\s*['"](?P<key>[^'"]+)['"]\s*\)""",
)
REGISTRY_LOOKUP = LookupPattern(
    "registry_lookup",
    r"""Registry\s*\.\s*get\s*\(\s*['"](?P<key>[^'"]+)['"]\s*\)""",
)
DEFAULT_PATTERNS: tuple[LookupPattern, ...] = (SELF_LOOKUP, REGISTRY_LOOKUP)


def context_around(line: str, offset: int, length: int = DEFAULT_CONTEXT_LENGTH) -> str:
    """Window of ``length`` characters on each side of ``offset``.

    A leading or trailing ellipsis marks each clipped side. The result is
    stripped of surrounding whitespace.
    """
    start = max(0, offset - length)
    end = min(len(line), offset + length)
    context = line[start:end]
    if start > 0:
        context = ELLIPSIS + context
    if end < len(line):
        context = context + ELLIPSIS
    return context.strip()


def read_source(path: str | Path, encoding: str = "utf-8") -> str:
    """Read a whole source file.

    Raises:
        FileUnreadableError: If the file is missing or cannot be read
    """
    try:
        return Path(path).read_text(encoding=encoding, errors="replace")
    except OSError as e:
        raise FileUnreadableError(str(path), e) from e


class HiddenDependencyScanner:
    """Applies lookup patterns to the source files of a hierarchy chain."""

    def __init__(
        self,
        patterns: Sequence[LookupPattern] = DEFAULT_PATTERNS,
        context_length: int = DEFAULT_CONTEXT_LENGTH,
        encoding: str = "utf-8",
    ):
        self.patterns = tuple(patterns)
        self.context_length = context_length
        self.encoding = encoding

    def scan_chain(self, chain: Iterable[TypeDescriptor]) -> list[HiddenDependencyFinding]:
        """Scan the defining file of every class in the chain.

        Findings are attributed to the file they were found in. Classes
        without a source file are skipped, and a file shared by several
        ancestors is scanned once so each call site is reported once.
        """
        findings: list[HiddenDependencyFinding] = []
        seen: set[str] = set()
        for descriptor in chain:
            if descriptor.source_file is None or descriptor.source_file in seen:
                continue
            seen.add(descriptor.source_file)
            findings.extend(self.scan_file(descriptor.source_file))
        return findings

    def scan_file(self, path: str | Path) -> list[HiddenDependencyFinding]:
        try:
            content = read_source(path, self.encoding)
        except FileUnreadableError as e:
            logger.debug(f"Skipping unreadable source: {e}")
            return []

        if not content:
            return []

        findings = self.scan_lines(content.split("\n"), str(path))
        logger.debug(f"Found {len(findings)} hidden lookup(s) in {path}")
        return findings

    def scan_lines(
        self, lines: Iterable[str], source_file: str
    ) -> list[HiddenDependencyFinding]:
        findings = []
        for index, line in enumerate(lines):
            for pattern in self.patterns:
                for match in pattern.compile().finditer(line):
                    findings.append(self._finding(match, line, source_file, index + 1))
        return findings

    def _finding(
        self, match: re.Match, line: str, source_file: str, line_number: int
    ) -> HiddenDependencyFinding:
        if "key" in match.re.groupindex and match.group("key") is not None:
            key = match.group("key")
            offset = match.start("key")
        else:
            key = ""
            offset = match.start()
        return HiddenDependencyFinding(
            lookup_key=key,
            source_file=source_file,
            line_number=line_number,
            context=context_around(line, offset, self.context_length),
        )
