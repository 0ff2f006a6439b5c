"""Issue taxonomy and the multi-issue accumulator used by the parsers.

Every problem found while parsing is recorded as a :class:`PolicyIssue` with a
stable code (``CSP-0100``, ``CSP-0510``, ...) and a severity. Parsers never
stop at the first problem: issues go into an :class:`IssueCollector` and the
caller receives a single :class:`PolicyError` (or ``None``) at the end.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class Severity(str, enum.Enum):
    info = "INFO"
    warn = "WARN"
    error = "ERROR"


# code -> (severity, message template)
ISSUE_CODES: dict[str, tuple[Severity, str]] = {
    # Parser configuration
    "CSP-0001": (Severity.info, "currentURL is empty, so validation of 'self' sources is disabled"),
    "CSP-0002": (Severity.info, "reportingEndpointsHeader is empty, so validation of `report-to` is disabled"),
    # Source expressions
    "CSP-0100": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    # Ancestor expressions
    "CSP-0200": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    # Plugin types
    "CSP-0300": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    # Reporting URLs
    "CSP-0400": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    "CSP-0401": (Severity.error, "directive `{directive}`: could not parse as a URL: `{value}`"),
    "CSP-0402": (Severity.error, "directive `{directive}`: URL `{value}` is missing a SCHEME, which is required"),
    "CSP-0403": (Severity.error, "directive `{directive}`: URL `{value}` includes a FRAGMENT, which is disallowed"),
    # report-to and the Reporting-Endpoints header
    "CSP-0501": (Severity.error, "directive `{directive}` may only have a single value"),
    "CSP-0502": (Severity.error, "directive `{directive}` refers to undefined reporting endpoint `{value}`"),
    "CSP-0510": (Severity.error, "token-pair `{value}` does not contain an `=` character"),
    "CSP-0511": (Severity.error, "`{value}` appears to be missing a comma between token-pairs"),
    "CSP-0512": (Severity.error, "token-pair `{value}` is missing either a key or value"),
    "CSP-0513": (Severity.error, "token-pair `{value}` is missing a key"),
    "CSP-0514": (Severity.error, "token-pair `{value}` has a key with invalid characters"),
    "CSP-0515": (Severity.error, "token-pair `{value}` is missing a URL"),
    "CSP-0516": (Severity.error, "token-pair `{value}` URL is not enclosed in double quotes"),
    "CSP-0517": (Severity.error, "token-pair `{value}` URL is not a valid URL"),
    # WebRTC
    "CSP-0600": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    "CSP-0601": (Severity.error, "directive `{directive}` may only have a single value"),
    # Sandboxing
    "CSP-0700": (Severity.error, "directive `{directive}` has an invalid value `{value}`"),
    # Deprecations and obsoletions
    "CSP-0801": (Severity.error, "directive `{directive}` is obsolete; use `upgrade-insecure-requests` instead"),
    "CSP-0802": (Severity.error, "directive `{directive}` is deprecated; use `frame-src` and/or `worker-src` instead"),
    "CSP-0803": (
        Severity.error,
        "directive `{directive}` was experimental in CSP3, but should now be removed from CSP policies",
    ),
    "CSP-0804": (Severity.error, "directive `{directive}` is obsolete; remove this directive from the policy"),
    "CSP-0805": (Severity.warn, "directive `{directive}` is valid in CSP2, but will be deprecated in CSP3"),
    # Miscellaneous
    "CSP-0901": (Severity.error, "unknown directive `{directive}`"),
}


@dataclass(frozen=True, slots=True)
class PolicyIssue:
    """A single parse or validation issue."""

    code: str
    severity: Severity
    message: str
    directive: str = ""
    value: str = ""

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message} [{self.code}]"


def make_issue(code: str, directive: str = "", value: str = "") -> PolicyIssue:
    """Build an issue from its code, formatting the registered message."""
    severity, template = ISSUE_CODES[code]
    return PolicyIssue(
        code=code,
        severity=severity,
        message=template.format(directive=directive, value=value),
        directive=directive,
        value=value,
    )


class PolicyError(Exception):
    """Aggregate of every issue found during one parse call.

    Returned (not raised) by the parse functions so callers get both the
    best-effort result and the complete diagnostic list.
    """

    def __init__(self, issues: Iterable[PolicyIssue]) -> None:
        self.issues: tuple[PolicyIssue, ...] = tuple(issues)
        super().__init__(str(self))

    def __str__(self) -> str:
        return "\n".join(str(issue) for issue in self.issues)

    def __iter__(self) -> Iterator[PolicyIssue]:
        return iter(self.issues)

    def __len__(self) -> int:
        return len(self.issues)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolicyError):
            return NotImplemented
        return self.issues == other.issues

    def __hash__(self) -> int:
        return hash(self.issues)

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def by_severity(self, *severities: Severity) -> list[PolicyIssue]:
        """Return the issues whose severity is one of ``severities``."""
        wanted = set(severities)
        return [issue for issue in self.issues if issue.severity in wanted]


class IssueCollector:
    """Ordered, append-only accumulator of :class:`PolicyIssue` values."""

    def __init__(self) -> None:
        self._issues: list[PolicyIssue] = []

    def add(self, code: str, directive: str = "", value: str = "") -> None:
        self._issues.append(make_issue(code, directive, value))

    def extend(self, issues: Iterable[PolicyIssue] | None) -> None:
        # Accepts another collector, a PolicyError, or None
        if issues is None:
            return
        self._issues.extend(issues)

    def __iter__(self) -> Iterator[PolicyIssue]:
        return iter(self._issues)

    def __len__(self) -> int:
        return len(self._issues)

    def error_or_none(self) -> PolicyError | None:
        """Return the aggregate error, or None when nothing was recorded."""
        if not self._issues:
            return None
        return PolicyError(self._issues)
