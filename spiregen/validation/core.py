"""
Core data structures for the validation system.

Defines the fundamental types used throughout the validation package:
- Severity: Issue severity levels (INFO, WARN, FAIL)
- ValidationStage: Build stages where validation occurs
- ValidationIssue: Individual validation finding
- ValidationResult: Collection of issues with pass/fail status
- ValidationError: Exception raised when validation fails
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class Severity(Enum):
    """Validation issue severity levels.

    - INFO: Informational, logged but doesn't affect pass/fail
    - WARN: Warning, logged but doesn't block emission
    - FAIL: Error, the layout breaks a structural invariant
    """
    INFO = auto()
    WARN = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.name


class ValidationStage(Enum):
    """Points at which a layout is checked.

    - CATALOG: When templates are registered or loaded
    - LAYOUT: When a build has finished
    """
    CATALOG = "catalog"
    LAYOUT = "layout"

    def __str__(self) -> str:
        return self.value


@dataclass
class ValidationIssue:
    """Represents a single validation finding.

    Attributes:
        severity: Issue severity (INFO, WARN, FAIL)
        code: Rule code (e.g., "LAYOUT-002")
        message: Human-readable description
        remediation: Optional suggested fix
        room_index: Optional room the issue refers to
        socket_id: Optional socket the issue refers to
        template_id: Optional template the issue refers to
    """
    severity: Severity
    code: str
    message: str
    remediation: Optional[str] = None
    room_index: Optional[int] = None
    socket_id: Optional[str] = None
    template_id: Optional[str] = None

    def format(self) -> str:
        """Format issue for display.

        Returns:
            [SEVERITY] CODE room=R socket=S template=T :: message :: fix=FIX
        """
        room = '-' if self.room_index is None else str(self.room_index)
        socket = self.socket_id or '-'
        template = self.template_id or '-'
        fix = self.remediation or 'N/A'

        return (
            f"[{self.severity}] {self.code} "
            f"room={room} socket={socket} template={template} :: "
            f"{self.message} :: fix={fix}"
        )

    def __str__(self) -> str:
        return self.format()


@dataclass
class ValidationResult:
    """Collection of validation issues with pass/fail determination.

    Attributes:
        issues: List of ValidationIssue objects
        stage: Stage this result is from
    """
    issues: List[ValidationIssue] = field(default_factory=list)
    stage: Optional[ValidationStage] = None

    @property
    def passed(self) -> bool:
        """Check if validation passed (no FAIL issues)."""
        return not any(i.severity == Severity.FAIL for i in self.issues)

    @property
    def failed(self) -> bool:
        return not self.passed

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARN]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.FAIL]

    @property
    def infos(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.INFO]

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def add(self, severity: Severity, code: str, message: str, **details) -> ValidationIssue:
        """Create and record an issue; returns it."""
        issue = ValidationIssue(severity, code, message, **details)
        self.issues.append(issue)
        return issue

    def raise_if_failed(self) -> None:
        """
        Raises:
            ValidationError: If any FAIL issue is present
        """
        if self.failed:
            raise ValidationError(self)

    def report(self) -> str:
        """Generate a formatted report of all issues.

        Returns:
            Multi-line string with all issues formatted
        """
        if not self.issues:
            return "Validation passed: No issues found"

        lines = []
        stage_str = f" ({self.stage})" if self.stage else ""
        status = "PASSED" if self.passed else "FAILED"
        lines.append(f"Validation {status}{stage_str}: {len(self.issues)} issue(s)")
        lines.append("-" * 60)

        for severity in [Severity.FAIL, Severity.WARN, Severity.INFO]:
            severity_issues = [i for i in self.issues if i.severity == severity]
            if severity_issues:
                lines.append(f"\n{severity.name} ({len(severity_issues)}):")
                for issue in severity_issues:
                    lines.append(issue.format())

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'passed': self.passed,
            'stage': str(self.stage) if self.stage else None,
            'issue_count': len(self.issues),
            'fail_count': len(self.errors),
            'warn_count': len(self.warnings),
            'info_count': len(self.infos),
            'issues': [
                {
                    'severity': str(issue.severity),
                    'code': issue.code,
                    'message': issue.message,
                    'remediation': issue.remediation,
                    'room_index': issue.room_index,
                    'socket_id': issue.socket_id,
                    'template_id': issue.template_id,
                }
                for issue in self.issues
            ]
        }


class ValidationError(Exception):
    """Exception raised when validation fails with FAIL severity issues.

    Attributes:
        result: The ValidationResult that caused the failure
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.report())
