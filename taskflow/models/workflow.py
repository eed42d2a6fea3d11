"""
Task Status Workflow — constant tables.

Contents:
    - Status:               lifecycle stage of a task (machine value == enum value)
    - Role:                 functional group of the acting user
    - STATUS_ORDER:         master status list, fixed display order
    - STATUS_LABELS:        Status → human display label
    - STATUS_TRANSITIONS:   current status → role → allowed target statuses
    - COMMIT_ID_REQUIRED_STATUSES:   target statuses that need a commit id
    - COMMENT_REQUIRED_SOURCE_STATUSES: source statuses that need a comment

Lifecycle (happy path):
    BACKLOG → DEVELOPMENT → CODE_REVIEW → UAT_TESTING → PREPROD → PROD
    CODE_REVIEW → DEVELOPMENT        (review sends work back)
    UAT_TESTING → UAT_FAILED → DEVELOPMENT
    SIT_FAILED | REOPENED → DEVELOPMENT

Statuses without a row in STATUS_TRANSITIONS (PROD, COMPLETED, CLOSED, ...)
have no outgoing edges for any role.
"""

from enum import Enum
from types import MappingProxyType


__all__ = [
    "Status",
    "Role",
    "STATUS_ORDER",
    "STATUS_LABELS",
    "STATUS_TRANSITIONS",
    "COMMIT_ID_REQUIRED_STATUSES",
    "COMMENT_REQUIRED_SOURCE_STATUSES",
]


# ═════════════════════════════════════════════════════════════════════════════
# Enums
# ═════════════════════════════════════════════════════════════════════════════

class Status(str, Enum):
    BACKLOG = "BACKLOG"
    ANALYSIS = "ANALYSIS"
    DEVELOPMENT = "DEVELOPMENT"
    CODE_REVIEW = "CODE_REVIEW"
    SIT_TESTING = "SIT_TESTING"
    SIT_FAILED = "SIT_FAILED"
    UAT_TESTING = "UAT_TESTING"
    UAT_FAILED = "UAT_FAILED"
    PREPROD = "PREPROD"
    PROD = "PROD"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"
    BLOCKED = "BLOCKED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


class Role(str, Enum):
    """Functional group of the acting user, as stored on the user's role."""
    TEAM_MEMBER = "TEAM_MEMBER"
    DEVELOPER = "DEVELOPER"
    TESTER = "TESTER"
    MANAGER = "MANAGER"
    TEAMLEAD = "TEAMLEAD"
    BUSINESS_ANALYST = "BUSINESS_ANALYST"
    QA_MANAGER = "QA_MANAGER"
    ADMIN = "ADMIN"
    # Assigned elsewhere in the application; no workflow permissions.
    HR = "HR"
    DEV_LEAD = "DEV_LEAD"
    DEV_MANAGER = "DEV_MANAGER"
    TEST_MANAGER = "TEST_MANAGER"
    TEST_LEAD = "TEST_LEAD"


# ── Master status list ───────────────────────────────────────────────────────

# Enum definition order is the display order.
STATUS_ORDER: tuple[Status, ...] = tuple(Status)

STATUS_LABELS = MappingProxyType({
    Status.BACKLOG: "Backlog",
    Status.ANALYSIS: "Analysis",
    Status.DEVELOPMENT: "Development",
    Status.CODE_REVIEW: "Code Review",
    Status.SIT_TESTING: "SIT Testing",
    Status.SIT_FAILED: "SIT Failed",
    Status.UAT_TESTING: "UAT Testing",
    Status.UAT_FAILED: "UAT Failed",
    Status.PREPROD: "Pre-Production",
    Status.PROD: "Production",
    Status.COMPLETED: "Completed",
    Status.CLOSED: "Closed",
    Status.REOPENED: "Reopened",
    Status.BLOCKED: "Blocked",
})


# ═════════════════════════════════════════════════════════════════════════════
# Policy table — current status → role → allowed targets
# ═════════════════════════════════════════════════════════════════════════════

def _rule(roles, targets) -> dict[Role, frozenset[Status]]:
    allowed = frozenset(targets)
    return {role: allowed for role in roles}


STATUS_TRANSITIONS = MappingProxyType({
    Status.BACKLOG: MappingProxyType(_rule(
        [Role.TEAM_MEMBER],
        [Status.CODE_REVIEW, Status.DEVELOPMENT],
    )),
    Status.DEVELOPMENT: MappingProxyType(_rule(
        [Role.TEAM_MEMBER],
        [Status.CODE_REVIEW, Status.BACKLOG],
    )),
    Status.CODE_REVIEW: MappingProxyType(_rule(
        [Role.MANAGER, Role.TEAMLEAD, Role.BUSINESS_ANALYST],
        [Status.DEVELOPMENT, Status.UAT_TESTING],
    )),
    Status.UAT_TESTING: MappingProxyType(_rule(
        [Role.TESTER, Role.QA_MANAGER],
        [Status.PREPROD, Status.UAT_FAILED],
    )),
    Status.SIT_FAILED: MappingProxyType(_rule(
        [Role.DEVELOPER],
        [Status.DEVELOPMENT],
    )),
    Status.UAT_FAILED: MappingProxyType(_rule(
        [Role.DEVELOPER],
        [Status.DEVELOPMENT],
    )),
    Status.REOPENED: MappingProxyType(_rule(
        [Role.DEVELOPER],
        [Status.DEVELOPMENT],
    )),
    Status.PREPROD: MappingProxyType(_rule(
        [Role.MANAGER, Role.ADMIN],
        [Status.PROD],
    )),
})


# ── Transition requirements ──────────────────────────────────────────────────

# Moving INTO these statuses needs a commit reference.
COMMIT_ID_REQUIRED_STATUSES: frozenset[Status] = frozenset({
    Status.UAT_TESTING,
    Status.PREPROD,
})

# Moving OUT OF these statuses needs a comment.
COMMENT_REQUIRED_SOURCE_STATUSES: frozenset[Status] = frozenset({
    Status.CODE_REVIEW,
})
