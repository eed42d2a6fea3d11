"""
Task Status Workflow — Status-Change Gate

Every surface that can change a task's status (quick status control, full
edit form, detail tab) runs the attempted change through this gate before
persisting it. The gate never mutates a task; it returns a validated
StatusChange for the task-management module to apply.

Checks, in order:
  1. Unchanged status            → valid no-op (edit form saved as-is)
  2. Target not permitted        → errors["status"]
  3. Commit id required & blank  → errors["commit_id"]
  4. Comment required & blank    → errors["comment"]

Usage:
    from taskflow.services.status_change import check_status_change

    change = check_status_change(
        task.status, "UAT_TESTING", user.functional_group,
        commit_id="9f2c1e7", comment="Reviewed, good to test",
    )
    task.status = change.to_status.value
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from taskflow.core.exceptions import ValidationError
from taskflow.models.workflow import Role, Status
from taskflow.services.workflow_policy import (
    DEFAULT_POLICY,
    WorkflowPolicy,
    get_status_label,
    parse_role,
    parse_status,
)

logger = logging.getLogger(__name__)


class StatusTransitionError(ValidationError):
    """Raised when a task status change is rejected by the workflow policy."""

    def __init__(
        self,
        current,
        target,
        role,
        reason: str,
        details: dict | None = None,
    ) -> None:
        msg = f"Cannot move task from {_raw(current)} to {_raw(target)} (role={_raw(role)}): {reason}"
        super().__init__(msg, details=details)
        self.current_status = _raw(current)
        self.target_status = _raw(target)
        self.role = _raw(role)
        self.reason = reason


class TransitionNotPermittedError(StatusTransitionError):
    """The target status is not among the role's available transitions."""


class MissingTransitionFieldError(StatusTransitionError):
    """A commit id and/or comment required by the transition is missing."""

    @property
    def missing_fields(self) -> list[str]:
        return list(self.details)


@dataclass(frozen=True)
class StatusChange:
    """A validated status change, ready for the caller to persist."""
    from_status: Status
    to_status: Status
    role: Role | None
    commit_id: str | None = None
    comment: str | None = None

    @property
    def changed(self) -> bool:
        return self.from_status != self.to_status

    def to_dict(self) -> dict:
        return {
            "from": self.from_status.value,
            "to": self.to_status.value,
            "role": self.role.value if self.role else None,
            "commit_id": self.commit_id,
            "comment": self.comment,
            "changed": self.changed,
        }


def _raw(value):
    """Plain string form of a Status/Role for messages and payloads."""
    if isinstance(value, (Status, Role)):
        return value.value
    return value


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _label(status) -> str:
    return get_status_label(status) or str(_raw(status))


def validate_status_change(
    current_status,
    target_status,
    role,
    *,
    commit_id: str | None = None,
    comment: str | None = None,
    policy: WorkflowPolicy | None = None,
) -> dict:
    """
    Validate an attempted status change without raising.

    Returns:
        {"valid": bool, "changed": bool, "from": str, "to": str, "role": str,
         "reason": str|None, "errors": {field: message},
         "requirements": {"commit_id_required", "comment_required"}}
    """
    policy = policy or DEFAULT_POLICY
    result = {
        "valid": False,
        "changed": True,
        "from": _raw(current_status),
        "to": _raw(target_status),
        "role": _raw(role),
        "reason": None,
        "errors": {},
        "requirements": {"commit_id_required": False, "comment_required": False},
    }

    source = parse_status(current_status)
    target = parse_status(target_status)

    if source is not None and source == target:
        result.update(valid=True, changed=False)
        return result

    if not policy.is_transition_allowed(current_status, target_status, role):
        allowed = [o["value"] for o in policy.available_transitions(current_status, role)]
        reason = f"Status cannot be changed to {_label(target_status)}"
        result["reason"] = reason
        result["errors"]["status"] = (
            f"{reason}; allowed: {', '.join(allowed)}" if allowed
            else f"{reason}; no status changes are available"
        )
        return result

    requirements = policy.transition_requirements(source, target)
    result["requirements"] = requirements.to_dict()

    if requirements.commit_id_required and _blank(commit_id):
        result["errors"]["commit_id"] = f"Commit ID is required when moving to {_label(target)}"
    if requirements.comment_required and _blank(comment):
        result["errors"]["comment"] = f"A comment is required when leaving {_label(source)}"

    if result["errors"]:
        result["reason"] = "Missing required field(s): " + ", ".join(result["errors"])
        return result

    result["valid"] = True
    return result


def check_status_change(
    current_status,
    target_status,
    role,
    *,
    commit_id: str | None = None,
    comment: str | None = None,
    policy: WorkflowPolicy | None = None,
    task_id=None,
) -> StatusChange:
    """
    Assert a status change is allowed and complete; return it as StatusChange.

    Args:
        current_status: The task's status before the change
        target_status: The status the user picked
        role: Acting user's functional group (Role or plain string)
        commit_id: Commit reference, required for some target statuses
        comment: Free-text comment, required when leaving some statuses
        policy: Policy to consult (DEFAULT_POLICY if omitted)
        task_id: Only used for log context

    Raises:
        TransitionNotPermittedError, MissingTransitionFieldError
    """
    validation = validate_status_change(
        current_status, target_status, role,
        commit_id=commit_id, comment=comment, policy=policy,
    )
    log_extra = {
        "task_id": task_id,
        "role": validation["role"],
        "from_status": validation["from"],
        "to_status": validation["to"],
        "event_type": "task.status_change",
    }

    if not validation["valid"]:
        error_cls = (
            TransitionNotPermittedError if "status" in validation["errors"]
            else MissingTransitionFieldError
        )
        logger.info("Status change rejected: %s", validation["reason"], extra=log_extra)
        raise error_cls(
            current_status, target_status, role,
            validation["reason"], details=validation["errors"],
        )

    logger.debug("Status change accepted", extra=log_extra)
    return StatusChange(
        from_status=parse_status(current_status),
        to_status=parse_status(target_status),
        role=parse_role(role),
        commit_id=None if _blank(commit_id) else str(commit_id).strip(),
        comment=None if _blank(comment) else str(comment).strip(),
    )


def batch_check_status_changes(
    items: list[dict],
    role,
    *,
    policy: WorkflowPolicy | None = None,
) -> dict:
    """
    Check several status changes for one acting user. Partial success allowed.

    Args:
        items: [{"task_id", "current_status", "target_status",
                 "commit_id"?, "comment"?}, ...]
        role: Acting user's functional group

    Returns:
        {"success": [{"task_id", **StatusChange.to_dict()}, ...],
         "errors": [{"task_id", "error", "error_type", "details"}, ...]}
    """
    results = {"success": [], "errors": []}

    for item in items:
        task_id = item.get("task_id")
        try:
            change = check_status_change(
                item.get("current_status"), item.get("target_status"), role,
                commit_id=item.get("commit_id"), comment=item.get("comment"),
                policy=policy, task_id=task_id,
            )
            results["success"].append({"task_id": task_id, **change.to_dict()})
        except StatusTransitionError as e:
            results["errors"].append({
                "task_id": task_id,
                "error": str(e),
                "error_type": type(e).__name__,
                "details": e.details,
            })

    return results
