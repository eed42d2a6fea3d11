"""
Task Status Workflow — Policy Service

Single source of truth for which status changes are allowed and what extra
information must accompany them:
  - available transitions per (current status, role)
  - commit id requirement per target status
  - comment requirement per source status

The policy is a pure lookup over constant tables. Nothing here raises for
unknown statuses or roles: they simply yield no transitions / False, and the
status selector is disabled by the caller.

Usage:
    from taskflow.services.workflow_policy import (
        get_available_transitions, requires_comment, requires_commit_id,
    )

    options = get_available_transitions("CODE_REVIEW", "TEAMLEAD")
    # -> [{"value": "DEVELOPMENT", "label": "Development"},
    #     {"value": "UAT_TESTING", "label": "UAT Testing"}]

    requires_commit_id("UAT_TESTING")              # True
    requires_comment("CODE_REVIEW", "DEVELOPMENT")  # True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from taskflow.models.workflow import (
    COMMENT_REQUIRED_SOURCE_STATUSES,
    COMMIT_ID_REQUIRED_STATUSES,
    STATUS_LABELS,
    STATUS_ORDER,
    STATUS_TRANSITIONS,
    Role,
    Status,
)

logger = logging.getLogger(__name__)

_NO_TARGETS: frozenset[Status] = frozenset()

_STATUS_BY_VALUE = {s.value: s for s in Status}
_ROLE_BY_VALUE = {r.value: r for r in Role}


# ═════════════════════════════════════════════════════════════════════════════
# Parsing helpers
# ═════════════════════════════════════════════════════════════════════════════

def parse_status(value) -> Status | None:
    """Return the Status for a machine value, or None if it is not one."""
    if isinstance(value, Status):
        return value
    if isinstance(value, str):
        return _STATUS_BY_VALUE.get(value)
    return None


def parse_role(value) -> Role | None:
    """Return the Role for a functional-group value, or None if unknown."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        return _ROLE_BY_VALUE.get(value)
    return None


def list_statuses() -> list[dict]:
    """Master status list in display order, as {value, label} options."""
    return [_option(s) for s in STATUS_ORDER]


def get_status_label(status) -> str | None:
    s = parse_status(status)
    return STATUS_LABELS[s] if s else None


def _option(status: Status) -> dict:
    return {"value": status.value, "label": STATUS_LABELS[status]}


# ═════════════════════════════════════════════════════════════════════════════
# Data classes
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransitionRequirement:
    """Extra fields that must accompany a status change."""
    commit_id_required: bool = False
    comment_required: bool = False

    def to_dict(self) -> dict:
        return {
            "commit_id_required": self.commit_id_required,
            "comment_required": self.comment_required,
        }


# ═════════════════════════════════════════════════════════════════════════════
# Policy
# ═════════════════════════════════════════════════════════════════════════════

class WorkflowPolicy:
    """Immutable status × role transition policy.

    Args:
        transitions: current status → role → allowed target statuses.
            Statuses and roles missing from the mapping have no transitions.
        commit_id_statuses: target statuses that require a commit id.
        comment_statuses: source statuses that require a comment.
        status_order: master status list; results are returned in this order.

    Raises:
        ValueError: if a table references a status outside ``status_order``
            or a role outside ``Role``.
    """

    def __init__(
        self,
        transitions: Mapping[Status, Mapping[Role, frozenset[Status]]],
        *,
        commit_id_statuses: frozenset[Status] = COMMIT_ID_REQUIRED_STATUSES,
        comment_statuses: frozenset[Status] = COMMENT_REQUIRED_SOURCE_STATUSES,
        status_order: tuple[Status, ...] = STATUS_ORDER,
    ) -> None:
        self._order = tuple(status_order)
        known = set(self._order)

        def _known_status(value, where: str) -> Status:
            status = parse_status(value)
            if status is None or status not in known:
                raise ValueError(f"Unknown status in {where}: {value!r}")
            return status

        table: dict[Status, Mapping[Role, frozenset[Status]]] = {}
        for raw_source, by_role in transitions.items():
            source = _known_status(raw_source, "policy source")
            rules: dict[Role, frozenset[Status]] = {}
            for raw_role, targets in by_role.items():
                role = parse_role(raw_role)
                if role is None:
                    raise ValueError(f"Unknown role in policy for {source.value}: {raw_role!r}")
                where = f"targets of {source.value}/{role.value}"
                rules[role] = frozenset(_known_status(t, where) for t in targets)
            table[source] = MappingProxyType(rules)
        self._transitions = MappingProxyType(table)

        self._commit_id_statuses = frozenset(
            _known_status(s, "commit id statuses") for s in commit_id_statuses
        )
        self._comment_statuses = frozenset(
            _known_status(s, "comment statuses") for s in comment_statuses
        )

    # ── Transition queries ──────────────────────────────────────────────

    def allowed_targets(self, current_status, role) -> frozenset[Status]:
        """Target statuses ``role`` may move a task to from ``current_status``."""
        source = parse_status(current_status)
        if source is None:
            logger.debug("No transitions: unknown status %r", current_status)
            return _NO_TARGETS
        actor = parse_role(role)
        if actor is None:
            logger.debug("No transitions: unknown role %r", role)
            return _NO_TARGETS
        return self._transitions.get(source, {}).get(actor, _NO_TARGETS)

    def available_transitions(self, current_status, role) -> list[dict]:
        """Legal target statuses as {value, label} options, in master order."""
        targets = self.allowed_targets(current_status, role)
        return [_option(s) for s in self._order if s in targets]

    def is_transition_allowed(self, current_status, target_status, role) -> bool:
        target = parse_status(target_status)
        if target is None:
            return False
        return target in self.allowed_targets(current_status, role)

    def is_selector_locked(self, current_status, role) -> bool:
        """True when at most one option exists, so the status cannot change."""
        return len(self.allowed_targets(current_status, role)) <= 1

    def has_outgoing_rules(self, status) -> bool:
        """True if any role may move a task out of ``status``."""
        source = parse_status(status)
        if source is None:
            return False
        return any(self._transitions.get(source, {}).values())

    def terminal_statuses(self) -> list[Status]:
        """Statuses that no role may leave, in master order."""
        return [s for s in self._order if not self.has_outgoing_rules(s)]

    # ── Requirement predicates ──────────────────────────────────────────

    def requires_commit_id(self, target_status) -> bool:
        target = parse_status(target_status)
        return target is not None and target in self._commit_id_statuses

    def requires_comment(self, current_status, target_status) -> bool:
        """Comment needed when leaving a comment-gated status.

        The acting role is not consulted: any configured way out of the
        source status is enough. ``target_status`` does not affect the result.
        """
        source = parse_status(current_status)
        if source is None or source not in self._comment_statuses:
            return False
        return self.has_outgoing_rules(source)

    def transition_requirements(self, current_status, target_status) -> TransitionRequirement:
        return TransitionRequirement(
            commit_id_required=self.requires_commit_id(target_status),
            comment_required=self.requires_comment(current_status, target_status),
        )

    # ── Inspection ──────────────────────────────────────────────────────

    def iter_cells(self) -> Iterator[tuple[Status, Role, frozenset[Status]]]:
        """Yield every (status, role, targets) cell; empty cells included."""
        for status in self._order:
            for role in Role:
                yield status, role, self.allowed_targets(status, role)

    def to_dict(self) -> dict:
        """JSON-friendly dump of the non-empty rules and requirement sets."""
        transitions: dict[str, dict[str, list[str]]] = {}
        for status, role, targets in self.iter_cells():
            if targets:
                transitions.setdefault(status.value, {})[role.value] = [
                    s.value for s in self._order if s in targets
                ]
        return {
            "statuses": [_option(s) for s in self._order],
            "transitions": transitions,
            "commit_id_required": [s.value for s in self._order if s in self._commit_id_statuses],
            "comment_required_from": [s.value for s in self._order if s in self._comment_statuses],
            "terminal": [s.value for s in self.terminal_statuses()],
        }


DEFAULT_POLICY = WorkflowPolicy(STATUS_TRANSITIONS)


# ═════════════════════════════════════════════════════════════════════════════
# Module-level API (delegates to DEFAULT_POLICY)
# ═════════════════════════════════════════════════════════════════════════════

def get_available_transitions(current_status, role) -> list[dict]:
    """Get the {value, label} status options ``role`` may pick from ``current_status``."""
    return DEFAULT_POLICY.available_transitions(current_status, role)


def requires_commit_id(target_status) -> bool:
    return DEFAULT_POLICY.requires_commit_id(target_status)


def requires_comment(current_status, target_status) -> bool:
    return DEFAULT_POLICY.requires_comment(current_status, target_status)


def is_transition_allowed(current_status, target_status, role) -> bool:
    return DEFAULT_POLICY.is_transition_allowed(current_status, target_status, role)


def is_selector_locked(current_status, role) -> bool:
    return DEFAULT_POLICY.is_selector_locked(current_status, role)


def get_transition_requirements(current_status, target_status) -> TransitionRequirement:
    return DEFAULT_POLICY.transition_requirements(current_status, target_status)
