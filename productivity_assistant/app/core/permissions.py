"""
Workspace access policy.

A single pure function decides every authorization question from the
caller id, the resource's owner/team/assignee fields, the caller's current
membership role in the resource's team and, for updates, the set of fields
the request wants to change. It never touches the database; callers fetch
the membership row fresh for each request and pass the role in.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    COMMENT = "comment"
    ADD_PROGRESS = "add_progress"
    MANAGE_MEMBERS = "manage_members"
    REMOVE_MEMBER = "remove_member"


class ResourceKind(str, Enum):
    TASK = "task"
    TEAM = "team"
    MEETING = "meeting"
    COMMENT = "comment"


LEADER = "leader"

# Fields a non-leader team member may change on a team task
MEMBER_UPDATABLE_TASK_FIELDS: frozenset[str] = frozenset({"status"})


@dataclass(frozen=True)
class ResourceRef:
    """The ownership facts of a resource that the policy looks at."""

    kind: ResourceKind
    owner_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    assignee_id: uuid.UUID | None = None
    # Member-removal target
    subject_user_id: uuid.UUID | None = None


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: str = ""


ALLOW = PolicyDecision(True)


def _deny(reason: str) -> PolicyDecision:
    return PolicyDecision(False, reason)


def evaluate(
    caller_id: uuid.UUID,
    resource: ResourceRef,
    action: Action,
    membership_role: str | None = None,
    changed_fields: Iterable[str] = (),
) -> PolicyDecision:
    """Return whether caller_id may perform action on resource."""
    if resource.kind is ResourceKind.TASK:
        return _evaluate_task(caller_id, resource, action, membership_role, frozenset(changed_fields))
    if resource.kind is ResourceKind.TEAM:
        return _evaluate_team(caller_id, resource, action, membership_role)
    if resource.kind is ResourceKind.MEETING:
        return _evaluate_meeting(action, membership_role)
    if resource.kind is ResourceKind.COMMENT:
        return _evaluate_comment(caller_id, resource, action)
    return _deny("Unknown resource")


def _evaluate_task(
    caller_id: uuid.UUID,
    task: ResourceRef,
    action: Action,
    role: str | None,
    changed_fields: frozenset[str],
) -> PolicyDecision:
    if action is Action.ADD_PROGRESS and caller_id not in (task.owner_id, task.assignee_id):
        return _deny("Only the task owner or assignee can add progress updates")

    # Personal workspace
    if task.team_id is None:
        if action is Action.ADD_PROGRESS or task.owner_id == caller_id:
            return ALLOW
        return _deny("You do not have access to this task")

    # Team workspace
    if role is None:
        return _deny("Not a team member")
    if role == LEADER:
        return ALLOW
    if action in (Action.READ, Action.COMMENT, Action.ADD_PROGRESS):
        return ALLOW
    if action is Action.UPDATE:
        disallowed = changed_fields - MEMBER_UPDATABLE_TASK_FIELDS
        if disallowed:
            return _deny(
                "Team members can only update task status "
                f"(not allowed: {', '.join(sorted(disallowed))})"
            )
        return ALLOW
    if action is Action.CREATE:
        return _deny("Only team leaders can create team tasks")
    if action is Action.DELETE:
        return _deny("Only team leaders can delete team tasks")
    return _deny("You do not have permission to perform this action")


def _evaluate_team(
    caller_id: uuid.UUID,
    team: ResourceRef,
    action: Action,
    role: str | None,
) -> PolicyDecision:
    if role is None:
        return _deny("Not a team member")
    if action is Action.READ:
        return ALLOW
    if action is Action.REMOVE_MEMBER and team.subject_user_id == caller_id:
        return ALLOW
    if role == LEADER:
        return ALLOW
    return _deny("Only team leaders can perform this action")


def _evaluate_meeting(action: Action, role: str | None) -> PolicyDecision:
    if role is None:
        return _deny("Not a team member")
    if action is Action.READ or role == LEADER:
        return ALLOW
    return _deny("Only team leaders can manage meetings")


def _evaluate_comment(
    caller_id: uuid.UUID, comment: ResourceRef, action: Action
) -> PolicyDecision:
    if comment.owner_id == caller_id:
        return ALLOW
    if action is Action.DELETE:
        return _deny("You can only delete your own comments")
    return _deny("You can only edit your own comments")


def task_ref(task: object) -> ResourceRef:
    """Build a task ResourceRef from anything with task-shaped attributes."""
    return ResourceRef(
        kind=ResourceKind.TASK,
        owner_id=getattr(task, "user_id"),
        team_id=getattr(task, "team_id"),
        assignee_id=getattr(task, "assigned_to", None),
    )
