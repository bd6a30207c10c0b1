"""Task model for the Flowstate board.

This module defines the closed stage and priority enumerations (with their
explicit order tables), the :class:`Task` record, and its snapshot
serialization.  No storage access happens here.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Stage(str, Enum):
    """Workflow stage; declaration order is the board's left-to-right order."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    REVIEW = "review"
    DONE = "done"

    @property
    def rank(self) -> int:
        return _STAGE_RANK[self]

    @property
    def column_title(self) -> str:
        return _STAGE_COLUMNS[self][0]

    @property
    def column_blurb(self) -> str:
        return _STAGE_COLUMNS[self][1]

    @classmethod
    def ordered(cls) -> tuple["Stage", ...]:
        return _STAGE_ORDER

    @classmethod
    def first(cls) -> "Stage":
        return _STAGE_ORDER[0]

    @classmethod
    def last(cls) -> "Stage":
        return _STAGE_ORDER[-1]

    def shifted(self, delta: int) -> Optional["Stage"]:
        """Return the stage *delta* positions away, or None past either end."""
        idx = self.rank + delta
        if idx < 0 or idx >= len(_STAGE_ORDER):
            return None
        return _STAGE_ORDER[idx]


class Priority(str, Enum):
    """Urgency level.  ``high`` sorts first on the board."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def sort_key(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def next(self) -> "Priority":
        """Next priority in the circular cycle low -> medium -> high -> low."""
        cycle = (Priority.LOW, Priority.MEDIUM, Priority.HIGH)
        return cycle[(cycle.index(self) + 1) % len(cycle)]


_STAGE_ORDER: tuple[Stage, ...] = (
    Stage.BACKLOG,
    Stage.IN_PROGRESS,
    Stage.BLOCKED,
    Stage.REVIEW,
    Stage.DONE,
)
_STAGE_RANK: dict[Stage, int] = {stage: idx for idx, stage in enumerate(_STAGE_ORDER)}
_STAGE_COLUMNS: dict[Stage, tuple[str, str]] = {
    Stage.BACKLOG: ("Backlog", "Ideas, requests, and future work"),
    Stage.IN_PROGRESS: ("In Progress", "Actively being delivered right now"),
    Stage.BLOCKED: ("Blocked", "Requires input before moving forward"),
    Stage.REVIEW: ("Review", "Ready for sign-off and QA"),
    Stage.DONE: ("Done", "Validated, shipped, and celebrated"),
}


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def _truncate_ms(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def to_utc(value: datetime) -> datetime:
    """Aware UTC copy of *value* at millisecond precision; naive values are taken as UTC.

    Raises :class:`ValueError` when the conversion leaves the supported year range.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        return _truncate_ms(value.astimezone(timezone.utc))
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {value.isoformat()}") from exc


def utc_now() -> datetime:
    """Current UTC time at the millisecond precision snapshots keep."""
    return _truncate_ms(datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises :class:`ValueError` on malformed input.
    """
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))


def parse_due_date(raw: Any) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` due date.  Blank means absent.

    Raises :class:`ValueError` on a non-blank value that is not a date.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    return date.fromisoformat(text)


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

REQUIRED_FIELDS = ("id", "title", "description", "priority", "assignee", "tags", "createdAt")


@dataclass
class Task:
    """A card on the board.

    ``id`` and ``created_at`` are fixed at creation.  ``stage`` and
    ``priority`` only change through the mutation functions; every change
    produces a new :class:`Task` via :meth:`evolve`.
    """

    id: str
    title: str
    description: str = ""
    stage: Stage = Stage.BACKLOG
    priority: Priority = Priority.MEDIUM
    assignee: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    due_date: Optional[date] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignee)

    def evolve(self, **changes: Any) -> "Task":
        """Return a copy with *changes* applied; tags are copied, never shared."""
        changes.setdefault("tags", list(self.tags))
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the snapshot field names; ``dueDate`` omitted when absent."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "stage": self.stage.value,
            "priority": self.priority.value,
            "assignee": self.assignee,
            "tags": list(self.tags),
            "createdAt": format_timestamp(self.created_at),
        }
        if self.due_date is not None:
            data["dueDate"] = self.due_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict, coercing enums and dates gracefully.

        Snapshot records written before the ``stage`` rename carry the stage
        under ``status``; that key is honoured when ``stage`` is missing.
        """
        d = dict(data)

        def _enum(enum_cls: type[Enum], raw: Any, default: Enum) -> Any:
            if raw is None:
                return default
            if isinstance(raw, enum_cls):
                return raw
            try:
                return enum_cls(str(raw))
            except ValueError:
                return default

        raw_stage = d.get("stage", d.get("status"))
        try:
            created_at = parse_timestamp(str(d["createdAt"])) if d.get("createdAt") else utc_now()
        except ValueError:
            created_at = utc_now()
        try:
            due_date = parse_due_date(d.get("dueDate"))
        except ValueError:
            due_date = None

        return cls(
            id=str(d.get("id") or ""),
            title=str(d.get("title") or ""),
            description=str(d.get("description") or ""),
            stage=_enum(Stage, raw_stage, Stage.BACKLOG),
            priority=_enum(Priority, d.get("priority"), Priority.MEDIUM),
            assignee=str(d.get("assignee") or ""),
            tags=[str(tag) for tag in (d.get("tags") or [])],
            created_at=created_at,
            due_date=due_date,
        )

    @classmethod
    def validate_dict(cls, data: Any) -> list[str]:
        """Structural validation of one snapshot record.

        Returns a list of error strings (empty = valid).  Only shape and
        enumeration membership are checked; string contents are not.
        """
        if not isinstance(data, dict):
            return ["Expected an object"]
        errors: list[str] = []
        for name in REQUIRED_FIELDS:
            if name not in data:
                errors.append(f"'{name}' is required")
        if "stage" not in data and "status" not in data:
            errors.append("'stage' is required")
        if errors:
            return errors

        if not isinstance(data["id"], str) or not data["id"]:
            errors.append("'id' must be a non-empty string")
        for text_field in ("title", "description", "assignee"):
            if not isinstance(data[text_field], str):
                errors.append(f"'{text_field}' must be a string")

        stage = data.get("stage", data.get("status"))
        valid_stages = {s.value for s in Stage}
        if not isinstance(stage, str) or stage not in valid_stages:
            errors.append(f"'stage' must be one of {sorted(valid_stages)}, got '{stage}'")
        priority = data["priority"]
        valid_prios = {p.value for p in Priority}
        if not isinstance(priority, str) or priority not in valid_prios:
            errors.append(f"'priority' must be one of {sorted(valid_prios)}, got '{priority}'")

        tags = data["tags"]
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            errors.append("'tags' must be an array of strings")
        elif len(set(tags)) != len(tags):
            errors.append("'tags' must not repeat a tag")

        created = data["createdAt"]
        if not isinstance(created, str):
            errors.append("'createdAt' must be an ISO-8601 string")
        else:
            try:
                parse_timestamp(created)
            except ValueError:
                errors.append(f"'createdAt' is not a valid timestamp: '{created}'")

        due = data.get("dueDate")
        if due is not None:
            if not isinstance(due, str):
                errors.append("'dueDate' must be a date string")
            else:
                try:
                    parse_due_date(due)
                except ValueError:
                    errors.append(f"'dueDate' is not a valid date: '{due}'")
        return errors


TaskSet = list[Task]
