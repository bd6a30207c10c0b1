"""Filter criteria and the pure filter over a task set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..constants import FILTER_ALL
from .model import Task, TaskSet


@dataclass(frozen=True)
class FilterCriteria:
    """Transient board filter state.

    Each selector is either ``"all"`` or a concrete value.  A selector naming
    a value no task has simply matches nothing.
    """

    search: str = ""
    priority: str = FILTER_ALL
    tag: str = FILTER_ALL
    assignee: str = FILTER_ALL

    @property
    def search_term(self) -> str:
        return self.search.strip().lower()

    @property
    def is_empty(self) -> bool:
        return (
            not self.search_term
            and self.priority == FILTER_ALL
            and self.tag == FILTER_ALL
            and self.assignee == FILTER_ALL
        )


def _matches_search(task: Task, term: str) -> bool:
    if not term:
        return True
    if term in task.title.lower() or term in task.description.lower() or term in task.assignee.lower():
        return True
    return any(term in tag.lower() for tag in task.tags)


def matches(task: Task, criteria: FilterCriteria) -> bool:
    if not _matches_search(task, criteria.search_term):
        return False
    if criteria.priority != FILTER_ALL and task.priority.value != criteria.priority:
        return False
    if criteria.tag != FILTER_ALL:
        wanted = criteria.tag.lower()
        if not any(tag.lower() == wanted for tag in task.tags):
            return False
    if criteria.assignee != FILTER_ALL and task.assignee.lower() != criteria.assignee.lower():
        return False
    return True


def filter_tasks(tasks: Iterable[Task], criteria: FilterCriteria) -> TaskSet:
    """Return the tasks matching every criterion, in their original order."""
    return [t for t in tasks if matches(t, criteria)]
