"""Built-in demonstration board used when no valid snapshot exists."""

from __future__ import annotations

from typing import Any

from .model import Task, TaskSet

_SEED_RECORDS: tuple[dict[str, Any], ...] = (
    {
        "id": "T-101",
        "title": "Design onboarding flow",
        "description": "Map first-time user journey, produce low-fi wireframes, and align on success metrics.",
        "stage": "backlog",
        "priority": "high",
        "assignee": "Naomi",
        "tags": ["design", "ux"],
        "createdAt": "2024-04-08T09:00:00.000Z",
        "dueDate": "2024-04-19",
    },
    {
        "id": "T-102",
        "title": "Implement auth guard",
        "description": "Protect kanban routes and enforce token refresh logic with middleware checks.",
        "stage": "in-progress",
        "priority": "high",
        "assignee": "Jasper",
        "tags": ["frontend", "next.js"],
        "createdAt": "2024-04-10T10:30:00.000Z",
        "dueDate": "2024-04-17",
    },
    {
        "id": "T-103",
        "title": "Analytics event schema",
        "description": "Define product analytics events and document naming conventions for the team.",
        "stage": "blocked",
        "priority": "medium",
        "assignee": "Liam",
        "tags": ["analytics", "growth"],
        "createdAt": "2024-04-07T12:42:00.000Z",
    },
    {
        "id": "T-104",
        "title": "Accessibility audit",
        "description": "Capture WCAG AA gaps and write remediation recommendations for navigation.",
        "stage": "review",
        "priority": "medium",
        "assignee": "Priya",
        "tags": ["qa", "a11y"],
        "createdAt": "2024-04-05T14:05:00.000Z",
        "dueDate": "2024-04-16",
    },
    {
        "id": "T-105",
        "title": "Customer interview synthesis",
        "description": "Summarise insights from the latest discovery interviews and highlight key opportunities.",
        "stage": "done",
        "priority": "low",
        "assignee": "Naomi",
        "tags": ["research"],
        "createdAt": "2024-04-02T16:20:00.000Z",
    },
    {
        "id": "T-106",
        "title": "Refine performance budget",
        "description": "Document bundle targets, introduce budgets in CI, and add metrics dashboard cards.",
        "stage": "backlog",
        "priority": "medium",
        "assignee": "Rohan",
        "tags": ["frontend", "ops"],
        "createdAt": "2024-04-09T08:18:00.000Z",
    },
)


def seed_tasks() -> TaskSet:
    """Return a fresh copy of the demonstration task set."""
    return [Task.from_dict(record) for record in _SEED_RECORDS]
