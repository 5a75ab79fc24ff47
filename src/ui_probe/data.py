"""Test data factories.

Every generated email, username and entity title carries a millisecond timestamp plus a
random hex suffix, so scenarios running in parallel against one backend never
collide on unique fields.
"""
from __future__ import annotations

import random
import secrets
import string
import time
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PASSWORD = "TestPassword123!"

SAMPLE_DATA: Dict[str, List[str]] = {
    "titles": [
        "Important Task",
        "Meeting Notes",
        "Project Update",
        "Bug Report",
        "Feature Request",
        "Documentation",
        "Code Review",
        "Testing Notes",
    ],
    "descriptions": [
        "This is a sample description for testing purposes.",
        "Lorem ipsum dolor sit amet, consectetur adipiscing elit.",
        "A detailed description that explains the context and requirements.",
        "Short description.",
        "This description contains multiple sentences. It provides more context. Perfect for testing.",
    ],
    "names": [
        "John Doe",
        "Jane Smith",
        "Alice Johnson",
        "Bob Wilson",
        "Carol Brown",
        "David Davis",
        "Eve Miller",
        "Frank Garcia",
    ],
    "companies": [
        "Acme Corp",
        "Tech Solutions Inc",
        "Innovation Labs",
        "Digital Dynamics",
        "Future Systems",
        "Smart Solutions",
        "NextGen Technologies",
        "Advanced Analytics",
    ],
}

INVALID_DATA: Dict[str, List[str]] = {
    "emails": [
        "",
        "invalid-email",
        "@example.com",
        "user@",
        "user@.com",
        "user..double.dot@example.com",
    ],
    "passwords": [
        "",
        "123",
        "short",
        "onlylowercase",
        "ONLYUPPERCASE",
        "12345678",
        "NoNumbersOrSpecial",
    ],
    "required_fields": ["", "   ", "\t\n"],
}

ENTITY_KINDS = ("item", "note", "task", "generic")


def _suffix() -> str:
    return f"{int(time.time() * 1000)}{secrets.token_hex(4)}"


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}+{_suffix()}@example.com"


def unique_username(prefix: str = "user") -> str:
    return f"{prefix}_{_suffix()}"


def unique_title(prefix: str) -> str:
    return f"{prefix} {_suffix()}"


def random_string(length: int = 8) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def random_item(items: Sequence[T]) -> T:
    if not items:
        raise ValueError("random_item() needs a non-empty sequence")
    return random.choice(items)


@dataclass
class UserData:
    email: str
    password: str
    first_name: str
    last_name: str
    full_name: str


def create_sample_user(**overrides: str) -> UserData:
    """Build a user with a unique email; any field can be overridden."""
    first_name = overrides.get("first_name") or random_item([n.split(" ")[0] for n in SAMPLE_DATA["names"]])
    last_name = overrides.get("last_name") or random_item([n.split(" ")[1] for n in SAMPLE_DATA["names"]])
    return UserData(
        email=overrides.get("email") or unique_email(first_name.lower()),
        password=overrides.get("password") or DEFAULT_PASSWORD,
        first_name=first_name,
        last_name=last_name,
        full_name=overrides.get("full_name") or f"{first_name} {last_name}",
    )


@dataclass
class EntityData:
    """Entity form payload. ``title`` is what the list view shows."""

    kind: str
    title: str
    description: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(data.pop("extra"))
        return data


def create_sample_entity(kind: str = "generic", **overrides: Any) -> EntityData:
    """Build sample entity data for ``kind`` (item, note, task or generic)."""
    if kind not in ENTITY_KINDS:
        raise ValueError(f"Unknown entity kind '{kind}'. Expected one of: {', '.join(ENTITY_KINDS)}")

    title = overrides.pop("title", None) or unique_title(random_item(SAMPLE_DATA["titles"]))
    description = overrides.pop("description", None)
    if description is None:
        description = random_item(SAMPLE_DATA["descriptions"])

    if kind == "item":
        extra: Dict[str, Any] = {
            "category": random_item(["Electronics", "Books", "Clothing", "Home", "Sports"]),
            "price": random.randint(10, 1009),
        }
    elif kind == "note":
        extra = {"tags": random_item(["personal", "work", "important", "todo", "idea"])}
    elif kind == "task":
        due = date.today() + timedelta(days=random.randint(0, 30))
        extra = {
            "priority": random_item(["low", "medium", "high", "urgent"]),
            "status": random_item(["todo", "in_progress", "done"]),
            "due_date": due.isoformat(),
        }
    else:
        extra = {"name": random_item(SAMPLE_DATA["names"])}

    extra.update(overrides)
    return EntityData(kind=kind, title=title, description=description, extra=extra)
