"""Domain models for sf_project — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Project:
    id: str
    name: str
    created_at: datetime | None = None
