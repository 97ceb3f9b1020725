"""Domain entity representing the profile of a notification recipient."""

from dataclasses import dataclass


@dataclass
class Profile:
    """Contact details resolved for a user."""

    id: int | None
    user_id: str
    email: str | None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts)
