"""The staff member performing a command.

Commands carry the actor explicitly; nothing in the domain reads an
ambient "current user".
"""

from dataclasses import dataclass

DEFAULT_ACTOR_NAME = "Admin"


@dataclass(frozen=True)
class Actor:
    actor_id: str = ""
    name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email or DEFAULT_ACTOR_NAME

    @classmethod
    def from_command(cls, command) -> "Actor":
        return cls(
            actor_id=command.actor_id or "",
            name=command.actor_name or "",
            email=command.actor_email or "",
        )
