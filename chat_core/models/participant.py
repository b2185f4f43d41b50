"""
Participant reference value object.

A participant is anything that can take part in a conversation (a user, a bot,
a team...). Identity resolution belongs to the host application; this core only
ever sees the (kind, id) pair and uses it as a composite key.
"""
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class ParticipantRef:
    """
    Polymorphic reference to a participant.

    Equal when both kind and id match. Ids are normalised to strings so that
    ``ParticipantRef("user", 1) == ParticipantRef("user", "1")``.

    Example:
        ```python
        alice = ParticipantRef("user", "42")
        await read_flag_service.mark_read(message.id, alice)
        ```
    """

    kind: str
    id: str

    def __post_init__(self):
        if not self.kind:
            raise ValueError("Participant kind cannot be empty")
        object.__setattr__(self, "id", str(self.id))

    @classmethod
    def of(cls, holder: Any) -> "ParticipantRef":
        """Build a reference from any row carrying messageable_type/messageable_id."""
        return cls(holder.messageable_type, holder.messageable_id)

    def as_dict(self) -> dict:
        return {"participant_type": self.kind, "participant_id": self.id}

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"


def participant_clause(model: Any, participant: ParticipantRef) -> ColumnElement[bool]:
    """SQL condition matching ``model`` rows that belong to ``participant``."""
    return and_(
        model.messageable_type == participant.kind,
        model.messageable_id == participant.id
    )
