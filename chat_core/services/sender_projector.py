"""
Sender projections for MessageSent payloads.

The projector is injected into MessageService at construction time; it decides
how much of the sender's identity leaves this core.
"""
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Protocol

from chat_core.config import settings
from chat_core.models.participant import ParticipantRef

# Host-application lookup of a participant's details (name, avatar, ...)
ParticipantResolver = Callable[[ParticipantRef], Awaitable[Optional[Dict[str, Any]]]]


class SenderProjector(Protocol):
    """Strategy turning a sender reference into the payload's ``sender`` field."""

    async def project(self, sender: Optional[ParticipantRef]) -> Optional[Dict[str, Any]]:
        ...


class DefaultSenderProjector:
    """Expose only the sender's kind and id."""

    async def project(self, sender: Optional[ParticipantRef]) -> Optional[Dict[str, Any]]:
        if sender is None:
            return None
        return sender.as_dict()


class WhitelistSenderProjector:
    """
    Expose resolved sender details, restricted to whitelisted fields.

    An empty whitelist exposes everything the resolver returns. A sender the
    resolver cannot find projects to None.

    Example:
        ```python
        async def lookup(ref):
            return await user_directory.get(ref.id)

        projector = WhitelistSenderProjector(lookup, fields=["id", "name"])
        service = MessageService(db, sink, sender_projector=projector)
        ```
    """

    def __init__(self, resolver: ParticipantResolver, fields: Optional[Iterable[str]] = None):
        self.resolver = resolver
        self.fields = list(fields) if fields is not None else list(settings.sender_fields_whitelist)

    async def project(self, sender: Optional[ParticipantRef]) -> Optional[Dict[str, Any]]:
        if sender is None:
            return None

        details = await self.resolver(sender)
        if details is None:
            return None

        if not self.fields:
            return dict(details)

        return {field: details[field] for field in self.fields if field in details}
