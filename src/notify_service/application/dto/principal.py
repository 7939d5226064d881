from __future__ import annotations

from dataclasses import dataclass, field

from notify_service.domain.value_objects.enums import ALL_CHANNELS, STAFF_ROLES, Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT.

    ``channels`` is the staff scope: the recipient channels (vendor ids,
    role tags) the caller may act for. ``"*"`` grants every channel.
    """

    subject_id: str
    role: Role = Role.CUSTOMER
    channels: frozenset[str] = field(default_factory=frozenset)
    name: str = ""
    email: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@")[0]
        return self.subject_id

    def can_act_for(self, channel: str) -> bool:
        """True if the caller holds a staff role scoped to ``channel``."""
        if not self.is_staff:
            return False
        if self.role == Role.SUPER_ADMIN:
            return True
        return ALL_CHANNELS in self.channels or channel in self.channels
