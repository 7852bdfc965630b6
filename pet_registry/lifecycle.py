"""Pet status lifecycle: missing -> found -> reunited."""

from pet_registry.exceptions import InvalidTransitionError, UnauthorizedError
from pet_registry.models.enums import PetStatus
from pet_registry.models.pet import PetRecord

INITIAL_STATUS = PetStatus.MISSING
TERMINAL_STATUSES = frozenset({PetStatus.REUNITED})

ALLOWED_TRANSITIONS: frozenset[tuple[PetStatus, PetStatus]] = frozenset({
    (PetStatus.MISSING, PetStatus.FOUND),
    (PetStatus.FOUND, PetStatus.REUNITED),
    (PetStatus.MISSING, PetStatus.REUNITED),
})


class StatusLifecycle:
    """Gate status changes by ownership and the transition table."""

    def can_transition(self, current: PetStatus, target: PetStatus) -> bool:
        return (current, target) in ALLOWED_TRANSITIONS

    def allowed_targets(self, current: PetStatus) -> list[PetStatus]:
        return [to for frm, to in sorted(ALLOWED_TRANSITIONS) if frm is current]

    def check(self, record: PetRecord, caller: str, target: PetStatus) -> None:
        """Raise unless ``caller`` may move ``record`` to ``target``.

        Ownership is checked before the transition table.

        Raises
        ------
        UnauthorizedError
            If ``caller`` is not the record owner.
        InvalidTransitionError
            If the transition is not allowed from the current status.
        """
        if caller != record.owner:
            raise UnauthorizedError(f"Not authorized to change status of pet {record.pet_id}")
        if not self.can_transition(record.status, target):
            raise InvalidTransitionError(
                f"Cannot change status from {record.status.value} to {target.value}"
            )
