"""
Tenant-side slices returned by the identity, room, maintenance and payment providers.
"""
from app.models.common import (
    ZERO,
    Amount,
    Identifier,
    Label,
    LenientDateTime,
    OptionalCount,
    ProviderModel,
    RequiredIdentifier,
)


class Tenant(ProviderModel):
    """Resident identity and occupancy link; owned by the identity provider."""

    id: RequiredIdentifier
    name: Label = None
    email: Label = None
    account_id: Identifier = None
    room_id: Identifier = None
    status: Label = None

    @property
    def has_room(self) -> bool:
        return bool(self.room_id)


class RoomInfo(ProviderModel):
    """Room the tenant occupies."""

    id: Identifier = None
    room_number: Label = None
    floor: Label = None
    room_type: Label = None
    capacity: OptionalCount = None
    status: Label = None
    monthly_rent: Amount = ZERO


class MaintenanceRequest(ProviderModel):
    """A maintenance ticket raised by or for the tenant."""

    id: Identifier = None
    room_id: Identifier = None
    tenant_id: Identifier = None
    title: Label = None
    description: Label = None
    priority: Label = None
    status: Label = None
    created_at: LenientDateTime = None


class Payment(ProviderModel):
    """A payment recorded against the tenant's ledger."""

    id: Identifier = None
    tenant_id: Identifier = None
    amount: Amount = ZERO
    payment_method: Label = None
    status: Label = None
    description: Label = None
    reference_number: Label = None
    payment_date: LenientDateTime = None
    created_at: LenientDateTime = None
