"""
Module: inventory_kernel.models.party
Responsibility: ORM persistence for the customers and suppliers that orders
    are entered against.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - party_code is unique per party_type (uq_party_type_code) and is not
      editable once created; orders snapshot the party name, not the code.
    - price_tier is set for customers only.  It is the default tier for
      pricing new sales-order lines.
    - Parties are deactivated, never deleted: closed orders keep pointing
      at them.

Failure modes:
    - IntegrityError on a duplicate (party_type, party_code); the party
      service reports it as DuplicatePartyCodeError.
"""

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class PartyModel(TrackedBase):
    """A customer or supplier."""

    __tablename__ = "parties"

    __table_args__ = (
        UniqueConstraint("party_type", "party_code", name="uq_party_type_code"),
        Index("idx_party_type", "party_type"),
        Index("idx_party_name", "name"),
    )

    party_code: Mapped[str] = mapped_column(String(50), nullable=False)

    # "customer" or "supplier"
    party_type: Mapped[str] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    price_tier: Mapped[str | None] = mapped_column(String(16), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<PartyModel {self.party_type}:{self.party_code} {self.name}>"
