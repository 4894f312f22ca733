"""
PartySelector -- read access to customers and suppliers.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select

from inventory_kernel.domain.dtos import PartyInfo, PartyType
from inventory_kernel.models.party import PartyModel
from inventory_kernel.selectors.base import BaseSelector


class PartySelector(BaseSelector):

    def get(self, party_id: UUID) -> PartyInfo | None:
        model = self.session.get(PartyModel, party_id)
        return PartyInfo.from_model(model) if model is not None else None

    def find_by_code(self, party_type: PartyType | str, party_code: str) -> PartyInfo | None:
        model = self.session.scalars(
            select(PartyModel)
            .where(PartyModel.party_type == PartyType(party_type).value)
            .where(PartyModel.party_code == party_code)
        ).first()
        return PartyInfo.from_model(model) if model is not None else None

    def list_parties(
        self,
        party_type: PartyType | str,
        active_only: bool = True,
        search: str | None = None,
    ) -> tuple[PartyInfo, ...]:
        """Parties of one type ordered by code, optionally filtered on code or name."""
        stmt = select(PartyModel).where(PartyModel.party_type == PartyType(party_type).value)
        if active_only:
            stmt = stmt.where(PartyModel.is_active.is_(True))
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(PartyModel.name.ilike(pattern), PartyModel.party_code.ilike(pattern))
            )
        stmt = stmt.order_by(PartyModel.party_code)
        return tuple(PartyInfo.from_model(m) for m in self.session.scalars(stmt))
