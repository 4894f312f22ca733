"""
PartyService -- customer and supplier maintenance.

Customers carry a default price tier used when pricing sales-order lines;
suppliers carry none.  Party codes are unique per party type and are fixed
once created.  Parties are deactivated rather than deleted so that orders
entered against them stay resolvable.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from inventory_kernel.domain.dtos import PartyInfo, PartyType, PriceTier
from inventory_kernel.exceptions import (
    DuplicatePartyCodeError,
    PartyInactiveError,
    PartyNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.party import PartyModel
from inventory_kernel.services.base import BaseService

logger = get_logger("services.party_service")

_EDITABLE_FIELDS = frozenset({"name", "price_tier", "is_active"})


def _tier_for(party_type: PartyType, price_tier: PriceTier | str | None) -> str | None:
    if party_type is PartyType.SUPPLIER:
        if price_tier is not None:
            raise ValueError("Suppliers do not carry a price tier")
        return None
    return PriceTier(price_tier or PriceTier.RETAIL).value


class PartyService(BaseService):
    """Creates and edits parties.  Flush-only."""

    def _get_by_id(self, party_id: UUID) -> PartyModel:
        party = self.session.get(PartyModel, party_id)
        if party is None:
            raise PartyNotFoundError(str(party_id))
        return party

    def create_party(
        self,
        party_code: str,
        party_type: PartyType | str,
        name: str,
        actor_id: UUID,
        price_tier: PriceTier | str | None = None,
    ) -> PartyInfo:
        """
        Register a customer or supplier.

        Customers default to the retail tier.

        Raises:
            DuplicatePartyCodeError: Code already used by this party type.
            ValueError: Blank code/name, unknown tier, or a tier on a supplier.
        """
        party_type = PartyType(party_type)
        party_code = (party_code or "").strip()
        name = (name or "").strip()
        if not party_code or not name:
            raise ValueError("Party code and name are required")
        tier = _tier_for(party_type, price_tier)

        existing = self.session.scalars(
            select(PartyModel.id)
            .where(PartyModel.party_type == party_type.value)
            .where(PartyModel.party_code == party_code)
        ).first()
        if existing is not None:
            raise DuplicatePartyCodeError(party_code, party_type.value)

        party = PartyModel(
            party_code=party_code,
            party_type=party_type.value,
            name=name,
            price_tier=tier,
            is_active=True,
            created_by_id=actor_id,
        )
        self.session.add(party)
        try:
            self.session.flush()
        except IntegrityError as exc:
            logger.warning("concurrent_party_code_conflict", extra={
                "party_code": party_code,
                "party_type": party_type.value,
            })
            raise DuplicatePartyCodeError(party_code, party_type.value) from exc

        logger.info("party_created", extra={
            "party_id": str(party.id),
            "party_code": party_code,
            "party_type": party_type.value,
        })
        return PartyInfo.from_model(party)

    def update_party(self, party_id: UUID, actor_id: UUID, **changes) -> PartyInfo:
        """
        Edit name, price_tier or is_active.  The code and type are fixed.

        Raises:
            PartyNotFoundError: Unknown party.
            ValueError: Non-editable field, blank name, or a tier on a supplier.
        """
        illegal = set(changes) - _EDITABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not editable here: {sorted(illegal)}")

        party = self._get_by_id(party_id)
        party_type = PartyType(party.party_type)
        if "price_tier" in changes:
            if changes["price_tier"] is None and party_type is PartyType.CUSTOMER:
                raise ValueError("Customers must keep a price tier")
            changes["price_tier"] = _tier_for(party_type, changes["price_tier"])
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValueError("Party name is required")

        for field_name, value in changes.items():
            setattr(party, field_name, value)
        party.updated_by_id = actor_id
        self.session.flush()

        logger.info("party_updated", extra={
            "party_id": str(party_id),
            "fields": sorted(changes),
        })
        return PartyInfo.from_model(party)

    def require_for_order(self, party_id: UUID, party_type: PartyType) -> PartyModel:
        """
        Load the party an order is being entered against.

        Raises:
            PartyNotFoundError: Unknown id, or a party of the other type.
            PartyInactiveError: The party has been deactivated.
        """
        party = self.session.get(PartyModel, party_id)
        if party is None or party.party_type != party_type.value:
            raise PartyNotFoundError(str(party_id), party_type.value)
        if not party.is_active:
            raise PartyInactiveError(party.party_code, party_type.value)
        return party
