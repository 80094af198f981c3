"""Card registry — canonical id to card implementation.

Saves store only ``CardName`` ids; ``get_card`` turns them back into the
shared card instance.  ``card_name_from_title`` maps printed titles, which
older saves stored, back to ids.
"""

from __future__ import annotations

from cards.corporations import Factorum, SaturnSystems
from cards.models import CardBase, CardName, CardType
from cards.preludes import AquiferTurbines
from cards.project import (
    BusinessContacts,
    Fish,
    FoodFactory,
    GeneRepair,
    Insulation,
    IoMiningIndustries,
    LagrangeObservatory,
    LunarBeam,
    MeatIndustry,
    PowerSupplyConsortium,
)

ALL_CARDS: dict[CardName, CardBase] = {
    card.name: card
    for card in (
        AquiferTurbines(),
        BusinessContacts(),
        Factorum(),
        Fish(),
        FoodFactory(),
        GeneRepair(),
        Insulation(),
        IoMiningIndustries(),
        LagrangeObservatory(),
        LunarBeam(),
        MeatIndustry(),
        PowerSupplyConsortium(),
        SaturnSystems(),
    )
}

_BY_TITLE: dict[str, CardName] = {card.title: name for name, card in ALL_CARDS.items()}


def get_card(name: CardName | str) -> CardBase:
    """Return the registered card for *name*.

    Raises ``ValueError`` for ids that are not registered.
    """
    card = ALL_CARDS.get(CardName(name))
    if card is None:
        raise ValueError(f"Card {name!r} is not registered")
    return card


def card_name_from_title(title: str) -> CardName | None:
    return _BY_TITLE.get(title)


def project_card_names() -> list[CardName]:
    """Ids of every card that belongs in the project deck."""
    return [
        name for name, card in ALL_CARDS.items()
        if card.card_type not in (CardType.CORPORATION, CardType.PRELUDE)
    ]
