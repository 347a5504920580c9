"""Structural types shared by the variant validator and the cart aggregator.

Catalog records are converted into these at the service boundary (see
``Restaurant.to_domain()`` and friends); nothing backend-specific is carried
into the cart. All money values are integer cents.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Tuple


@dataclass(frozen=True, slots=True)
class VariantOption:
    id: str
    group_id: str
    name: str
    price_modifier: int = 0
    is_available: bool = True


@dataclass(frozen=True, slots=True)
class VariantGroup:
    """A named set of options with selection-count rules.

    ``max_selections == 1`` means exclusive choice. ``max_selections`` of
    0 or None means there is no ceiling.
    """

    id: str
    menu_item_id: str
    name: str
    is_required: bool = False
    min_selections: int = 0
    max_selections: Optional[int] = None
    options: Tuple[VariantOption, ...] = ()

    @property
    def is_exclusive(self) -> bool:
        return self.max_selections == 1

    def option(self, option_id: str) -> Optional[VariantOption]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


@dataclass(frozen=True, slots=True)
class MenuItem:
    id: str
    name: str
    base_price: int
    restaurant_id: str
    is_available: bool = True
    image_url: Optional[str] = None
    variant_groups: Tuple[VariantGroup, ...] = ()

    def group(self, group_id: str) -> Optional[VariantGroup]:
        for grp in self.variant_groups:
            if grp.id == group_id:
                return grp
        return None


@dataclass(frozen=True, slots=True)
class Restaurant:
    id: str
    name: str
    delivery_fee: int = 0
    minimum_order: int = 0


@dataclass(frozen=True, slots=True)
class SelectedOption:
    """Option descriptor denormalized onto a line item."""

    id: str
    name: str
    price_modifier: int = 0


# group id -> chosen option ids
Selection = Dict[str, FrozenSet[str]]


def option_key(option_ids: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Order-insensitive identity of a selection; None and [] are the same."""
    return frozenset(option_ids or ())


@dataclass(frozen=True, slots=True)
class LineItem:
    product_id: str
    name: str
    quantity: int
    base_price: int
    unit_price: int
    total_price: int
    selected_option_ids: FrozenSet[str] = frozenset()
    selected_options: Tuple[SelectedOption, ...] = ()
    image_url: Optional[str] = None

    def matches(self, product_id: str, option_ids: Optional[Iterable[str]]) -> bool:
        """True when this line is the same line as (product_id, option_ids)."""
        return self.product_id == product_id and self.selected_option_ids == option_key(option_ids)


@dataclass(frozen=True, slots=True)
class Cart:
    """Immutable cart snapshot; ``subtotal`` and ``total`` are always derived."""

    restaurant_id: str
    restaurant_name: str
    items: Tuple[LineItem, ...] = ()
    delivery_fee: int = 0
    minimum_order: int = 0
    subtotal: int = field(init=False)
    total: int = field(init=False)

    def __post_init__(self):
        subtotal = sum(item.total_price for item in self.items)
        object.__setattr__(self, 'subtotal', subtotal)
        object.__setattr__(self, 'total', subtotal + self.delivery_fee)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class AddOutcome(enum.Enum):
    ADDED = 'added'
    INCREASED = 'increased'
    CONFLICT = 'conflict'


@dataclass(frozen=True, slots=True)
class AddResult:
    """What ``CartService.add_item`` did.

    ``CONFLICT`` means the cart belongs to another restaurant and nothing was
    changed; the caller may retry with ``replace=True``.
    """

    outcome: AddOutcome
    cart: Optional[Cart]
    line: Optional[LineItem] = None

    @property
    def is_conflict(self) -> bool:
        return self.outcome is AddOutcome.CONFLICT
