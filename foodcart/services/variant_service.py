"""Variant Service - selection rules and price deltas for menu item options.

Pure functions: every call takes the group/menu item definitions and the
current selection explicitly and returns new values. Nothing here raises for
an invalid selection; callers check ``is_complete`` before committing an add.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from foodcart.services.cart_types import (
    MenuItem, SelectedOption, Selection, VariantGroup,
)

logger = logging.getLogger(__name__)


def _ceiling(group: VariantGroup) -> Optional[int]:
    """Max selections for a group, None when unbounded."""
    return group.max_selections or None


def empty_selection(menu_item: MenuItem) -> Selection:
    """Selection with an empty choice set for every group of the item."""
    return {group.id: frozenset() for group in menu_item.variant_groups}


def can_select_more(group: VariantGroup, current: Iterable[str]) -> bool:
    """Whether one more option can be switched on in this group."""
    if group.is_exclusive:
        # exclusive groups replace the current choice
        return True
    ceiling = _ceiling(group)
    return ceiling is None or len(frozenset(current)) < ceiling


def toggle(group: VariantGroup, option_id: str, current: Iterable[str]) -> FrozenSet[str]:
    """
    Toggle one option within a group and return the new choice set.

    - Exclusive groups (max 1): the option replaces any previous choice.
    - Otherwise a selected option is deselected, and an unselected one is
      added only while the group ceiling allows it.
    - Unknown or unavailable options leave the selection unchanged.
    """
    current = frozenset(current)
    option = group.option(option_id)
    if option is None or not option.is_available:
        logger.debug(f"[VARIANTS] ignored toggle of unavailable option {option_id} in group {group.id}")
        return current

    if group.is_exclusive:
        return frozenset({option_id})

    if option_id in current:
        return current - {option_id}

    if not can_select_more(group, current):
        logger.debug(f"[VARIANTS] group {group.id} already has {len(current)} selections, toggle ignored")
        return current

    return current | {option_id}


def toggle_in_selection(menu_item: MenuItem, selection: Selection, group_id: str, option_id: str) -> Selection:
    """Apply ``toggle`` to one group of a full selection and return a new selection."""
    group = menu_item.group(group_id)
    if group is None:
        return dict(selection)
    updated = dict(selection)
    updated[group_id] = toggle(group, option_id, selection.get(group_id, frozenset()))
    return updated


def _group_is_satisfied(group: VariantGroup, chosen: FrozenSet[str]) -> bool:
    count = len(chosen)
    if group.is_required and count == 0:
        # Required groups need at least one option even when min_selections is 0
        return False
    if not group.is_required and count == 0:
        return True
    if group.min_selections and count < group.min_selections:
        return False
    ceiling = _ceiling(group)
    if ceiling is not None and count > ceiling:
        return False
    return True


def incomplete_groups(menu_item: MenuItem, selection: Selection) -> List[VariantGroup]:
    """Groups whose current choice set does not satisfy their rules, in definition order."""
    return [
        group for group in menu_item.variant_groups
        if not _group_is_satisfied(group, frozenset(selection.get(group.id, ())))
    ]


def is_complete(menu_item: MenuItem, selection: Selection) -> bool:
    """True when every variant group of the item accepts its current choices."""
    return not incomplete_groups(menu_item, selection)


def price_delta(menu_item: MenuItem, selection: Selection) -> int:
    """
    Sum of price modifiers of every selected option, in cents.

    Availability is not re-checked here: an option that went unavailable
    after being chosen still counts, so frozen line prices never shift.
    """
    delta = 0
    for group in menu_item.variant_groups:
        chosen = selection.get(group.id, ())
        for option in group.options:
            if option.id in chosen:
                delta += option.price_modifier
    return delta


def preview_unit_price(menu_item: MenuItem, selection: Selection) -> int:
    """Unit price the item would have with this selection."""
    return menu_item.base_price + price_delta(menu_item, selection)


def resolve_selection(menu_item: MenuItem, selection: Selection) -> Tuple[Tuple[str, ...], Tuple[SelectedOption, ...]]:
    """
    Flatten a selection into option ids and descriptors.

    Ordered by group then option definition order; this is the shape
    ``CartService.add_item`` expects.
    """
    ids: List[str] = []
    descriptors: List[SelectedOption] = []
    for group in menu_item.variant_groups:
        chosen = selection.get(group.id, ())
        for option in group.options:
            if option.id in chosen:
                ids.append(option.id)
                descriptors.append(SelectedOption(
                    id=option.id,
                    name=option.name,
                    price_modifier=option.price_modifier,
                ))
    return tuple(ids), tuple(descriptors)


def build_selection(menu_item: MenuItem, choices: Dict[str, Iterable[str]]) -> Selection:
    """
    Build a selection by toggling each requested option in order.

    Used for requests that send the full choice set at once: the toggle rules
    still apply, so an exclusive group keeps only the last option sent and
    choices past a group's ceiling are dropped.
    """
    selection = empty_selection(menu_item)
    for group_id, option_ids in (choices or {}).items():
        for option_id in option_ids or ():
            selection = toggle_in_selection(menu_item, selection, group_id, option_id)
    return selection
