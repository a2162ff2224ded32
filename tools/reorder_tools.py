"""
Reorder Tools - Drag-and-drop reordering for sections and columns

A drag ends with an "active" item (the one being dragged) dropped over
another item. The active item takes the position the "over" item had,
and everything in between shifts by one.
"""

from typing import Optional


def array_move(items: list, old_index: int, new_index: int) -> list:
    """
    Move the element at old_index to new_index.

    Removes the element and reinserts it, so the element ends up exactly
    at new_index in the returned list. The input list is not modified.
    """
    result = list(items)
    item = result.pop(old_index)
    result.insert(new_index, item)
    return result


def find_index(items: list, item_id: str) -> Optional[int]:
    """Index of the item whose 'id' equals item_id, or None."""
    for index, item in enumerate(items):
        if isinstance(item, dict) and item.get('id') == item_id:
            return index
    return None


def move(items: list, active_id: str, over_id: str) -> list:
    """
    Move the item with active_id to where over_id currently is.

    Args:
        items: List of dicts carrying an 'id' key
        active_id: ID of the dragged item
        over_id: ID of the item it was dropped on

    Returns:
        New list in the new order. When the ids are equal, or either id is
        missing (a stale drag event), the order is unchanged.
    """
    if active_id == over_id:
        return list(items)

    old_index = find_index(items, active_id)
    new_index = find_index(items, over_id)

    if old_index is None or new_index is None:
        return list(items)

    return array_move(items, old_index, new_index)
