from typing import List, Sequence


def renumber(items: Sequence) -> list:
    """Copies of ``items`` with ``order`` set to their position."""
    return [item.model_copy(update={"order": index}) for index, item in enumerate(items)]


def move_item(items: Sequence, from_index: int, to_index: int) -> list:
    if not 0 <= from_index < len(items):
        raise IndexError(f"from index {from_index} out of range for {len(items)} item(s)")
    if not 0 <= to_index < len(items):
        raise IndexError(f"to index {to_index} out of range for {len(items)} item(s)")
    reordered = list(items)
    moved = reordered.pop(from_index)
    reordered.insert(to_index, moved)
    return renumber(reordered)


def append_unsaved(existing_count: int, new_items: Sequence) -> List:
    """Number freshly extracted items after the ``existing_count`` saved siblings."""
    return [
        item.model_copy(update={"id": None, "order": existing_count + index})
        for index, item in enumerate(new_items)
    ]
