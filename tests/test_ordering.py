import pytest

from netsume.models.history import AccreditationItem, EmploymentItem
from netsume.services.ordering import append_unsaved, move_item, renumber


def _jobs(count):
    return [EmploymentItem(id=f"job-{i}", company=f"Company {i}", order=i) for i in range(count)]


def test_moving_first_to_last_renumbers_new_sequence():
    moved = move_item(_jobs(5), 0, 4)
    assert [item.id for item in moved] == ["job-1", "job-2", "job-3", "job-4", "job-0"]
    assert [item.order for item in moved] == [0, 1, 2, 3, 4]


def test_move_does_not_mutate_input():
    jobs = _jobs(3)
    move_item(jobs, 2, 0)
    assert [item.id for item in jobs] == ["job-0", "job-1", "job-2"]


def test_renumber_heals_gaps():
    items = [AccreditationItem(id="a", order=3), AccreditationItem(id="b", order=9)]
    assert [item.order for item in renumber(items)] == [0, 1]


def test_out_of_range_move_is_rejected():
    with pytest.raises(IndexError):
        move_item(_jobs(2), 0, 2)


def test_extracted_items_are_numbered_after_existing():
    extracted = [EmploymentItem(company="A", id="tmp"), EmploymentItem(company="B")]
    numbered = append_unsaved(3, extracted)
    assert [item.order for item in numbered] == [3, 4]
    assert all(item.id is None for item in numbered)
