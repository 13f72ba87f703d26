from types import SimpleNamespace

import pytest

from queueing.exceptions import DuplicateItem, IndexOutOfRange, MissingDistanceData
from queueing.services.ordering import OrderedSelection


def patient(pid, distance=None):
    return SimpleNamespace(id=pid, distance_from_hospital=distance)


def test_add_keeps_insertion_order_and_rejects_duplicates():
    sel = OrderedSelection([patient(1), patient(2)])
    with pytest.raises(DuplicateItem):
        sel.add(patient(1))
    assert sel.ids == [1, 2]
    assert 2 in sel and 3 not in sel


def test_remove_unknown_id_is_a_noop():
    sel = OrderedSelection([patient(1), patient(2)])
    sel.remove(9)
    assert sel.ids == [1, 2]
    sel.remove(1)
    assert sel.ids == [2]


def test_move_shifts_instead_of_swapping():
    sel = OrderedSelection([patient(i) for i in (1, 2, 3, 4)])
    sel.move(0, 2)
    assert sel.ids == [2, 3, 1, 4]
    sel.move(3, 0)
    assert sel.ids == [4, 2, 3, 1]


@pytest.mark.parametrize('from_index,to_index', [(-1, 0), (0, 3), (5, 1)])
def test_move_out_of_range_leaves_order(from_index, to_index):
    sel = OrderedSelection([patient(i) for i in (1, 2, 3)])
    with pytest.raises(IndexOutOfRange):
        sel.move(from_index, to_index)
    assert sel.ids == [1, 2, 3]


def test_sort_by_distance_is_stable():
    sel = OrderedSelection([patient(1, 5.0), patient(2, 1.5), patient(3, 5.0), patient(4, 0.0)])
    assert sel.can_sort_by_distance()
    sel.sort_by_distance()
    assert sel.ids == [4, 2, 1, 3]


def test_sort_by_distance_with_missing_data_is_refused():
    sel = OrderedSelection([patient(1, 3.0), patient(2), patient(3, 1.0)])
    assert not sel.can_sort_by_distance()
    with pytest.raises(MissingDistanceData) as exc:
        sel.sort_by_distance()
    assert exc.value.item_ids == [2]
    assert sel.ids == [1, 2, 3]


def test_selection_holds_references():
    p = patient(1, 2.0)
    sel = OrderedSelection([p])
    p.distance_from_hospital = 8.0
    assert sel[0].distance_from_hospital == 8.0


def test_sort_by_distance_twice_gives_same_order():
    sel = OrderedSelection([patient(1, 3.0), patient(2, 1.0), patient(3, 3.0), patient(4, 2.0)])
    sel.sort_by_distance()
    once = sel.ids
    sel.sort_by_distance()
    assert sel.ids == once == [2, 4, 1, 3]


def test_every_move_is_a_permutation_keeping_relative_order():
    original = [1, 2, 3, 4, 5]
    for src in range(5):
        for dst in range(5):
            sel = OrderedSelection([patient(i) for i in original])
            sel.move(src, dst)
            moved = original[src]
            assert sorted(sel.ids) == original
            assert sel.ids[dst] == moved
            assert [i for i in sel.ids if i != moved] == [i for i in original if i != moved]
