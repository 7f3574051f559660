import pytest

from dlpc900ctl import InvalidArgument, SequenceAllocator


def test_starts_at_one():
    assert SequenceAllocator().next() == 1


def test_wraps_from_255_to_1_and_never_issues_zero():
    seq = SequenceAllocator()
    values = [seq.next() for _ in range(300)]
    assert 0 not in values
    assert values[:255] == list(range(1, 256))
    assert values[255:] == list(range(1, 46))
    for previous, value in zip(values, values[1:]):
        assert value == previous + 1 or (previous, value) == (255, 1)


def test_current_does_not_advance():
    seq = SequenceAllocator(start=255)
    assert seq.current == 255
    assert seq.current == 255
    assert seq.next() == 255
    assert seq.current == 1


@pytest.mark.parametrize("start", [0, 256, -1])
def test_rejects_start_outside_range(start):
    with pytest.raises(InvalidArgument):
        SequenceAllocator(start=start)
