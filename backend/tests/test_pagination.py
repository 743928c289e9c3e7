import pytest

from provider_dashboard.services.pagination import paginate


def test_slices_pages():
    page = paginate(list(range(25)), page=3, page_size=10)
    assert page.items == [20, 21, 22, 23, 24]
    assert page.total_pages == 3
    assert page.current_page == 3
    assert page.total_items == 25


def test_page_past_the_end_is_empty():
    page = paginate([1, 2, 3], page=5, page_size=2)
    assert page.items == []
    assert page.total_pages == 2


def test_empty_sequence():
    page = paginate([], page=1)
    assert page.items == []
    assert page.total_pages == 0
    assert page.total_items == 0


@pytest.mark.parametrize("page, size", [(0, 10), (1, 0), (-1, 5)])
def test_invalid_arguments(page, size):
    with pytest.raises(ValueError):
        paginate([1], page=page, page_size=size)
