from tenderadmin.core.api.envelope import Page, estimate_page, unwrap_entity, unwrap_list, unwrap_page


def test_unwrap_page_reads_pagination_block():
    body = {
        "success": True,
        "data": [{"id": 1}, {"id": 2}],
        "pagination": {"total": 45, "page": 3, "limit": 20, "totalPages": 3},
    }

    page = unwrap_page(body, page=1, limit=10)

    assert page.data == [{"id": 1}, {"id": 2}]
    assert (page.total, page.page, page.limit, page.total_pages) == (45, 3, 20, 3)


def test_unwrap_page_derives_total_pages_when_missing():
    body = {"success": True, "data": [{"id": 1}], "pagination": {"total": 21}}

    page = unwrap_page(body, page=2, limit=10)

    assert page.total_pages == 3
    assert page.page == 2


def test_unwrap_page_accepts_bare_array():
    page = unwrap_page([{"id": 1}, {"id": 2}, {"id": 3}])

    assert page.total == 3
    assert page.total_pages == 1


def test_unwrap_page_tolerates_garbage():
    page = unwrap_page({"unexpected": True})

    assert page.data == []
    assert page.total == 0
    assert page.total_pages == 0


def test_unwrap_entity_and_list():
    assert unwrap_entity({"success": True, "data": {"id": 4}}) == {"id": 4}
    assert unwrap_entity({"id": 4}) == {"id": 4}
    assert unwrap_list({"success": True, "data": [1, 2]}) == [1, 2]
    assert unwrap_list([3]) == [3]
    assert unwrap_list({"success": True, "data": None}) == []


def test_estimate_page_full_page_implies_another():
    body = {"success": True, "data": [{"id": n} for n in range(10)], "pagination": {"page": 2, "limit": 10}}

    page = estimate_page(body)

    assert page.total_pages == 3
    assert page.total == 21


def test_estimate_page_short_page_is_last():
    body = {"success": True, "data": [{"id": 1}, {"id": 2}], "pagination": {"page": 2, "limit": 10}}

    page = estimate_page(body)

    assert page.total_pages == 2
    assert page.total == 12


def test_page_map_keeps_counts():
    page = Page(data=[1, 2], total=12, page=2, total_pages=6, limit=2)

    doubled = page.map(lambda n: n * 2)

    assert doubled.data == [2, 4]
    assert (doubled.total, doubled.page, doubled.total_pages, doubled.limit) == (12, 2, 6, 2)
