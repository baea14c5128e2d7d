import asyncio

import pytest

from tenderadmin.core.api.base import (
    NotFoundError,
    PermissionDeniedError,
    RequestTimeoutError,
    ResponseFormatError,
    ServerError,
    ValidationError,
)
from tenderadmin.core.api.envelope import Page
from tenderadmin.core.listing.controller import (
    SERVER_ERROR_MESSAGE,
    TIMEOUT_MESSAGE,
    ListController,
    LoadState,
)
from tenderadmin.core.listing.debounce import Debouncer
from tenderadmin.core.listing.pagination import item_range, page_window


class RecordingFetch:
    """Fetch stub that records params and serves fixed pages."""

    def __init__(self, total=25, limit=10, error=None):
        self.calls = []
        self.total = total
        self.limit = limit
        self.error = error

    async def __call__(self, params):
        self.calls.append(dict(params))
        if self.error is not None:
            raise self.error
        total_pages = -(-self.total // self.limit)
        return Page(data=[f"row-{params['page']}"] if self.total else [], total=self.total,
                    page=params["page"], total_pages=total_pages, limit=self.limit)


class FakeService:
    label = "Tender"

    def __init__(self, error=None):
        self.error = error
        self.deleted = []

    async def delete(self, item_id):
        if self.error is not None:
            raise self.error
        self.deleted.append(item_id)


def _controller(fetch, notifier, **kwargs):
    kwargs.setdefault("debounce_ms", 10)
    return ListController(fetch, label="tenders", notifier=notifier, **kwargs)


@pytest.mark.asyncio
async def test_refresh_loads_page(notifier):
    fetch = RecordingFetch(total=25)
    controller = _controller(fetch, notifier)

    page = await controller.refresh()

    assert page is not None
    assert controller.state == LoadState.SUCCESS
    assert controller.items == ["row-1"]
    assert (controller.total_items, controller.total_pages) == (25, 3)
    assert controller.has_pagination
    assert controller.showing == (1, 10)
    assert fetch.calls == [{"page": 1, "limit": 10}]


@pytest.mark.asyncio
async def test_debounced_search_sends_only_last_value(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier, search_key="value")

    controller.set_search("r")
    controller.set_search("ro")
    controller.set_search("road ")
    await asyncio.sleep(0)
    assert fetch.calls == []
    await controller.wait_for_search()

    assert fetch.calls == [{"page": 1, "limit": 10, "value": "road"}]


@pytest.mark.asyncio
async def test_search_waits_for_the_debounce_window(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier, debounce_ms=10_000)

    controller.set_search("r")
    controller.set_search("road")
    await asyncio.sleep(0)
    await asyncio.sleep(0.01)

    assert fetch.calls == []
    assert controller.state == LoadState.IDLE

    await controller.flush_search()

    assert fetch.calls == [{"page": 1, "limit": 10, "search": "road"}]


@pytest.mark.asyncio
async def test_search_resets_to_first_page(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier, debounce_ms=10_000)
    await controller.set_page(3)

    controller.set_search("bridge")
    await controller.flush_search()

    assert controller.page == 1
    assert fetch.calls[-1] == {"page": 1, "limit": 10, "search": "bridge"}


@pytest.mark.asyncio
async def test_filter_change_resets_page_and_drops_empty_values(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)
    await controller.set_page(2)

    await controller.set_filter("category_id", 4)
    await controller.set_filter("region_id", "")

    assert controller.page == 1
    assert len(fetch.calls) == 2
    assert fetch.calls[-1] == {"page": 1, "limit": 10, "category_id": 4}


@pytest.mark.asyncio
async def test_no_pagination_for_empty_or_single_page(notifier):
    empty = _controller(RecordingFetch(total=0), notifier)
    single = _controller(RecordingFetch(total=7), notifier)

    await empty.refresh()
    await single.refresh()

    assert not empty.has_pagination
    assert empty.is_empty
    assert empty.showing == (0, 0)
    assert not single.has_pagination
    assert not single.is_empty


@pytest.mark.asyncio
async def test_page_past_end_returns_to_first_page(notifier):
    fetch = RecordingFetch(total=15)
    controller = _controller(fetch, notifier)
    controller.configure(page=5)

    await controller.refresh()

    assert controller.page == 1
    assert [call["page"] for call in fetch.calls] == [5, 1]
    assert controller.items == ["row-1"]


@pytest.mark.asyncio
async def test_identical_params_are_not_refetched(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)

    await controller.refresh()
    skipped = await controller.refresh()
    await controller.refresh(force=True)

    assert skipped is None
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_stale_response_is_discarded(notifier):
    gates = {1: asyncio.Event(), 2: asyncio.Event()}

    async def fetch(params):
        await gates[params["page"]].wait()
        return Page(data=[f"page-{params['page']}"], total=30, page=params["page"], total_pages=3, limit=10)

    controller = _controller(fetch, notifier)
    first = asyncio.create_task(controller.refresh())
    await asyncio.sleep(0)
    controller.page = 2
    second = asyncio.create_task(controller.refresh())
    await asyncio.sleep(0)

    gates[2].set()
    assert await second is not None
    gates[1].set()
    assert await first is None

    assert controller.items == ["page-2"]
    assert controller.page == 2
    assert controller.sequence == 2


@pytest.mark.asyncio
async def test_stale_failure_is_discarded(notifier):
    gate = asyncio.Event()

    async def fetch(params):
        if params["page"] == 1:
            await gate.wait()
            raise ServerError("boom", status=500)
        return Page(data=["fresh"], total=20, page=2, total_pages=2, limit=10)

    controller = _controller(fetch, notifier)
    first = asyncio.create_task(controller.refresh())
    await asyncio.sleep(0)
    await controller.set_page(2)
    gate.set()
    await first

    assert controller.state == LoadState.SUCCESS
    assert controller.error is None
    assert notifier.history == []


@pytest.mark.asyncio
async def test_timeout_is_shown_inline_without_notification(notifier):
    controller = _controller(RecordingFetch(error=RequestTimeoutError("timeout of 10000ms exceeded")), notifier)

    await controller.refresh()

    assert controller.state == LoadState.ERROR
    assert controller.error == TIMEOUT_MESSAGE
    assert notifier.history == []


@pytest.mark.asyncio
async def test_server_error_is_notified(notifier):
    controller = _controller(RecordingFetch(error=ServerError("boom", status=502)), notifier)

    await controller.refresh()

    assert controller.error == SERVER_ERROR_MESSAGE
    assert notifier.last.title == "Loading Failed"
    assert notifier.last.duration_ms == 8000


@pytest.mark.asyncio
async def test_other_errors_use_label_and_retry_refetches(notifier):
    fetch = RecordingFetch(error=ValidationError("bad filter", status=400))
    controller = _controller(fetch, notifier)

    await controller.refresh()
    fetch.error = None
    await controller.retry()

    assert notifier.history[0].message == "Failed to load tenders"
    assert controller.state == LoadState.SUCCESS
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_delete_success_notifies_and_refreshes(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)
    await controller.refresh()
    service = FakeService()

    deleted = await controller.delete(9, service, name="Road works")

    assert deleted
    assert service.deleted == [9]
    assert notifier.last.title == "Tender Deleted"
    assert notifier.last.message == '"Road works" has been deleted successfully.'
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_delete_of_missing_row_refreshes_without_raising(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)

    deleted = await controller.delete(9, FakeService(NotFoundError("gone", status=404)))

    assert not deleted
    assert notifier.history[0].title == "Tender Not Found"
    assert len(fetch.calls) == 1


@pytest.mark.asyncio
async def test_delete_forbidden_is_reported(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)

    deleted = await controller.delete(9, FakeService(PermissionDeniedError("no", status=403)))

    assert not deleted
    assert notifier.last.title == "Permission Denied"
    assert fetch.calls == []


@pytest.mark.asyncio
async def test_debouncer_cancel_and_flush():
    seen = []
    debouncer = Debouncer(10_000, seen.append)

    debouncer.call("dropped")
    debouncer.cancel()
    debouncer.call("kept")
    await debouncer.flush()

    assert seen == ["kept"]
    assert not debouncer.pending


def test_page_window():
    assert page_window(1, 3) == [1, 2, 3]
    assert page_window(2, 10) == [1, 2, 3, 4, 5]
    assert page_window(9, 10) == [6, 7, 8, 9, 10]
    assert page_window(6, 10) == [4, 5, 6, 7, 8]
    assert page_window(1, 0) == []


def test_item_range():
    assert item_range(2, 10, 45) == (11, 20)
    assert item_range(5, 10, 45) == (41, 45)
    assert item_range(1, 10, 0) == (0, 0)


@pytest.mark.asyncio
async def test_clear_filters_refetches_first_page(notifier):
    fetch = RecordingFetch()
    controller = _controller(fetch, notifier)
    controller.configure(page=2, filters={"category_id": 4})
    await controller.refresh()

    await controller.clear_filters()

    assert controller.filters == {}
    assert fetch.calls[-1] == {"page": 1, "limit": 10}


@pytest.mark.asyncio
async def test_malformed_rows_leave_list_usable(notifier):
    fetch = RecordingFetch(error=ResponseFormatError("The server returned an invalid region record"))
    controller = _controller(fetch, notifier)

    await controller.refresh()
    fetch.error = None
    await controller.refresh()

    assert notifier.history[0].message == "Failed to load tenders"
    assert controller.state == LoadState.SUCCESS
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_unexpected_error_does_not_leave_list_loading(notifier):
    fetch = RecordingFetch(error=RuntimeError("decoder crashed"))
    controller = _controller(fetch, notifier)

    with pytest.raises(RuntimeError):
        await controller.refresh()

    assert controller.state == LoadState.ERROR
    assert controller.error == "Failed to load tenders"
    fetch.error = None
    assert await controller.refresh() is not None
    assert len(fetch.calls) == 2
