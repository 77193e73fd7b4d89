import httpx
import pytest

from dashboard import BackendUser, Page, fetch_page, iter_pages


@pytest.fixture
def signed_in(store):
    store.set("access_token", "access-2")
    return store


@pytest.mark.asyncio
async def test_fetch_page(stub_api, signed_in):
    page = await fetch_page(stub_api, "/api/users/get-all", BackendUser, page_number=1, page_size=10)

    assert isinstance(page, Page)
    assert [u.id for u in page.content] == [str(i) for i in range(11, 21)]
    assert page.total_elements == 23
    assert page.total_pages == 3
    assert not page.first_page and not page.last_page


@pytest.mark.asyncio
async def test_iter_pages_walks_to_last_page(stub_api, signed_in):
    users = [u async for u in iter_pages(stub_api, "/api/users/get-all", BackendUser, page_size=10)]

    assert len(users) == 23
    assert users[-1].email == "user23@example.com"


@pytest.mark.asyncio
async def test_iter_pages_stops_on_empty_page(backend, api):
    pages = {
        "0": {"content": [{"id": 1}, {"id": 2}]},
        "1": {"data": {"content": []}},
    }
    backend.route("GET", "/api/faqs", lambda r: httpx.Response(200, json=pages[r.url.params["pageNumber"]]))

    items = [item async for item in iter_pages(api, "/api/faqs", dict, page_size=2)]

    assert items == [{"id": 1}, {"id": 2}]
    assert len(backend.calls("/api/faqs")) == 2


@pytest.mark.asyncio
async def test_extra_query_is_sent(backend, api):
    backend.route("GET", "/api/queries", lambda r: httpx.Response(200, json={"content": [], "query": dict(r.url.params)}))

    await fetch_page(api, "/api/queries", dict, query={"status": "OPEN"})

    assert dict(backend.calls("/api/queries")[0].url.params) == {"status": "OPEN", "pageNumber": "0", "pageSize": "10"}


def test_backend_user_fallbacks():
    legacy = BackendUser.model_validate(
        {"id": 5, "firstName": "Ada", "lastName": "Lovelace", "profile_picture": "p.png", "status": "ACTIVE", "mobile_number": "123"}
    )

    assert legacy.id == "5"
    assert legacy.display_name == "Ada Lovelace"
    assert legacy.picture == "p.png"
    assert legacy.active is True
    assert legacy.phone == "123"

    current = BackendUser.model_validate({"id": "6", "fullName": "Grace", "isActive": False})
    assert current.display_name == "Grace"
    assert current.active is False
    assert BackendUser(id="7").display_name == "—"
