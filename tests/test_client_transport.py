import httpx
import pytest

from stash.client.sync import STATUS_FULLY_LOADED, SyncController
from stash.client.transport import StashClient
from stash.errors import NotFound, TransientFetchFailure, Unauthorized, ValidationFailure


@pytest.fixture
def stash_client(app):
    client = StashClient(
        base_url="http://stash.test", transport=httpx.WSGITransport(app=app)
    )
    client.login("admin", "secret")
    yield client
    client.close()


def test_login_rejects_bad_credentials(app):
    with StashClient(
        base_url="http://stash.test", transport=httpx.WSGITransport(app=app)
    ) as client:
        with pytest.raises(Unauthorized):
            client.login("admin", "nope")
        with pytest.raises(Unauthorized):
            client.list_all()


def test_record_store_round_trip(stash_client):
    page = stash_client.insert("https://docs.python.org/3/", "", "python")
    note = stash_client.insert(None, "buy milk", "")

    assert page.domain == "docs.python.org"
    assert page.title == "Title of https://docs.python.org/3/"
    assert note.domain == "Notes"
    assert note.is_note

    assert [r.id for r in stash_client.list_newest_first(limit=1)] == [note.id]
    assert {r.id for r in stash_client.list_all()} == {page.id, note.id}
    assert [r.id for r in stash_client.search_substring("milk")] == [note.id]
    assert stash_client.verify()["username"] == "admin"

    updated = stash_client.update(page.id, "https://peps.python.org/", "pep index", "")
    assert updated.domain == "peps.python.org"
    assert stash_client.get(page.id).notes == "pep index"

    assert stash_client.delete(page.id) is True
    assert stash_client.delete(page.id) is False
    with pytest.raises(NotFound):
        stash_client.get(page.id)


def test_store_errors_map_to_taxonomy(stash_client):
    with pytest.raises(ValidationFailure):
        stash_client.insert(None, "   ", "")
    with pytest.raises(NotFound):
        stash_client.update(12345, None, "x", "")

    stash_client.token = "tampered"
    with pytest.raises(Unauthorized):
        stash_client.list_newest_first(limit=20)


def test_network_errors_become_transient_failures():
    def _refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = StashClient(
        base_url="http://stash.test", token="t", transport=httpx.MockTransport(_refuse)
    )
    with pytest.raises(TransientFetchFailure):
        client.list_all()

    client = StashClient(
        base_url="http://stash.test",
        token="t",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(500, json={"error": "Failed to fetch bookmarks"})
        ),
    )
    with pytest.raises(TransientFetchFailure, match="Failed to fetch bookmarks"):
        client.list_all()


def test_controller_against_live_api(stash_client, scheduler):
    for number in range(23):
        stash_client.insert(f"https://site{number % 4}.test/{number}", "", "")
    signed_out = []
    controller = SyncController(
        stash_client, scheduler=scheduler, on_session_invalid=lambda: signed_out.append(1)
    )

    controller.activate()
    assert len(controller.state.all_records) == 20
    scheduler.run_pending()
    assert controller.state.status == STATUS_FULLY_LOADED
    assert len(controller.state.all_records) == 23

    note = controller.add(None, "kubernetes upgrade checklist", "ops")
    scheduler.run_pending()
    assert controller.state.all_records[0].id == note.id

    controller.apply_query("kubenetes")
    assert [r.id for r in controller.state.filtered] == [note.id]

    stash_client.token = "expired"
    controller.reload()
    assert signed_out == [1]
