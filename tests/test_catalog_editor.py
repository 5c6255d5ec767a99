import pytest

from bakery.schemas.catalog import BreadCategory, CatalogResult, EditorOperation
from bakery.services.catalog_editor import (
    CatalogEditor,
    EditorError,
    EDITING,
    VIEWING,
    max_item_id,
)

from conftest import auth_header

ADMIN_AUTH = auth_header("admin-token")

BASELINE = [
    BreadCategory(title="Sourdough", price=30, breads=[{"id": 1, "name": "Classic"}, {"id": 2, "name": "Olive"}]),
    BreadCategory(title="Rye", price=26, breads=[{"id": 7, "name": "Dark"}]),
]


def op(name, /, **fields):
    return EditorOperation(op=name, **fields)


@pytest.fixture
def editor():
    editor = CatalogEditor(BASELINE, revision=4)
    editor.start_editing()
    return editor


def test_operations_require_editing_mode():
    editor = CatalogEditor(BASELINE, revision=4)
    assert editor.mode == VIEWING
    with pytest.raises(EditorError):
        editor.apply(op("add_category"))


def test_add_category_prepends_with_next_id(editor):
    editor.apply(op("add_category"))
    first = editor.catalog[0]
    assert first["price"] == 0
    assert first["breads"] == [{"id": 8, "name": "מוצר חדש"}]
    assert editor.has_changes


def test_add_item_uses_global_max_id(editor):
    editor.apply(op("add_item", category_index=0))
    assert editor.catalog[0]["breads"][0]["id"] == 8
    assert max_item_id(editor.catalog) == 8


def test_cannot_remove_last_category(editor):
    editor.apply(op("remove_category", category_index=1))
    with pytest.raises(EditorError):
        editor.apply(op("remove_category", category_index=0))
    assert len(editor.catalog) == 1


def test_cannot_remove_last_item_in_category(editor):
    with pytest.raises(EditorError):
        editor.apply(op("remove_item", category_index=1, item_index=0))
    editor.apply(op("remove_item", category_index=0, item_index=1))
    assert [b["id"] for b in editor.catalog[0]["breads"]] == [1]


def test_move_is_noop_at_edges(editor):
    editor.apply(op("move_category", category_index=0, direction="up"))
    assert not editor.has_changes
    editor.apply(op("move_item", category_index=0, item_index=1, direction="down"))
    assert not editor.has_changes

    editor.apply(op("move_category", category_index=0, direction="down"))
    assert [c["title"] for c in editor.catalog] == ["Rye", "Sourdough"]


def test_revert_to_baseline_clears_changes(editor):
    editor.apply(op("rename_item", category_index=1, item_index=0, name="Light"))
    assert editor.has_changes
    editor.apply(op("rename_item", category_index=1, item_index=0, name="Dark"))
    assert not editor.has_changes


def test_update_category(editor):
    editor.apply(op("update_category", category_index=1, title="Rye bread", price=27))
    assert editor.catalog[1]["title"] == "Rye bread"
    assert editor.catalog[1]["price"] == 27
    with pytest.raises(EditorError):
        editor.apply(op("update_category", category_index=1))


def test_bad_index(editor):
    with pytest.raises(EditorError):
        editor.apply(op("rename_item", category_index=5, item_index=0, name="x"))


def test_discard_needs_confirmation_with_changes(editor):
    editor.apply(op("add_category"))
    assert editor.discard() is False
    assert editor.mode == EDITING

    assert editor.discard(confirmed=True) is True
    assert editor.mode == VIEWING
    assert not editor.has_changes


def test_failed_save_stays_in_editing(editor):
    editor.apply(op("add_category"))
    result = editor.save(lambda categories: CatalogResult(success=False, error="boom"))
    assert not result.success
    assert editor.mode == EDITING
    assert editor.has_changes


def test_successful_save_becomes_baseline(editor):
    editor.apply(op("add_category"))
    result = editor.save(lambda categories: CatalogResult(success=True, revision=5))
    assert result.success
    assert editor.mode == VIEWING
    assert editor.revision == 5
    assert not editor.has_changes
    assert editor.baseline[0]["title"] == "קטגוריה חדשה"


def test_editor_session_over_http(client, admin_profile):
    state = client.post("/admin/catalog/editor", headers=ADMIN_AUTH).json()["state"]
    assert state["mode"] == "editing"
    assert state["revision"] == 0
    assert state["has_changes"] is False

    response = client.post(
        "/admin/catalog/editor/ops",
        json={"op": "rename_item", "category_index": 0, "item_index": 0, "name": "Chia crust"},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 200
    assert response.json()["state"]["has_changes"] is True

    saved = client.post("/admin/catalog/editor/save", headers=ADMIN_AUTH).json()
    assert saved["success"] is True
    assert saved["state"]["mode"] == "viewing"
    assert saved["state"]["revision"] == 1

    catalog = client.get("/catalog").json()
    assert catalog["revision"] == 1
    assert catalog["categories"][0]["breads"][0]["name"] == "Chia crust"


def test_editor_blocked_operation_over_http(client, admin_profile):
    client.post("/admin/catalog/editor", headers=ADMIN_AUTH)
    for _ in range(3):
        client.post("/admin/catalog/editor/ops", json={"op": "remove_category", "category_index": 0}, headers=ADMIN_AUTH)

    response = client.post(
        "/admin/catalog/editor/ops",
        json={"op": "remove_category", "category_index": 0},
        headers=ADMIN_AUTH,
    )
    assert response.status_code == 409
    assert len(response.json()["state"]["categories"]) == 1


def test_discard_over_http(client, admin_profile):
    client.post("/admin/catalog/editor", headers=ADMIN_AUTH)
    client.post("/admin/catalog/editor/ops", json={"op": "add_category"}, headers=ADMIN_AUTH)

    unconfirmed = client.post("/admin/catalog/editor/discard", headers=ADMIN_AUTH)
    assert unconfirmed.status_code == 409
    assert unconfirmed.json()["needs_confirmation"] is True

    confirmed = client.post("/admin/catalog/editor/discard", params={"confirm": "true"}, headers=ADMIN_AUTH)
    assert confirmed.status_code == 200
    assert confirmed.json()["state"]["mode"] == "viewing"


def test_editor_state_without_session(client, admin_profile):
    assert client.get("/admin/catalog/editor", headers=ADMIN_AUTH).status_code == 404
