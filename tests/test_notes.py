# tests/test_notes.py
import io
import uuid

from app.extensions import db
from app.notes.models import Note, File, Image


def _counts(app):
    with app.app_context():
        return (
            db.session.query(Note).count(),
            db.session.query(File).count(),
            db.session.query(Image).count(),
        )


def test_groceries_create_then_edit_with_image(client, app, register, jpeg):
    alice = register("alice")

    # création : pas d'id, pas d'image
    r = client.post("/api/v1/notes/", headers=alice,
                    data={"id": "", "title": "Groceries", "content": "Milk, eggs"})
    assert r.status_code == 201
    body = r.get_json()
    assert body["message"] == "Note created"
    note_id = body["data"]["id"]
    assert body["data"]["owner_username"] == "alice"
    assert body["data"]["redirect_to"] == f"/users/alice/notes/{note_id}"

    r = client.get(f"/api/v1/notes/{note_id}", headers=alice)
    assert r.status_code == 200
    note = r.get_json()
    assert note["title"] == "Groceries"
    assert note["images"] == []

    # édition : même id, une image
    r = client.post("/api/v1/notes/", headers=alice, data={
        "id": note_id,
        "title": "Groceries v2",
        "content": "Milk, eggs, bread",
        "images[0].image": jpeg("fridge.jpg"),
        "images[0].alt_text": "fridge",
    })
    assert r.status_code == 200
    assert r.get_json()["message"] == "Note updated"
    assert r.get_json()["data"]["id"] == note_id

    r = client.get(f"/api/v1/notes/{note_id}", headers=alice)
    note = r.get_json()
    assert note["title"] == "Groceries v2"
    assert note["content"] == "Milk, eggs, bread"
    assert len(note["images"]) == 1
    assert note["images"][0]["alt_text"] == "fridge"
    assert note["images"][0]["content_type"] == "image/jpeg"

    # aucune nouvelle ligne de note
    assert _counts(app) == (1, 1, 1)


def test_save_with_k_images_creates_k_files_and_images(client, app, register, jpeg):
    bob = register("bob")
    data = {"title": "Trip", "content": "Pictures from the trip"}
    for i in range(3):
        data[f"images[{i}].image"] = jpeg(f"p{i}.jpg")
    data["images[1].alt_text"] = "beach"

    r = client.post("/api/v1/notes/", headers=bob, data=data)
    assert r.status_code == 201
    note_id = uuid.UUID(r.get_json()["data"]["id"])

    with app.app_context():
        images = db.session.query(Image).all()
        assert len(images) == 3
        assert db.session.query(File).count() == 3
        assert len({img.file_id for img in images}) == 3
        assert all(img.note_id == note_id for img in images)
        # alt_text absent -> NULL
        assert sorted(img.alt_text or "" for img in images) == ["", "", "beach"]


def test_load_note_not_found_for_unknown_or_foreign_id(client, register):
    alice = register("alice")
    mallory = register("mallory")

    r = client.post("/api/v1/notes/", headers=alice, data={"title": "Secret", "content": "Do not share"})
    note_id = r.get_json()["data"]["id"]

    r_foreign = client.get(f"/api/v1/notes/{note_id}", headers=mallory)
    r_unknown = client.get(f"/api/v1/notes/{uuid.uuid4()}", headers=mallory)

    # même réponse : on ne révèle pas l'existence de la note
    assert r_foreign.status_code == r_unknown.status_code == 404
    assert r_foreign.get_json() == r_unknown.get_json()


def test_editing_foreign_note_is_not_found_and_mutates_nothing(client, app, register, jpeg):
    alice = register("alice")
    mallory = register("mallory")

    r = client.post("/api/v1/notes/", headers=alice, data={"title": "Mine", "content": "Original"})
    note_id = r.get_json()["data"]["id"]
    before = _counts(app)

    r = client.post("/api/v1/notes/", headers=mallory, data={
        "id": note_id,
        "title": "Hijacked",
        "content": "Overwritten",
        "images[0].image": jpeg(),
    })
    assert r.status_code == 404
    assert r.get_json()["error"]["code"] == "not_found"

    assert _counts(app) == before
    note = client.get(f"/api/v1/notes/{note_id}", headers=alice).get_json()
    assert note["title"] == "Mine"
    assert note["content"] == "Original"


def test_validation_reports_title_and_content_together(client, app, register):
    alice = register("alice")

    r = client.post("/api/v1/notes/", headers=alice, data={"title": "", "content": ""})
    assert r.status_code == 400
    err = r.get_json()["error"]
    assert err["code"] == "validation_error"
    assert set(err["details"]) == {"title", "content"}

    r = client.post("/api/v1/notes/", headers=alice,
                    data={"title": "t" * 101, "content": "c" * 10_001})
    assert r.status_code == 400
    assert set(r.get_json()["error"]["details"]) == {"title", "content"}

    # bornes incluses
    r = client.post("/api/v1/notes/", headers=alice,
                    data={"title": "t" * 100, "content": "c" * 10_000})
    assert r.status_code == 201

    assert _counts(app) == (1, 0, 0)


def test_image_fieldset_without_file_is_a_field_error(client, app, register):
    alice = register("alice")
    r = client.post("/api/v1/notes/", headers=alice, data={
        "title": "Title",
        "content": "Content",
        "images[0].alt_text": "orphan alt text",
    })
    assert r.status_code == 400
    details = r.get_json()["error"]["details"]
    assert set(details) == {"images"}
    assert details["images"]["0"]["image"] == ["Missing data for required field."]
    assert _counts(app) == (0, 0, 0)


def test_oversized_image_is_rejected(client, app, register):
    alice = register("alice")
    big = io.BytesIO(b"\xff" * (app.config["MAX_UPLOAD_SIZE"] + 1))
    r = client.post("/api/v1/notes/", headers=alice, data={
        "title": "Title",
        "content": "Content",
        "images[0].image": (big, "big.jpg", "image/jpeg"),
    })
    assert r.status_code == 400
    msg = r.get_json()["error"]["details"]["images"]["0"]["image"][0]
    assert msg == "File size must be less than 3MB."
    assert _counts(app) == (0, 0, 0)


def test_invalid_note_id_is_a_validation_error(client, register):
    alice = register("alice")
    r = client.post("/api/v1/notes/", headers=alice,
                    data={"id": "not-a-uuid", "title": "T", "content": "C"})
    assert r.status_code == 400
    assert "id" in r.get_json()["error"]["details"]


def test_list_only_returns_own_notes(client, register):
    alice = register("alice")
    bob = register("bob")
    for i in range(3):
        client.post("/api/v1/notes/", headers=alice, data={"title": f"A{i}", "content": "x"})
    client.post("/api/v1/notes/", headers=bob, data={"title": "B0", "content": "x"})

    r = client.get("/api/v1/notes/?per_page=2", headers=alice)
    assert r.status_code == 200
    body = r.get_json()
    assert body["meta"] == {"page": 1, "per_page": 2, "total": 3}
    assert len(body["data"]) == 2
    assert all(n["title"].startswith("A") for n in body["data"])

    r = client.get("/api/v1/notes/?page=abc", headers=alice)
    assert r.status_code == 400


def test_delete_note_detaches_images(client, app, register, jpeg):
    alice = register("alice")
    r = client.post("/api/v1/notes/", headers=alice, data={
        "title": "With image", "content": "x", "images[0].image": jpeg(),
    })
    note_id = r.get_json()["data"]["id"]

    # un autre utilisateur ne peut pas supprimer
    mallory = register("mallory")
    assert client.delete(f"/api/v1/notes/{note_id}", headers=mallory).status_code == 404

    r = client.delete(f"/api/v1/notes/{note_id}", headers=alice)
    assert r.status_code == 204
    assert client.get(f"/api/v1/notes/{note_id}", headers=alice).status_code == 404

    with app.app_context():
        image = db.session.query(Image).one()
        assert image.note_id is None
    assert _counts(app) == (0, 1, 1)


def test_upload_limit_is_read_from_app_config(client, app, register, monkeypatch):
    alice = register("alice")
    monkeypatch.setitem(app.config, "MAX_UPLOAD_SIZE", 10)
    r = client.post("/api/v1/notes/", headers=alice, data={
        "title": "Title",
        "content": "Content",
        "images[0].image": (io.BytesIO(b"\xff" * 100), "small.jpg", "image/jpeg"),
    })
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["images"]["0"]["image"] == ["File size must be less than 10 bytes."]
    assert _counts(app) == (0, 0, 0)
