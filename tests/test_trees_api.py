import uuid

from app import create_app
from config import Settings
from conftest import tree_payload
from models import db


def test_fresh_submission_creates_one_tree(client, store):
    resp = client.post("/trees", json=tree_payload())

    assert resp.status_code == 201
    body = resp.get_json()
    assert "tree_id" not in body
    assert body["name"] == "Oak1"
    assert body["image_url"] == "http://x/img.png"
    uuid.UUID(body["id"])
    assert len(store.select("trees")) == 1
    assert store.select("duplicates") == []


def test_repeat_submission_becomes_duplicate(client, store):
    first = client.post("/trees", json=tree_payload()).get_json()
    resp = client.post("/trees", json=tree_payload(description="again", css_style="s2"))

    assert resp.status_code == 201
    dup = resp.get_json()
    assert dup["tree_id"] == first["id"]
    assert dup["description"] == "again"
    assert dup["css_style"] == "s2"
    assert len(store.select("trees")) == 1
    assert len(store.select("duplicates")) == 1


def test_dedup_key_is_case_sensitive(client, store):
    client.post("/trees", json=tree_payload())
    resp = client.post("/trees", json=tree_payload(name="oak1"))

    assert "tree_id" not in resp.get_json()
    assert len(store.select("trees")) == 2


def test_same_tree_other_student_is_not_duplicate(client, store):
    client.post("/trees", json=tree_payload())
    client.post("/trees", json=tree_payload(student_id="S2"))

    assert len(store.select("trees")) == 2
    assert store.select("duplicates") == []


def test_missing_field_is_store_error(client, store):
    payload = tree_payload()
    del payload["species"]
    resp = client.post("/trees", json=payload)

    assert resp.status_code == 500
    assert "error" in resp.get_json()
    assert store.select("trees") == []
    assert store.select("duplicates") == []


def test_list_trees_embeds_ratings(client):
    tree = client.post("/trees", json=tree_payload()).get_json()
    client.post("/trees", json=tree_payload(name="Pine1", species="Pine"))
    client.post("/ratings", json={"tree_id": tree["id"], "student_id": "S9", "rating": 4})
    client.post("/ratings", json={"tree_id": tree["id"], "student_id": "S9", "rating": 5})

    resp = client.get("/trees")

    assert resp.status_code == 200
    trees = {t["name"]: t for t in resp.get_json()}
    assert [r["rating"] for r in sorted(trees["Oak1"]["ratings"], key=lambda r: r["rating"])] == [4, 5]
    assert trees["Pine1"]["ratings"] == []


def test_list_trees_empty(client):
    resp = client.get("/trees")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_get_tree(client):
    tree = client.post("/trees", json=tree_payload()).get_json()
    client.post("/ratings", json={"tree_id": tree["id"], "student_id": "S2", "rating": 3})

    resp = client.get(f"/trees/{tree['id']}")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["id"] == tree["id"]
    assert body["ratings"][0]["student_id"] == "S2"


def test_get_tree_accepts_uppercase_id(client):
    tree = client.post("/trees", json=tree_payload()).get_json()
    resp = client.get(f"/trees/{tree['id'].upper()}")
    assert resp.status_code == 200


def test_get_missing_tree(client):
    resp = client.get(f"/trees/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Tree not found"}


def test_get_malformed_id(client):
    resp = client.get("/trees/not-a-uuid")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid tree ID format"}


def test_unknown_route_has_json_error(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_wrong_method_has_json_error(client):
    resp = client.put("/trees")
    assert resp.status_code == 405
    assert "error" in resp.get_json()


def test_created_at_carries_utc_offset(client):
    tree = client.post("/trees", json=tree_payload()).get_json()
    assert tree["created_at"].endswith("+00:00")
    listed = client.get("/trees").get_json()[0]
    assert listed["created_at"].endswith("+00:00")


def test_cors_allows_any_origin_by_default(client):
    resp = client.get("/trees", headers={"Origin": "https://frontend.test"})

    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] in ("*", "https://frontend.test")
    assert client.get("/trees").headers["Access-Control-Allow-Origin"] == "*"


def test_cors_origins_from_settings(media):
    app = create_app(
        Settings(database_url="sqlite://", cors_origins="https://gallery.test, https://admin.test"),
        media=media,
    )
    with app.app_context():
        db.create_all()
        client = app.test_client()

        allowed = client.get("/trees", headers={"Origin": "https://admin.test"})
        other = client.get("/trees", headers={"Origin": "https://elsewhere.test"})

        db.drop_all()

    assert allowed.headers["Access-Control-Allow-Origin"] == "https://admin.test"
    assert "Access-Control-Allow-Origin" not in other.headers


def test_cors_origin_list_parsing():
    assert Settings().cors_origin_list == "*"
    assert Settings(cors_origins=" a.test ,b.test,").cors_origin_list == ["a.test", "b.test"]
