from bson import ObjectId

from schemas import FLORISTS


def create_florist(client, body):
    response = client.post("/florists", json=body)
    assert response.status_code == 200, response.text
    return response.json()["inserted_id"]


def test_create_and_read_florist(client, florist_body):
    florist_id = create_florist(client, florist_body)
    doc = client.get(f"/florists/{florist_id}").json()
    assert doc["username"] == "petalstudio"
    assert doc["contact_method"] == ["whatsapp", "instagram"]
    assert doc["contact"] == "91234567"
    assert doc["facebook"] is None


def test_short_whatsapp_number_is_rejected(client, store, florist_body):
    florist_body["contact"] = 1234
    response = client.post("/florists", json=florist_body)
    assert response.status_code == 400
    assert "Contact number must be at least 8 digits long." in response.json()["detail"]
    assert store.db[FLORISTS].count_documents({}) == 0


def test_list_florists_by_credentials(client, florist_body):
    create_florist(client, florist_body)
    other = dict(florist_body, username="bloomhouse", login_email="hi@bloom.sg")
    create_florist(client, other)

    assert len(client.get("/florists").json()) == 2

    response = client.get("/florists", params={"username": "bloomhouse", "login_email": "hi@bloom.sg"})
    assert response.status_code == 200
    assert [d["username"] for d in response.json()] == ["bloomhouse"]


def test_list_florists_with_wrong_credentials(client, florist_body):
    create_florist(client, florist_body)
    response = client.get("/florists", params={"username": "petalstudio", "login_email": "x@y.z"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Username or login email incorrect."


def test_list_florists_by_username_only_may_be_empty(client):
    response = client.get("/florists", params={"username": "nobody123"})
    assert response.status_code == 200
    assert response.json() == []


def test_replace_florist(client, florist_body):
    florist_id = create_florist(client, florist_body)
    replacement = {
        "name": "Petal Studio SG",
        "username": "petalstudio",
        "login_email": "hello@petal.sg",
        "contact_method": ["facebook"],
        "facebook": "https://facebook.com/petal",
    }
    response = client.put(f"/florists/{florist_id}", json=replacement)
    assert response.json() == {"matched_count": 1, "modified_count": 1}

    doc = client.get(f"/florists/{florist_id}").json()
    assert doc["name"] == "Petal Studio SG"
    assert doc["contact_method"] == ["facebook"]
    assert doc["contact"] is None
    assert doc["instagram"] is None


def test_replace_florist_validates(client, florist_body):
    florist_id = create_florist(client, florist_body)
    response = client.put(f"/florists/{florist_id}", json=dict(florist_body, login_email="broken"))
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "login_email", "kind": "bad_email", "message": "Please enter a valid email address."}
    ]


def test_delete_florist_needs_no_credentials(client, florist_body):
    florist_id = create_florist(client, florist_body)
    response = client.delete(f"/florists/{florist_id}")
    assert response.json() == {"deleted_count": 1}
    assert client.get(f"/florists/{florist_id}").status_code == 404


def test_delete_unknown_florist(client):
    assert client.delete(f"/florists/{ObjectId()}").status_code == 404
