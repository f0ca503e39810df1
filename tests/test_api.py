"""End to end tests through the HTTP surface."""

import pytest

from cloudvault.core.security import Identity, IdentityVerifier


def signup_and_login(client, email, password="pw-123456"):
    response = client.post("/api/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def alice_auth(client):
    return signup_and_login(client, "alice@example.com")


@pytest.fixture
def bob_auth(client):
    return signup_and_login(client, "bob@example.com")


def upload(client, auth, name="report.pdf", content=b"0123456789", mime="application/pdf", **data):
    return client.post(
        "/api/files/upload",
        files={"file": (name, content, mime)},
        data=data,
        headers=auth,
    )


def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "CloudVault backend running"


def test_signup_duplicate_and_missing_fields(client, alice_auth):
    response = client.post(
        "/api/auth/signup", json={"email": "alice@example.com", "password": "x"}
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Email already registered"}

    response = client.post("/api/auth/signup", json={"email": "c@example.com"})
    assert response.status_code == 400


def test_signup_does_not_expose_password(client):
    response = client.post(
        "/api/auth/signup", json={"name": "C", "email": "c@example.com", "password": "pw"}
    )

    assert response.json()["user"] == {"id": 1, "name": "C", "email": "c@example.com"}


def test_login_bad_credentials(client, alice_auth):
    response = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer not-a-token"}, {"Authorization": "Basic abc"}],
)
def test_protected_routes_require_valid_token(client, headers):
    assert client.get("/api/files", headers=headers).status_code == 401
    assert client.get("/api/folders", headers=headers).status_code == 401
    assert upload(client, headers).status_code == 401


def test_expired_token(client, settings):
    token = IdentityVerifier(settings.jwt_secret, expires_in=-5).issue(
        Identity(user_id=1, email="a@example.com")
    )

    response = client.get("/api/files", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_folders(client, alice_auth, bob_auth):
    response = client.post("/api/folders", json={"folder_name": "docs"}, headers=alice_auth)
    assert response.status_code == 200
    docs = response.json()["folder"]
    assert docs["name"] == "docs"
    assert docs["parent_folder_id"] is None

    response = client.post(
        "/api/folders",
        json={"folder_name": "2024", "parent_folder_id": docs["id"]},
        headers=alice_auth,
    )
    child = response.json()["folder"]

    root = client.get("/api/folders", params={"parent_folder_id": "null"}, headers=alice_auth)
    assert [f["id"] for f in root.json()["folders"]] == [docs["id"]]
    nested = client.get(
        "/api/folders", params={"parent_folder_id": docs["id"]}, headers=alice_auth
    )
    assert [f["id"] for f in nested.json()["folders"]] == [child["id"]]

    response = client.post(
        "/api/folders",
        json={"folder_name": "sneaky", "parent_folder_id": docs["id"]},
        headers=bob_auth,
    )
    assert response.status_code == 403

    response = client.post("/api/folders", json={}, headers=alice_auth)
    assert response.status_code == 400


def test_upload_rejects_disallowed_type(client, alice_auth):
    response = upload(client, alice_auth, name="a.out", mime="application/x-executable")

    assert response.status_code == 415
    assert response.json() == {"error": "File type not allowed: application/x-executable"}
    assert client.get("/api/files", headers=alice_auth).json()["files"] == []


def test_upload_without_file(client, alice_auth):
    response = client.post("/api/files/upload", data={"folder_id": ""}, headers=alice_auth)

    assert response.status_code == 400


def test_upload_into_foreign_folder(client, alice_auth, bob_auth):
    folder = client.post(
        "/api/folders", json={"folder_name": "docs"}, headers=alice_auth
    ).json()["folder"]

    response = upload(client, bob_auth, folder_id=str(folder["id"]))
    assert response.status_code == 403


def test_file_lifecycle(client, alice_auth):
    response = upload(client, alice_auth)
    assert response.status_code == 200, response.text
    file = response.json()["file"]
    assert file["logical_name"] == "report.pdf"
    assert file["size_bytes"] == 10

    listed = client.get("/api/files", headers=alice_auth).json()["files"]
    assert [f["logical_name"] for f in listed] == ["report.pdf"]

    response = client.put(
        f"/api/files/rename/{file['id']}", json={"newName": "summary.pdf"}, headers=alice_auth
    )
    assert response.status_code == 200
    assert response.json()["file"]["logical_name"] == "summary.pdf"

    response = client.get(f"/api/files/download/{file['id']}", headers=alice_auth)
    assert response.status_code == 200
    assert response.content == b"0123456789"
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="summary.pdf"' in response.headers["content-disposition"]

    response = client.delete(f"/api/files/{file['id']}", headers=alice_auth)
    assert response.status_code == 200
    assert client.get("/api/files", headers=alice_auth).json()["files"] == []

    response = client.get(f"/api/files/download/{file['id']}", headers=alice_auth)
    assert response.status_code == 404
    assert client.delete(f"/api/files/{file['id']}", headers=alice_auth).status_code == 404


def test_upload_into_folder_and_list(client, alice_auth):
    folder = client.post(
        "/api/folders", json={"folder_name": "docs"}, headers=alice_auth
    ).json()["folder"]

    file = upload(
        client, alice_auth, name="a.txt", mime="text/plain", folder_id=str(folder["id"])
    ).json()["file"]

    assert file["folder_id"] == folder["id"]
    in_folder = client.get(
        "/api/files", params={"folder_id": folder["id"]}, headers=alice_auth
    ).json()["files"]
    assert [f["id"] for f in in_folder] == [file["id"]]
    assert client.get("/api/files", headers=alice_auth).json()["files"] == []


def test_other_users_files_look_missing(client, alice_auth, bob_auth):
    file = upload(client, alice_auth).json()["file"]

    for response in (
        client.get(f"/api/files/download/{file['id']}", headers=bob_auth),
        client.delete(f"/api/files/{file['id']}", headers=bob_auth),
        client.put(f"/api/files/rename/{file['id']}", json={"newName": "x"}, headers=bob_auth),
        client.post(f"/api/files/share/{file['id']}", json={}, headers=bob_auth),
    ):
        assert response.status_code == 404
        assert response.json() == {"error": "File not found"}

    assert client.get(f"/api/files/download/{file['id']}", headers=alice_auth).status_code == 200


def test_rename_requires_new_name(client, alice_auth):
    file = upload(client, alice_auth).json()["file"]

    response = client.put(f"/api/files/rename/{file['id']}", json={}, headers=alice_auth)

    assert response.status_code == 400


def test_share(client, alice_auth):
    file = upload(client, alice_auth).json()["file"]

    response = client.post(f"/api/files/share/{file['id']}", headers=alice_auth)
    assert response.status_code == 200
    body = response.json()
    assert body["expiresIn"] == 3600
    assert file["storage_path"] in body["url"]

    response = client.post(
        f"/api/files/share/{file['id']}", json={"expiresIn": 120}, headers=alice_auth
    )
    assert response.json()["expiresIn"] == 120

    response = client.post(
        f"/api/files/share/{file['id']}", json={"expiresIn": 0}, headers=alice_auth
    )
    assert response.status_code == 400


def test_bad_id_parameter(client, alice_auth):
    response = client.get("/api/files", params={"folder_id": "abc"}, headers=alice_auth)

    assert response.status_code == 400


def test_oversized_file_id_is_not_found(client, alice_auth):
    huge = 2**70

    response = client.get(f"/api/files/download/{huge}", headers=alice_auth)
    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}

    assert client.delete(f"/api/files/{huge}", headers=alice_auth).status_code == 404


def test_listing_another_users_folder_is_empty(client, alice_auth, bob_auth):
    folder = client.post(
        "/api/folders", json={"folder_name": "docs"}, headers=alice_auth
    ).json()["folder"]
    client.post(
        "/api/folders",
        json={"folder_name": "inner", "parent_folder_id": folder["id"]},
        headers=alice_auth,
    )
    upload(client, alice_auth, folder_id=str(folder["id"]))

    folders = client.get(
        "/api/folders", params={"parent_folder_id": folder["id"]}, headers=bob_auth
    )
    files = client.get("/api/files", params={"folder_id": folder["id"]}, headers=bob_auth)

    # owner-scoped queries: nothing of alice's is visible, and nothing is confirmed either
    assert folders.status_code == 200
    assert folders.json() == {"folders": []}
    assert files.status_code == 200
    assert files.json() == {"files": []}
