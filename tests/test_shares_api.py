"""Tests for owner share management endpoints."""

import uuid

from fastapi.testclient import TestClient

from posevault.models.share import SharedGallery
from posevault.services.share_access import check_share_password
from tests.helpers import make_gallery, make_share, owner_headers


def _shares_url(gallery_uid: int) -> str:
    return f"/galleries/{gallery_uid}/shares"


class TestCreateShare:
    def test_create_with_defaults(self, client: TestClient, gallery, owner_id):
        """Test create with defaults."""
        response = client.post(_shares_url(gallery.uid), json={}, headers=owner_headers(owner_id))

        assert response.status_code == 201
        data = response.json()
        assert data["gallery_id"] == gallery.uid
        assert data["is_active"] is True
        assert data["has_password"] is False
        assert data["allow_favorites"] is True
        assert data["allow_comments"] is True
        assert data["allow_uploads"] is False
        assert data["require_upload_approval"] is True
        assert data["max_upload_size_mb"] == 10
        assert data["max_uploads_per_viewer"] is None
        assert len(data["share_token"]) >= 40

    def test_tokens_are_unique(self, client: TestClient, gallery, owner_id):
        """Test tokens are unique."""
        tokens = {client.post(_shares_url(gallery.uid), json={}, headers=owner_headers(owner_id)).json()["share_token"] for _ in range(5)}
        assert len(tokens) == 5

    def test_password_is_stored_hashed(self, client: TestClient, db_session, gallery, owner_id):
        """Test password is stored hashed."""
        response = client.post(_shares_url(gallery.uid), json={"password": "s3cret"}, headers=owner_headers(owner_id))

        data = response.json()
        assert data["has_password"] is True
        assert "password" not in data
        stored = db_session.get(SharedGallery, uuid.UUID(data["id"]))
        assert stored.password_hash != "s3cret"
        assert check_share_password("s3cret", stored.password_hash)

    def test_upload_size_is_bounded(self, client: TestClient, gallery, owner_id):
        """Test upload size is bounded."""
        response = client.post(_shares_url(gallery.uid), json={"max_upload_size_mb": 101}, headers=owner_headers(owner_id))
        assert response.status_code == 400

    def test_gallery_of_other_owner(self, client: TestClient, db_session):
        """Another owner's gallery is reported as missing."""
        foreign = make_gallery(db_session, uuid.uuid4())

        response = client.post(_shares_url(foreign.uid), json={}, headers=owner_headers(uuid.uuid4()))

        assert response.status_code == 404
        assert response.json()["code"] == "gallery_not_found"

    def test_requires_auth(self, client: TestClient, gallery):
        """Test requires auth."""
        assert client.post(_shares_url(gallery.uid), json={}).status_code == 401


class TestListShares:
    def test_lists_only_this_gallery(self, client: TestClient, db_session, gallery, owner_id):
        """Test lists only this gallery."""
        first = make_share(db_session, gallery)
        second = make_share(db_session, gallery)
        make_share(db_session, make_gallery(db_session, owner_id, name="Other"))

        response = client.get(_shares_url(gallery.uid), headers=owner_headers(owner_id))

        assert response.status_code == 200
        assert {s["id"] for s in response.json()} == {str(first.id), str(second.id)}


class TestUpdateShare:
    def test_partial_update(self, client: TestClient, share, owner_id):
        """Test partial update."""
        response = client.patch(
            f"{_shares_url(share.gallery_id)}/{share.id}",
            json={"allow_uploads": True, "max_uploads_per_viewer": 3},
            headers=owner_headers(owner_id),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["allow_uploads"] is True
        assert data["max_uploads_per_viewer"] == 3
        assert data["allow_comments"] is True
        assert data["share_token"] == share.share_token

    def test_set_and_clear_password(self, client: TestClient, share, owner_id):
        """Test set and clear password."""
        url = f"{_shares_url(share.gallery_id)}/{share.id}"

        assert client.patch(url, json={"password": "pw"}, headers=owner_headers(owner_id)).json()["has_password"] is True
        assert client.patch(url, json={"password": None}, headers=owner_headers(owner_id)).json()["has_password"] is False

    def test_clear_expiry(self, client: TestClient, db_session, gallery, owner_id):
        """Test clear expiry."""
        share = make_share(db_session, gallery, expires_at=None)
        url = f"{_shares_url(share.gallery_id)}/{share.id}"

        set_response = client.patch(url, json={"expires_at": "2030-01-01T00:00:00Z"}, headers=owner_headers(owner_id))
        assert set_response.json()["expires_at"].startswith("2030-01-01T00:00:00")

        cleared = client.patch(url, json={"expires_at": None}, headers=owner_headers(owner_id))
        assert cleared.json()["expires_at"] is None

    def test_null_for_required_flag_is_rejected(self, client: TestClient, share, owner_id):
        """Test null for required flag is rejected."""
        response = client.patch(f"{_shares_url(share.gallery_id)}/{share.id}", json={"allow_comments": None}, headers=owner_headers(owner_id))

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"

    def test_share_of_other_owner(self, client: TestClient, share):
        """Test share of other owner."""
        response = client.patch(f"{_shares_url(share.gallery_id)}/{share.id}", json={"allow_uploads": True}, headers=owner_headers(uuid.uuid4()))

        assert response.status_code == 404
        assert response.json()["code"] == "share_not_found"

    def test_share_under_wrong_gallery(self, client: TestClient, db_session, share, owner_id):
        """Test share under wrong gallery."""
        other = make_gallery(db_session, owner_id, name="Other")

        response = client.patch(f"{_shares_url(other.uid)}/{share.id}", json={"allow_uploads": True}, headers=owner_headers(owner_id))
        assert response.status_code == 404


class TestActivation:
    def test_deactivate_then_reactivate(self, client: TestClient, share, owner_id):
        """Test deactivate then reactivate."""
        base = f"{_shares_url(share.gallery_id)}/{share.id}"

        deactivated = client.post(f"{base}/deactivate", headers=owner_headers(owner_id))
        assert deactivated.json()["is_active"] is False

        denied = client.post("/functions/validate-share-access", json={"token": share.share_token})
        assert denied.json()["code"] == "share_inactive"

        reactivated = client.post(f"{base}/reactivate", headers=owner_headers(owner_id))
        assert reactivated.json()["is_active"] is True
        assert client.post("/functions/validate-share-access", json={"token": share.share_token}).status_code == 200
