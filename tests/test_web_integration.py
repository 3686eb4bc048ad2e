"""
Web integration tests through the full Flask application.
"""
import random
import pytest

from app.main import create_app
from app.storage.models import ContentItem
from config_manager import AccessConfig

PUBLISHED = [f"a{i}" for i in range(10)]


@pytest.fixture
def app(tmp_path):
    access = AccessConfig(
        daily_view_limit=3,
        guest_daily_limit=4,
        origin_headers=["X-Forwarded-For", "X-Real-IP"],
        tz_offset_cookie="tz_offset_min",
    )
    app = create_app(
        data_dir=tmp_path / "data",
        admin_user_ids=["admin"],
        access_config=access,
        secret_key="test-secret",
        rng=random.Random(2025),
    )
    app.config["TESTING"] = True
    
    content = app.extensions["access"]["storage"]["content"]
    for item_id in PUBLISHED:
        content.save(ContentItem(id=item_id, author_id="writer", title=item_id))
    content.save(ContentItem(id="draft", author_id="writer", published=False))
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, uid):
    client.set_cookie("uid", uid)


class TestHealthAndBans:
    """Test health check and the ban gate end to end."""
    
    def test_health(self, client):
        res = client.get("/actuator/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "UP"
    
    def test_banned_origin_is_blocked_everywhere_but_health(self, client):
        login(client, "admin")
        res = client.post("/admin/api/banned_ips", json={"ip": "6.6.6.6", "reason": "spam"})
        assert res.status_code == 200
        assert res.get_json()["changed"] is True
        
        banned = {"X-Forwarded-For": "6.6.6.6"}
        assert client.get("/api/quota", headers=banned).status_code == 403
        assert client.get("/api/ban/check", headers=banned).status_code == 403
        assert client.get("/actuator/health", headers=banned).status_code == 200
        assert client.get("/api/quota", headers={"X-Forwarded-For": "7.7.7.7"}).status_code == 200
        
        res = client.delete("/admin/api/banned_ips/6.6.6.6")
        assert res.status_code == 200
        assert client.get("/api/quota", headers=banned).status_code == 200
    
    def test_invalid_ban_request(self, client):
        login(client, "admin")
        res = client.post("/admin/api/banned_ips", json={"ip": "nope"})
        assert res.status_code == 400
        assert res.get_json()["error"] == "invalid_request"


class TestGuestViewing:
    """Test the guest allowance through the session cookie."""
    
    def test_guest_sees_stable_random_subset(self, client):
        first = client.post("/api/articles/visible", json={"candidates": PUBLISHED})
        assert first.status_code == 200
        visible = first.get_json()["visible"]
        assert len(visible) == 4
        assert set(visible) <= set(PUBLISHED)
        
        second = client.post("/api/articles/visible", json={"candidates": PUBLISHED}).get_json()
        assert second["visible"] == visible
        assert second["quota"]["tier"] == "guest"
        assert second["quota"]["remaining"] is None
    
    def test_guest_access_matches_visible_list(self, client):
        visible = client.post("/api/articles/visible", json={}).get_json()["visible"]
        
        allowed = [
            i for i in PUBLISHED
            if client.get(f"/api/articles/{i}/access").get_json()["can_view"]
        ]
        assert set(allowed) == set(visible)
    
    def test_guest_views_are_not_tracked(self, client):
        res = client.post("/api/articles/a1/view")
        assert res.status_code == 200
        assert res.get_json()["status"] == "not_tracked"
    
    def test_candidates_must_be_a_list(self, client):
        res = client.post("/api/articles/visible", json={"candidates": "a1"})
        assert res.status_code == 400

    def test_numeric_and_id_less_candidates(self, client):
        candidates = [1, 2, 3, {"title": "x"}]
        for uid in (None, "reader", "admin"):
            if uid:
                login(client, uid)
            res = client.post("/api/articles/visible", json={"candidates": candidates})
            assert res.status_code == 200
            assert all(isinstance(item, int) for item in res.get_json()["visible"])
        assert res.get_json()["visible"] == [1, 2, 3]


class TestRegularUserViewing:
    """Test the daily ledger for a logged-in regular user."""
    
    def test_quota_is_enforced(self, client):
        login(client, "reader")
        
        for item_id in PUBLISHED[:3]:
            res = client.post(f"/api/articles/{item_id}/view")
            assert res.status_code == 200
            assert res.get_json()["status"] == "recorded"
        
        assert client.post("/api/articles/a0/view").get_json()["status"] == "already_counted"
        
        res = client.post("/api/articles/a9/view")
        assert res.status_code == 403
        assert res.get_json()["status"] == "denied"
        
        quota = client.get("/api/quota").get_json()
        assert quota["remaining"] == 0
        assert quota["used_today"] == 3
        
        visible = client.post("/api/articles/visible", json={"candidates": PUBLISHED}).get_json()["visible"]
        assert set(visible) == set(PUBLISHED[:3])
    
    def test_access_endpoint(self, client):
        login(client, "writer")
        body = client.get("/api/articles/a1/access").get_json()
        assert body["can_view"] is True
        assert body["can_delete"] is True
        
        login(client, "reader")
        assert client.get("/api/articles/a1/access").get_json()["can_delete"] is False


class TestModerationFlow:
    """Test registration review and role changes over HTTP."""
    
    def test_register_approve_and_publish(self, client):
        login(client, "writer")
        res = client.post("/api/register", json={"display_name": "Writer"})
        assert res.status_code == 200
        assert res.get_json()["profile"]["status"] == "pending"
        
        # Second registration attempt while pending
        res = client.post("/api/register", json={})
        assert res.status_code == 400
        assert res.get_json()["error"] == "invalid_transition"
        
        login(client, "admin")
        pending = client.get("/admin/api/registrations").get_json()
        assert [r["principal_id"] for r in pending] == ["writer"]
        assert client.post("/admin/api/registrations/writer/approve").status_code == 200
        
        login(client, "writer")
        me = client.get("/api/me").get_json()
        assert me["role"] == "editor"
        assert me["can_publish"] is True
        assert me["unlimited_viewing"] is True
        
        visible = client.post("/api/articles/visible", json={"candidates": PUBLISHED + ["draft"]}).get_json()
        assert visible["visible"] == PUBLISHED + ["draft"]
        assert visible["author_roles"] == {"writer": "editor"}
        assert visible["quota"]["is_unlimited"] is True
    
    def test_one_account_per_origin(self, client):
        origin = {"X-Forwarded-For": "8.8.4.4"}
        assert client.get("/api/register/check", headers=origin).get_json()["canRegister"] is True

        login(client, "first")
        assert client.post("/api/register", json={"request_editor": False}, headers=origin).status_code == 200

        login(client, "second")
        assert client.get("/api/register/check", headers=origin).get_json()["canRegister"] is False
        res = client.post("/api/register", json={"request_editor": False}, headers=origin)
        assert res.status_code == 403
        assert res.get_json()["error"] == "unauthorized"

        login(client, "first")
        assert client.post("/api/delete_account", json={}, headers=origin).status_code == 200
        login(client, "second")
        assert client.post("/api/register", json={"request_editor": False}, headers=origin).status_code == 200

    def test_second_admin_management(self, client):
        login(client, "writer")
        client.post("/api/register", json={"request_editor": False})
        
        login(client, "admin")
        res = client.post("/admin/api/users/writer/second_admin")
        assert res.status_code == 200
        assert res.get_json()["action"] == "grant_second_admin"
        
        login(client, "writer")
        assert client.get("/api/me").get_json()["role"] == "second_admin"
        # Second admins cannot appoint others
        res = client.post("/admin/api/users/writer/second_admin")
        assert res.status_code == 403
        
        login(client, "admin")
        assert client.delete("/admin/api/users/writer/second_admin").status_code == 200
    
    def test_regular_user_cannot_moderate(self, client):
        login(client, "reader")
        res = client.get("/admin/api/banned_ips")
        assert res.status_code == 403
        assert res.get_json()["error"] == "unauthorized"
        
        assert client.get("/admin/api/registrations").status_code == 403
    
    def test_missing_target(self, client):
        login(client, "admin")
        res = client.post("/admin/api/users/ghost/ban")
        assert res.status_code == 404
        assert client.delete("/admin/api/articles/missing").status_code == 404
    
    def test_delete_article(self, client):
        login(client, "writer")
        assert client.delete("/admin/api/articles/a1").status_code == 200
        
        login(client, "admin")
        assert "a1" not in client.post("/api/articles/visible", json={}).get_json()["visible"]
    
    def test_log_ip_and_list(self, client):
        login(client, "reader")
        client.post("/api/register", json={"request_editor": False})
        res = client.post("/api/log_ip", json={"event_type": "comment"}, headers={"X-Forwarded-For": "4.3.2.1"})
        assert res.get_json()["ip"] == "4.3.2.1"
        
        login(client, "admin")
        ips = client.get("/admin/api/users/reader/ips").get_json()
        assert [e["ip"] for e in ips] == ["4.3.2.1"]
    
    def test_delete_account(self, client):
        login(client, "reader")
        client.post("/api/register", json={"request_editor": False})
        
        res = client.post("/api/delete_account", json={})
        assert res.status_code == 200
        assert res.get_json()["action"] == "delete_account"
        
        login(client, "reader")
        assert client.get("/api/me").get_json()["status"] is None
