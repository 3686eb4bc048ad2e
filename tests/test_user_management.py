"""
Tests for the user management subsystem.
"""
import pytest
from flask import Flask

from app.ban_gate.factory import create_ban_gate_module
from app.errors import InvalidRequest, InvalidTransition, NotFound, Unauthorized
from app.roles.factory import create_roles_module
from app.storage.factory import create_storage_module
from app.storage.models import ApprovalStatus, ContentItem, Profile
from app.user_management.factory import create_user_management_module


class TestUserManagementSubsystem:
    """Test registration, IP logging and account deletion."""
    
    @pytest.fixture(autouse=True)
    def _module(self, tmp_path):
        self.storage = create_storage_module(tmp_path / "data")
        roles_module = create_roles_module(self.storage, ["admin"])
        ban_gate_module = create_ban_gate_module(self.storage)
        self.user_module = create_user_management_module(self.storage, roles_module, ban_gate_module)
        self.user_service = self.user_module["service"]
        
        self.app = Flask(__name__)
        self.app.register_blueprint(self.user_module["blueprint"])
    
    def test_module_creation(self):
        assert "service" in self.user_module
        assert "blueprint" in self.user_module
    
    def test_register_for_editor_review(self):
        profile = self.user_service.register_principal("alice", "Alice")
        
        assert profile.status == ApprovalStatus.PENDING
        assert self.storage["profiles"].get("alice").display_name == "Alice"
        assert [r.principal_id for r in self.storage["registrations"].list_pending()] == ["alice"]
        
        with pytest.raises(InvalidTransition):
            self.user_service.register_principal("alice", "Alice")
    
    def test_register_without_review(self):
        profile = self.user_service.register_principal("bob", request_editor=False)
        
        assert profile.status == ApprovalStatus.USER
        assert profile.display_name == "bob"
        assert self.storage["registrations"].list_pending() == []
    
    def test_rejected_user_can_apply_again(self):
        self.storage["profiles"].save(Profile(principal_id="carol", status=ApprovalStatus.REJECTED))
        
        profile = self.user_service.register_principal("carol")
        assert profile.status == ApprovalStatus.PENDING
    
    def test_banned_and_approved_cannot_register(self):
        self.storage["profiles"].save(Profile(principal_id="dave", status=ApprovalStatus.BANNED))
        self.storage["profiles"].save(Profile(principal_id="erin", status=ApprovalStatus.APPROVED))
        
        with pytest.raises(Unauthorized):
            self.user_service.register_principal("dave")
        with pytest.raises(InvalidTransition):
            self.user_service.register_principal("erin")
    
    def test_log_user_ip(self):
        self.user_service.register_principal("alice", request_editor=False)
        self.user_service.log_user_ip("alice", "1.2.3.4", "login")
        self.user_service.log_user_ip("alice", "5.6.7.8", "publish")
        
        assert self.storage["profiles"].get("alice").last_login_ip == "1.2.3.4"
        assert [e.event_type for e in self.storage["ip_logs"].list_for("alice")] == ["publish", "login"]
        
        with pytest.raises(InvalidRequest):
            self.user_service.log_user_ip("alice", "1.2.3.4", "hack")
    
    def test_current_user(self):
        self.user_service.register_principal("alice", "Alice", request_editor=False)
        
        me = self.user_service.current_user("alice").to_dict()
        assert me["uid"] == "alice"
        assert me["authenticated"] is True
        assert me["role"] == "regular_user"
        assert me["status"] == "user"
        
        guest = self.user_service.current_user(None).to_dict()
        assert guest["authenticated"] is False
        assert guest["role"] == "guest"
        
        admin = self.user_service.current_user("admin").to_dict()
        assert admin["can_set_second_admin"] is True
        assert admin["status"] is None
    
    def test_delete_own_account_cascades(self):
        self.user_service.register_principal("alice")
        self.user_service.log_user_ip("alice", "1.2.3.4", "login")
        self.storage["content"].save(ContentItem(id="a1", author_id="alice"))
        self.storage["content"].save(ContentItem(id="b1", author_id="bob"))
        self.storage["view_records"].insert_if_absent("alice", "b1", "2025-03-01")
        
        result = self.user_service.delete_account("alice")
        
        assert result.target == "alice"
        assert self.storage["profiles"].get("alice") is None
        assert self.storage["registrations"].latest("alice") is None
        assert self.storage["ip_logs"].list_for("alice") == []
        assert self.storage["view_records"].count("alice", "2025-03-01") == 0
        assert self.storage["content"].list_published_ids() == ["b1"]
    
    def test_delete_account_permissions(self):
        self.user_service.register_principal("alice")
        self.user_service.register_principal("bob")
        self.storage["profiles"].save(Profile(principal_id="admin", status=ApprovalStatus.APPROVED))
        
        with pytest.raises(Unauthorized):
            self.user_service.delete_account(None, "alice")
        with pytest.raises(Unauthorized):
            self.user_service.delete_account("bob", "alice")
        with pytest.raises(Unauthorized):
            self.user_service.delete_account("admin", "admin")
        with pytest.raises(NotFound):
            self.user_service.delete_account("admin", "ghost")
        
        self.user_service.delete_account("admin", "alice")
        assert self.storage["profiles"].get("alice") is None
        assert self.storage["profiles"].get("bob") is not None
    
    def test_current_user_id_from_cookie(self):
        with self.app.test_request_context("/", headers={"Cookie": "uid=alice"}):
            assert self.user_service.get_current_user_id() == "alice"
            assert self.user_service.is_authenticated()
        
        with self.app.test_request_context("/"):
            assert self.user_service.get_current_user_id() is None
            uid, error = self.user_service.require_auth_json()
            assert uid is None
            assert error["error"] == "no-uid"
    
    def test_set_user_sets_cookie_and_logs_login(self):
        client = self.app.test_client()
        self.user_service.register_principal("alice", request_editor=False)
        
        res = client.post("/set_user", data={"uid": "alice"}, headers={"X-Forwarded-For": "9.8.7.6"})
        
        assert res.status_code == 302
        assert "uid=alice" in res.headers.get("Set-Cookie", "")
        assert self.storage["profiles"].get("alice").last_login_ip == "9.8.7.6"
    
    def test_register_endpoint_requires_uid(self):
        client = self.app.test_client()
        
        res = client.post("/api/register", json={"display_name": "X"})
        assert res.status_code == 400
        assert res.get_json()["error"] == "no-uid"
    
    def test_one_account_per_origin(self):
        self.user_service.register_principal("alice", request_editor=False, origin="5.5.5.5")
        
        with pytest.raises(Unauthorized):
            self.user_service.register_principal("bob", request_editor=False, origin="5.5.5.5")
        assert self.storage["profiles"].get("bob") is None
        assert self.storage["ip_registrations"].find("5.5.5.5").principal_id == "alice"
        
        # The holder may apply again, other origins are unaffected
        self.user_service.register_principal("alice", origin="5.5.5.5")
        self.user_service.register_principal("bob", request_editor=False, origin="6.6.6.6")
        assert self.user_service.can_register_from("5.5.5.5", "alice")
        assert not self.user_service.can_register_from("5.5.5.5", "carol")
        assert not self.user_service.can_register_from("5.5.5.5")
    
    def test_unknown_origin_is_not_tracked(self):
        self.user_service.register_principal("alice", request_editor=False, origin="unknown")
        self.user_service.register_principal("bob", request_editor=False, origin="unknown")
        
        assert self.storage["ip_registrations"].find("unknown") is None
        assert self.user_service.can_register_from("unknown")
    
    def test_delete_account_releases_origin(self):
        self.user_service.register_principal("alice", request_editor=False, origin="5.5.5.5")
        
        self.user_service.delete_account("alice")
        
        assert self.storage["ip_registrations"].find("5.5.5.5") is None
        self.user_service.register_principal("bob", request_editor=False, origin="5.5.5.5")
    
    def test_register_check_endpoint(self):
        client = self.app.test_client()
        headers = {"X-Forwarded-For": "5.5.5.5"}
        
        body = client.get("/api/register/check", headers=headers).get_json()
        assert body == {"canRegister": True, "ip": "5.5.5.5"}
        
        client.set_cookie("uid", "alice")
        assert client.post("/api/register", json={}, headers=headers).status_code == 200
        assert client.get("/api/register/check", headers=headers).get_json()["canRegister"] is True
        
        client.set_cookie("uid", "bob")
        assert client.get("/api/register/check", headers=headers).get_json()["canRegister"] is False
        assert client.get("/api/register/check", headers={"X-Forwarded-For": "7.7.7.7"}).get_json()["canRegister"] is True
