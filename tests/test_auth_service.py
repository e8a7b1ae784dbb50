# Two static roles and the persisted session

import pytest

from core.config import Credential
from core.errors import AuthenticationError
from core.services.auth_service import AuthService, Session


class TestLogin:
    def test_admin_gets_full_access(self, settings):
        s = AuthService(settings).login("admin", "1234")
        assert s.role == "full"
        assert s.can_view_dashboard and s.can_view_statistics and s.can_delete
        assert s.home_screen == "dashboard"

    def test_agent_gets_limited_access(self, settings):
        s = AuthService(settings).login(" agent ", "1234")
        assert s.role == "limited"
        assert not (s.can_view_dashboard or s.can_view_statistics or s.can_delete)
        assert s.home_screen == "bons"

    def test_bad_credentials(self, settings):
        with pytest.raises(AuthenticationError):
            AuthService(settings).login("admin", "mauvais")

    def test_credentials_from_settings(self, settings):
        settings.admin = Credential(username="patron", password="secret")
        auth = AuthService(settings)
        assert auth.login("patron", "secret").role == "full"
        with pytest.raises(AuthenticationError):
            auth.login("admin", "1234")


class TestSessionLifecycle:
    def test_restore_and_logout(self, settings):
        AuthService(settings).login("agent", "1234")
        restored = AuthService(settings).restore()
        assert restored == Session(username="agent", role="limited")

        assert not AuthService(settings).logout().is_authenticated
        assert not AuthService(settings).restore().is_authenticated

    def test_corrupt_session_file(self, settings):
        settings.session_file.write_text("{oops", encoding="utf-8")
        assert not AuthService(settings).restore().is_authenticated
