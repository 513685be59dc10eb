import pytest

from tailorbook.data import settings_repository
from tailorbook.services.errors import AuthorizationError, ValidationError
from tailorbook.services.session import SessionManager, require_session


class TestSessionManager:
    def test_first_run_has_no_owner(self):
        manager = SessionManager()
        assert not manager.has_owner()
        assert manager.current_session() is None
        with pytest.raises(AuthorizationError):
            manager.sign_in("owner@example.com", "secret1")

    def test_register_owner_signs_in(self):
        manager = SessionManager()
        session = manager.register_owner(" Owner@Example.com ", "secret1")

        assert session.user_email == "owner@example.com"
        assert manager.current_session() == session
        assert manager.has_owner()
        assert settings_repository.get_setting("owner_password_hash") != "secret1"

    def test_second_owner_rejected(self):
        SessionManager().register_owner("owner@example.com", "secret1")
        with pytest.raises(AuthorizationError):
            SessionManager().register_owner("other@example.com", "secret2")

    @pytest.mark.parametrize("email, password", [("", "secret1"), ("owner@example.com", "123")])
    def test_register_validation(self, email, password):
        with pytest.raises(ValidationError):
            SessionManager().register_owner(email, password)

    def test_sign_in_and_out(self):
        SessionManager().register_owner("owner@example.com", "secret1")

        manager = SessionManager()
        session = manager.sign_in("OWNER@example.com", "secret1")
        assert session.user_email == "owner@example.com"

        manager.sign_out()
        assert manager.current_session() is None

    @pytest.mark.parametrize("email, password", [("owner@example.com", "wrong1"), ("x@example.com", "secret1")])
    def test_bad_credentials(self, email, password):
        SessionManager().register_owner("owner@example.com", "secret1")
        manager = SessionManager()
        with pytest.raises(AuthorizationError):
            manager.sign_in(email, password)
        assert manager.current_session() is None


def test_require_session(session):
    assert require_session(session) is session
    with pytest.raises(AuthorizationError):
        require_session(None)
