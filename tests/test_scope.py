import pytest
from sqlalchemy import select

from teamcomm.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from teamcomm.core.scope import AuthContext, WorkspaceFilter, access_policy, effective_scope
from teamcomm.models.announcement import Announcement
from teamcomm.models.enums import UserRole
from teamcomm.models.user import User


class TestEffectiveScope:
    def test_super_admin_all(self):
        admin = User(username="root", role=UserRole.SUPER_ADMIN, workspace_id=None)
        assert effective_scope(admin, None).is_all

    def test_super_admin_selected_workspace(self):
        admin = User(username="root", role=UserRole.SUPER_ADMIN, workspace_id=None)
        assert effective_scope(admin, 7) == WorkspaceFilter(7)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.USER])
    def test_scoped_roles_ignore_selection(self, role):
        user = User(username="someone", role=role, workspace_id=3)
        assert effective_scope(user, None) == WorkspaceFilter(3)
        assert effective_scope(user, 99) == WorkspaceFilter(3)

    def test_user_without_workspace_is_refused(self):
        user = User(username="orphan", role=UserRole.USER, workspace_id=None)
        with pytest.raises(AuthorizationError):
            effective_scope(user, None)


class TestWorkspaceFilter:
    def test_all_permits_everything(self):
        scope = WorkspaceFilter(None)
        assert scope.permits(1)
        assert scope.permits(2)

    def test_specific_workspace(self):
        scope = WorkspaceFilter(1)
        assert scope.permits(1)
        assert not scope.permits(2)

    def test_apply_adds_workspace_predicate(self):
        stmt = WorkspaceFilter(5).apply(select(Announcement), Announcement)
        assert "workspace_id" in str(stmt)

    def test_apply_all_leaves_query_alone(self):
        stmt = select(Announcement)
        assert WorkspaceFilter(None).apply(stmt, Announcement) is stmt


class TestAuthorize:
    def test_missing_token(self, db):
        with pytest.raises(AuthenticationError):
            access_policy.authorize(db, AuthContext(session_token=None))

    def test_unknown_token(self, db, seeded):
        with pytest.raises(AuthenticationError):
            access_policy.authorize(db, AuthContext(session_token="not-a-token"))

    def test_principal_for_user(self, db, seeded, login):
        principal = access_policy.authorize(db, login("jdoe", workspace_id=seeded.marketing.id))
        assert principal.user.username == "jdoe"
        assert principal.scope == WorkspaceFilter(seeded.engineering.id)

    def test_expired_session_is_rejected_without_changes(self, db, seeded, login, expire_session):
        ctx = login("jdoe")
        session = expire_session(ctx)

        with pytest.raises(AuthenticationError, match="expired"):
            access_policy.authorize(db, ctx)

        db.expire_all()
        assert session.is_active is True

    def test_authentication_error_is_an_authorization_error(self):
        assert issubclass(AuthenticationError, AuthorizationError)

    def test_inactive_user_is_rejected(self, db, seeded, login):
        ctx = login("jdoe")
        seeded.jdoe.is_active = False
        db.commit()

        with pytest.raises(AuthenticationError, match="inactive"):
            access_policy.authorize(db, ctx)


class TestWorkspaceForCreate:
    def test_scoped_user_gets_own_workspace(self, db, seeded, login):
        principal = access_policy.authorize(db, login("jdoe"))
        assert access_policy.workspace_for_create(db, principal, seeded.marketing.id) == seeded.engineering.id

    def test_super_admin_all_requires_workspace(self, db, seeded, login):
        principal = access_policy.authorize(db, login("sys_admin"))
        with pytest.raises(ValidationError) as exc_info:
            access_policy.workspace_for_create(db, principal, None)
        assert exc_info.value.field == "workspace_id"

    def test_super_admin_unknown_workspace(self, db, seeded, login):
        principal = access_policy.authorize(db, login("sys_admin"))
        with pytest.raises(ValidationError):
            access_policy.workspace_for_create(db, principal, 9999)

    def test_super_admin_selected_workspace_wins(self, db, seeded, login):
        principal = access_policy.authorize(db, login("sys_admin", workspace_id=seeded.marketing.id))
        assert access_policy.workspace_for_create(db, principal, seeded.engineering.id) == seeded.marketing.id
