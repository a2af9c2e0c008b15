import pytest

from storefront.core.errors import ForbiddenError, UnauthorizedError
from storefront.core.permissions import Capability, Identity, Role, ensure_capability, has_capability


def identity(role):
    return Identity(user_id=1, username="someone", email="someone@example.com", role=role)


def test_capabilities_by_role():
    assert has_capability(Role.USER, Capability.AUTHENTICATED)
    assert not has_capability(Role.USER, Capability.ADMIN)
    assert has_capability(Role.ADMIN, Capability.AUTHENTICATED)
    assert has_capability(Role.ADMIN, Capability.ADMIN)


def test_missing_identity_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        ensure_capability(None, Capability.AUTHENTICATED)
    with pytest.raises(UnauthorizedError):
        ensure_capability(None, Capability.ADMIN)


def test_user_cannot_use_admin_capability():
    with pytest.raises(ForbiddenError) as exc:
        ensure_capability(identity(Role.USER), Capability.ADMIN)
    assert exc.value.status_code == 403


def test_ensure_capability_returns_identity():
    admin = identity(Role.ADMIN)
    assert ensure_capability(admin, Capability.ADMIN) is admin
