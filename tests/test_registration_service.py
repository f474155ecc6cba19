import pytest

from acrocat.errors import ValidationFailed
from acrocat.infra.models import User
from acrocat.services.registration_service import RegisterData, register


def _data(**kw):
    base = dict(name="Alice", username="alice", password="password123", confirm_password="password123")
    base.update(kw)
    return RegisterData(**base)


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"name": ""}, "name is required"),
        ({"name": "   "}, "name is required"),
        ({"name": "Zoë"}, "name must contain only ASCII characters"),
        ({"username": "al"}, "username must be at least 3 alphanumeric characters"),
        ({"username": "al ice"}, "username must be at least 3 alphanumeric characters"),
        ({"username": "bob\n"}, "username must be at least 3 alphanumeric characters"),
        ({"password": "short", "confirm_password": "short"}, "password must be at least 8 characters"),
        ({"confirm_password": "password124"}, "passwords don't match"),
    ],
)
def test_validation_reasons(db, overrides, reason):
    with pytest.raises(ValidationFailed) as e:
        register(db, _data(**overrides))
    assert e.value.reason == reason
    assert db.query(User).count() == 0


def test_register_hashes_password(db):
    user = register(db, _data())
    assert user.id is not None
    assert user.password_hash != "password123"
    assert user.password_hash.startswith("$argon2")
