from app.core.config import Settings
from app.models.user import UserRole
from app.services.admin_service import ensure_admin_user
from utils.constants import ADMIN_SEED_FIRST_NAME

from conftest import run

ADMIN_EMAIL = "admin@medmail.com"
ADMIN_PASSWORD = "seed-admin-password"


def _config(**overrides):
    values = {"ADMIN_EMAIL": ADMIN_EMAIL, "ADMIN_PASSWORD": ADMIN_PASSWORD}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_seed_skipped_without_credentials(users_repo, hasher):
    assert run(ensure_admin_user(users_repo, hasher, _config(ADMIN_PASSWORD=None))) is None
    assert users_repo.docs == {}


def test_seed_creates_admin(users_repo, hasher):
    admin = run(ensure_admin_user(users_repo, hasher, _config()))

    assert admin.role == UserRole.ADMIN
    assert admin.is_email_verified and admin.is_profile_completed
    assert admin.first_name == ADMIN_SEED_FIRST_NAME
    assert hasher.verify(ADMIN_PASSWORD, admin.password)


def test_seed_is_idempotent(users_repo, hasher):
    first = run(ensure_admin_user(users_repo, hasher, _config()))
    second = run(ensure_admin_user(users_repo, hasher, _config()))

    assert first.id == second.id
    assert len(users_repo.docs) == 1


def test_seed_upgrades_existing_account_and_keeps_password(users_repo, hasher, make_user):
    existing = make_user(ADMIN_EMAIL, password="their-own-password", is_email_verified=False)

    admin = run(ensure_admin_user(users_repo, hasher, _config()))

    assert admin.id == existing.id
    assert admin.role == UserRole.ADMIN
    assert admin.is_email_verified
    assert hasher.verify("their-own-password", admin.password)


def test_seed_over_pending_signup_sets_password(users_repo, hasher, auth_service):
    pending = users_repo.add(ADMIN_EMAIL)

    admin = run(ensure_admin_user(users_repo, hasher, _config()))

    assert admin.id == pending.id
    assert admin.is_profile_completed and admin.has_password
    assert admin.first_name == ADMIN_SEED_FIRST_NAME
    response = run(auth_service.login(ADMIN_EMAIL, ADMIN_PASSWORD))
    assert response.user.role == UserRole.ADMIN


def test_seeded_admin_can_log_in(users_repo, hasher, auth_service):
    run(ensure_admin_user(users_repo, hasher, _config()))

    response = run(auth_service.login(ADMIN_EMAIL, ADMIN_PASSWORD))

    assert response.user.role == UserRole.ADMIN
