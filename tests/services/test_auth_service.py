from __future__ import annotations

from dataclasses import replace

import pytest
from argon2 import PasswordHasher

from mentor_buddy.core.errors import MentorBuddyError, ValidationError
from mentor_buddy.models.user import User
from mentor_buddy.repos.user_repo import InMemoryUserRepo
from mentor_buddy.services import token_service
from mentor_buddy.services.auth_service import (
    authenticate_user,
    change_password,
    hash_password,
    request_password_reset,
    reset_password,
    verify_password,
)


def _repo_with(password_hash: str, **changes) -> tuple[InMemoryUserRepo, User]:
    repo = InMemoryUserRepo()
    user = User.new(
        email="Tee@Example.com", password_hash=password_hash, name="Tee", role="buddy"
    )
    if changes:
        user = replace(user, **changes)
    repo.add(user)
    return repo, user


def test_hash_password_rejects_empty() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_verify_password_round_trip() -> None:
    hashed = hash_password("s3cret-pass")
    assert verify_password("s3cret-pass", hashed) is True
    assert verify_password("wrong-pass", hashed) is False
    assert verify_password("s3cret-pass", "not-a-hash") is False


def test_authenticate_user_is_case_insensitive_and_stamps_login() -> None:
    repo, _ = _repo_with(hash_password("s3cret-pass"))
    user = authenticate_user(repo, " TEE@example.com ", "s3cret-pass")
    assert user is not None
    assert user.last_login_at is not None
    assert repo.get_by_id(user.id).last_login_at == user.last_login_at


def test_authenticate_user_rejects_wrong_password_and_inactive() -> None:
    repo, _ = _repo_with(hash_password("s3cret-pass"))
    assert authenticate_user(repo, "tee@example.com", "nope-nope") is None

    repo, _ = _repo_with(hash_password("s3cret-pass"), is_active=False)
    assert authenticate_user(repo, "tee@example.com", "s3cret-pass") is None


def test_authenticate_user_rehashes_when_needed() -> None:
    old_hash = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1).hash("pw123456")
    repo, _ = _repo_with(old_hash)

    assert authenticate_user(repo, "tee@example.com", "pw123456") is not None
    stored = repo.get_by_email("tee@example.com")
    assert stored.password_hash != old_hash
    assert verify_password("pw123456", stored.password_hash)


def test_change_password_validates_and_updates() -> None:
    repo, user = _repo_with(hash_password("old-password"))

    with pytest.raises(ValidationError, match="do not match"):
        change_password(
            repo, user, current_password="old-password",
            new_password="new-password", confirm_password="other-password",
        )
    with pytest.raises(ValidationError, match="at least 8"):
        change_password(
            repo, user, current_password="old-password",
            new_password="short", confirm_password="short",
        )
    with pytest.raises(MentorBuddyError, match="incorrect"):
        change_password(
            repo, user, current_password="bad-password",
            new_password="new-password", confirm_password="new-password",
        )

    change_password(
        repo, user, current_password="old-password",
        new_password="new-password", confirm_password="new-password",
    )
    assert authenticate_user(repo, "tee@example.com", "new-password") is not None


def test_password_reset_token_works_once() -> None:
    repo, _ = _repo_with(hash_password("old-password"))
    token = request_password_reset(repo, " TEE@example.com ")
    assert token

    reset_password(repo, token, new_password="new-password", confirm_password="new-password")
    assert authenticate_user(repo, "tee@example.com", "new-password") is not None
    assert authenticate_user(repo, "tee@example.com", "old-password") is None

    # the stored hash changed, so the same token no longer matches it
    with pytest.raises(MentorBuddyError, match="invalid or has expired"):
        reset_password(
            repo, token, new_password="third-password", confirm_password="third-password"
        )


def test_password_reset_request_for_unknown_or_inactive_email() -> None:
    repo, _ = _repo_with(hash_password("old-password"), is_active=False)
    assert request_password_reset(repo, "tee@example.com") is None
    assert request_password_reset(repo, "nobody@example.com") is None


def test_reset_password_validates_input_and_token() -> None:
    repo, _ = _repo_with(hash_password("old-password"))
    token = request_password_reset(repo, "tee@example.com")

    with pytest.raises(ValidationError, match="do not match"):
        reset_password(repo, token, new_password="new-password", confirm_password="other-one")
    with pytest.raises(ValidationError, match="at least 8"):
        reset_password(repo, token, new_password="short", confirm_password="short")
    with pytest.raises(MentorBuddyError, match="invalid or has expired"):
        reset_password(
            repo, "not-a-token", new_password="new-password", confirm_password="new-password"
        )
    assert authenticate_user(repo, "tee@example.com", "old-password") is not None


def test_access_token_is_not_a_reset_token() -> None:
    repo, user = _repo_with(hash_password("old-password"))
    access = token_service.create_access_token(sub=str(user.id), role=user.role)
    with pytest.raises(MentorBuddyError, match="invalid or has expired"):
        reset_password(
            repo, access, new_password="new-password", confirm_password="new-password"
        )
