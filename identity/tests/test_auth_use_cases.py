from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from identity.application.services.account_service import AccountService
from identity.application.services.tokens import JwtTokenIssuer
from identity.application.use_cases.users.change_password import ChangePasswordUseCase
from identity.application.use_cases.users.change_username import ChangeUsernameUseCase
from identity.application.use_cases.users.login_user import LoginUserUseCase
from identity.application.use_cases.users.register_user import RegisterUserUseCase
from identity.domain.users.exceptions import (
    AccountBannedError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from identity.shared.errors import RepositoryError, UnauthorizedError


@pytest.fixture()
def login(users, hasher, token_issuer: JwtTokenIssuer) -> LoginUserUseCase:
    return LoginUserUseCase(users=users, tokens=token_issuer, password_hasher=hasher)


def test_login_success_returns_token_for_account(
    login: LoginUserUseCase, token_issuer: JwtTokenIssuer, seed
) -> None:
    alice = seed("alice", "correct-pw")

    token = login.execute("alice", "correct-pw", "10.0.0.1")

    assert token_issuer.resolve(token) == alice.id


def test_login_updates_last_login(login: LoginUserUseCase, users, seed) -> None:
    alice = seed("alice", "correct-pw")

    login.execute("alice", "correct-pw", "10.0.0.1")

    assert users.last_logins == [(alice.id, "10.0.0.1")]
    assert users.get_by_id(alice.id).last_login_ip == "10.0.0.1"


def test_login_unknown_user_and_wrong_password_are_indistinguishable(
    login: LoginUserUseCase, seed
) -> None:
    seed("alice", "correct-pw")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        login.execute("alice", "wrong-pw")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        login.execute("ghost", "anything")

    assert wrong_password.value.to_dict() == unknown_user.value.to_dict()
    assert wrong_password.value.status == unknown_user.value.status


def test_banned_account_with_correct_password_is_rejected_with_reason(
    login: LoginUserUseCase, seed
) -> None:
    seed(
        "mallory",
        "correct-pw",
        ban_expiration=datetime.now(UTC) + timedelta(days=1),
        ban_reason="spamming",
    )

    with pytest.raises(AccountBannedError) as exc_info:
        login.execute("mallory", "correct-pw")

    assert exc_info.value.reason == "spamming"
    assert exc_info.value.to_dict() == {"message": "user is banned", "reason": "spamming"}


def test_banned_account_with_wrong_password_does_not_leak_ban(
    login: LoginUserUseCase, seed
) -> None:
    seed(
        "mallory",
        "correct-pw",
        ban_expiration=datetime.now(UTC) + timedelta(days=1),
        ban_reason="spamming",
    )

    with pytest.raises(InvalidCredentialsError):
        login.execute("mallory", "wrong-pw")


def test_expired_ban_allows_login(login: LoginUserUseCase, seed) -> None:
    seed(
        "mallory",
        "correct-pw",
        ban_expiration=datetime.now(UTC) - timedelta(minutes=1),
        ban_reason="old",
    )

    assert login.execute("mallory", "correct-pw")


def test_last_login_failure_is_not_fatal(hasher, token_issuer: JwtTokenIssuer, users, seed) -> None:
    alice = seed("alice", "correct-pw")
    flaky = MagicMock(wraps=users)
    flaky.update_last_login.side_effect = RepositoryError("update_last_login")
    login = LoginUserUseCase(users=flaky, tokens=token_issuer, password_hasher=hasher)

    token = login.execute("alice", "correct-pw")

    assert token_issuer.resolve(token) == alice.id


def test_register_then_duplicate_conflicts(accounts: AccountService, users) -> None:
    register = RegisterUserUseCase(accounts=accounts)

    user = register.execute("alice@example.com", "password123")

    assert users.get_by_username("alice").id == user.id
    with pytest.raises(UserAlreadyExistsError):
        register.execute("alice@example.com", "password456")


def test_change_username_to_taken_name_conflicts(users, seed) -> None:
    alice = seed("alice", "pw")
    seed("bob", "pw")
    use_case = ChangeUsernameUseCase(users=users)

    with pytest.raises(UserAlreadyExistsError):
        use_case.execute(alice, "bob")

    assert users.get_by_id(alice.id).username == "alice"


def test_change_username_to_free_name(users, seed) -> None:
    alice = seed("alice", "pw")
    use_case = ChangeUsernameUseCase(users=users)

    updated = use_case.execute(alice, "alicia")

    assert updated.username == "alicia"
    assert users.get_by_username("alicia").id == alice.id
    with pytest.raises(UserNotFoundError):
        users.get_by_username("alice")


def test_change_username_to_same_name_is_noop(users, seed) -> None:
    alice = seed("alice", "pw")
    repo = MagicMock(wraps=users)

    assert ChangeUsernameUseCase(users=repo).execute(alice, "alice") == alice
    repo.change_username.assert_not_called()


def test_change_password_with_wrong_current_keeps_hash(
    users, hasher, accounts: AccountService, dispatcher, seed
) -> None:
    alice = seed("alice", "old-password")
    use_case = ChangePasswordUseCase(users=users, password_hasher=hasher, accounts=accounts)

    with pytest.raises(UnauthorizedError):
        use_case.execute(alice, "not-the-password", "new-password")

    assert users.get_by_id(alice.id).password_hash == alice.password_hash
    assert dispatcher.sent == []


def test_change_password_swaps_credential_and_notifies(
    users, hasher, accounts: AccountService, dispatcher, seed
) -> None:
    alice = seed("alice", "old-password")
    use_case = ChangePasswordUseCase(users=users, password_hasher=hasher, accounts=accounts)

    use_case.execute(alice, "old-password", "new-password")

    stored = users.get_by_id(alice.id).password_hash
    assert hasher.verify("new-password", stored)
    assert not hasher.verify("old-password", stored)
    assert [n.kind for n in dispatcher.sent] == ["password_changed"]
