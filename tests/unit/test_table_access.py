import uuid

import pytest

from wavy.errors import TableAccessDenied
from wavy.security.deps import AuthUser
from wavy.services.table_access import ALLOWED_TABLES, resolve_access


def user(*roles: str) -> AuthUser:
    return AuthUser(id=uuid.uuid4(), email="u@wavy.test", role=roles[0] if roles else "user", roles=list(roles))


def test_unknown_table_is_forbidden() -> None:
    with pytest.raises(TableAccessDenied) as exc:
        resolve_access("users", "GET", user("admin"))
    assert exc.value.message == "Table non autorisée"


def test_any_authenticated_caller_reads_jobs_but_only_admin_writes() -> None:
    assert not resolve_access("jobs", "GET", user()).owner_scoped
    assert not resolve_access("jobs", "POST", user("admin")).owner_scoped
    with pytest.raises(TableAccessDenied):
        resolve_access("jobs", "PATCH", user("user_cra"))


def test_admin_bypasses_ownership() -> None:
    grant = resolve_access("cra_reports", "PATCH", user("admin"))
    assert not grant.owner_scoped


def test_consultant_gets_owner_scoped_cra_access() -> None:
    grant = resolve_access("cra_reports", "GET", user("user_cra"))
    assert grant.owner_scoped
    assert grant.owner_column == "user_id"


def test_profiles_self_policy_uses_id() -> None:
    grant = resolve_access("profiles", "PATCH", user())
    assert grant.owner_column == "id"


def test_otp_codes_are_never_exposed() -> None:
    for method in ("GET", "POST", "PATCH", "DELETE"):
        with pytest.raises(TableAccessDenied):
            resolve_access("otp_codes", method, user("admin"))


def test_unsupported_method() -> None:
    with pytest.raises(TableAccessDenied) as exc:
        resolve_access("jobs", "PUT", user("admin"))
    assert exc.value.message == "Méthode non supportée"


def test_allow_list_covers_tables_behind_dedicated_routes() -> None:
    for table in ("jobs", "trainings", "clients", "cra_reports", "applications", "profiles"):
        assert table in ALLOWED_TABLES


def test_consultants_cannot_write_cra_rows_generically() -> None:
    for method in ("POST", "PATCH", "DELETE"):
        with pytest.raises(TableAccessDenied):
            resolve_access("cra_reports", method, user("user_cra"))


@pytest.mark.parametrize("table", ["user_invitations", "cra_day_details"])
def test_admin_only_tables(table: str) -> None:
    assert not resolve_access(table, "GET", user("admin")).owner_scoped
    for caller in (user(), user("user_cra")):
        for method in ("GET", "POST", "PATCH", "DELETE"):
            with pytest.raises(TableAccessDenied):
                resolve_access(table, method, caller)
