# wavy/services/table_access.py
#
# Allow-list for the generic table endpoint. Each table names the roles that
# may read and write it. Two pseudo-roles exist:
#   "*"    any authenticated caller
#   "self" the caller, restricted to rows whose owner column is their id

from dataclasses import dataclass

from ..errors import TableAccessDenied
from ..security.deps import ADMIN, USER_CRA, AuthUser

ANY = "*"
SELF = "self"

READ_METHODS = {"GET"}
WRITE_METHODS = {"POST", "PATCH", "DELETE"}


@dataclass(frozen=True)
class TablePolicy:
    read: frozenset[str]
    write: frozenset[str]
    owner_column: str | None = None


def _policy(read, write, owner_column=None) -> TablePolicy:
    return TablePolicy(read=frozenset(read), write=frozenset(write), owner_column=owner_column)


ALLOWED_TABLES: dict[str, TablePolicy] = {
    "jobs": _policy([ANY], [ADMIN]),
    "trainings": _policy([ANY], [ADMIN]),
    "categories": _policy([ANY], [ADMIN]),
    "applications": _policy([ADMIN], [ANY]),
    "training_leads": _policy([ADMIN], [ANY]),
    "contact_messages": _policy([ADMIN], [ANY]),
    "profiles": _policy([ADMIN, USER_CRA, SELF], [ADMIN, SELF], owner_column="id"),
    "user_roles": _policy([ADMIN, USER_CRA, SELF], [ADMIN], owner_column="user_id"),
    "user_invitations": _policy([ADMIN], [ADMIN]),
    "clients": _policy([ADMIN, USER_CRA], [ADMIN]),
    "client_validators": _policy([ADMIN], [ADMIN]),
    "user_client_assignments": _policy([ADMIN, USER_CRA], [ADMIN]),
    # Consultants write their reports through /api/cra only
    "cra_reports": _policy([ADMIN, SELF], [ADMIN], owner_column="user_id"),
    "cra_day_details": _policy([ADMIN], [ADMIN]),
    "otp_codes": _policy([], []),  # never through the generic endpoint
}


@dataclass(frozen=True)
class AccessGrant:
    table: str
    owner_column: str | None = None

    @property
    def owner_scoped(self) -> bool:
        return self.owner_column is not None


def resolve_access(table: str, method: str, user: AuthUser) -> AccessGrant:
    """
    Decide whether ``user`` may run ``method`` on ``table``.

    Returns a full grant when one of the caller's roles is listed, an
    owner-scoped grant when only "self" applies, and raises
    :class:`TableAccessDenied` otherwise.
    """
    policy = ALLOWED_TABLES.get(table)
    if policy is None:
        raise TableAccessDenied(table)

    method = method.upper()
    if method in READ_METHODS:
        allowed = policy.read
    elif method in WRITE_METHODS:
        allowed = policy.write
    else:
        raise TableAccessDenied(table, "Méthode non supportée")

    if ANY in allowed or user.has_any_role(*allowed):
        return AccessGrant(table=table)
    if SELF in allowed and policy.owner_column:
        return AccessGrant(table=table, owner_column=policy.owner_column)
    raise TableAccessDenied(table, "Accès refusé")
