# app/modules/deliveries/policy.py
from typing import Dict, Iterable

from app.shared.database.models import USER_ROLES

DEFAULT_ACCEPT_ROLES = ("carrier", "both")


class AcceptancePolicy:
    """Role table deciding who may accept a delivery sent by someone else.

    The sender of a delivery is never eligible, whatever their role; this
    table only covers third parties.
    """

    def __init__(self, table: Dict[str, bool]):
        unknown = set(table) - set(USER_ROLES)
        if unknown:
            raise ValueError(f"Unknown roles in acceptance policy: {sorted(unknown)}")
        self.table = {role: bool(table.get(role, False)) for role in USER_ROLES}

    @classmethod
    def from_roles(cls, roles: Iterable[str] = DEFAULT_ACCEPT_ROLES) -> "AcceptancePolicy":
        return cls({role: True for role in roles})

    def allows(self, role: str) -> bool:
        return self.table.get(role, False)

    def __repr__(self) -> str:
        allowed = [role for role, ok in self.table.items() if ok]
        return f"AcceptancePolicy(allowed={allowed})"
