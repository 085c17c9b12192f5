# services/permissions.py
# Role -> callable functions. Built once at import, never mutated.
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    USER = "user"
    GUEST = "guest"


DEFAULT_ROLE = Role.USER.value

FUNCTION_PERMISSIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    # all functions
    Role.ADMIN.value: (
        "search_venues",
        "check_availability",
        "create_booking",
        "get_analytics",
        "get_user_info",
    ),
    # everything except personal user data
    Role.MANAGER.value: (
        "search_venues",
        "check_availability",
        "create_booking",
        "get_analytics",
    ),
    Role.STAFF.value: (
        "search_venues",
        "check_availability",
        "create_booking",
    ),
    Role.USER.value: (
        "search_venues",
        "check_availability",
    ),
    Role.GUEST.value: (
        "search_venues",
    ),
})


def _schema_name(schema: Dict[str, Any]) -> str:
    # accepts both {"name": ...} and the tools wrapper {"type": "function", "function": {...}}
    if "function" in schema and isinstance(schema["function"], dict):
        return schema["function"].get("name", "")
    return schema.get("name", "")


@dataclass(frozen=True)
class PermissionTable:
    """Read-only role policy. Unknown roles get nothing."""

    permissions: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: FUNCTION_PERMISSIONS)

    def permitted_functions(self, role: str) -> Tuple[str, ...]:
        return tuple(self.permissions.get(role, ()))

    def is_permitted(self, role: str, function_name: str) -> bool:
        return function_name in self.permitted_functions(role)

    def filter_functions_by_role(self, schemas: Iterable[Dict[str, Any]], role: str) -> List[Dict[str, Any]]:
        allowed = self.permitted_functions(role)
        return [s for s in schemas if _schema_name(s) in allowed]


DEFAULT_PERMISSIONS = PermissionTable()


# module-level shortcuts over the default table
def has_permission(role: str, function_name: str) -> bool:
    return DEFAULT_PERMISSIONS.is_permitted(role, function_name)


def get_permitted_functions(role: str) -> Tuple[str, ...]:
    return DEFAULT_PERMISSIONS.permitted_functions(role)


def filter_functions_by_role(schemas: Iterable[Dict[str, Any]], role: str) -> List[Dict[str, Any]]:
    return DEFAULT_PERMISSIONS.filter_functions_by_role(schemas, role)
