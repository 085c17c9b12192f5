from types import MappingProxyType

import pytest

from services.permissions import (
    DEFAULT_PERMISSIONS,
    FUNCTION_PERMISSIONS,
    PermissionTable,
    Role,
    filter_functions_by_role,
    get_permitted_functions,
    has_permission,
)
from services.tools_schema import ALL_TOOLS, tool_name

ALL_NAMES = [tool_name(t) for t in ALL_TOOLS]


def test_role_table():
    assert set(get_permitted_functions("admin")) == set(ALL_NAMES)
    assert "get_user_info" not in get_permitted_functions("manager")
    assert "get_analytics" in get_permitted_functions("manager")
    assert get_permitted_functions("staff") == ("search_venues", "check_availability", "create_booking")
    assert get_permitted_functions("user") == ("search_venues", "check_availability")
    assert get_permitted_functions("guest") == ("search_venues",)


def test_unknown_role_fails_closed():
    assert get_permitted_functions("superuser") == ()
    assert not has_permission("superuser", "search_venues")
    assert filter_functions_by_role(ALL_TOOLS, "superuser") == []


def test_is_permitted_is_exact_membership():
    assert has_permission("user", "check_availability")
    assert not has_permission("user", "create_booking")
    assert not has_permission("user", "check")
    assert not has_permission("USER", "search_venues")


@pytest.mark.parametrize("role", [r.value for r in Role])
def test_filter_matches_is_permitted_and_keeps_order(role):
    offered = [tool_name(t) for t in filter_functions_by_role(ALL_TOOLS, role)]
    assert offered == [n for n in ALL_NAMES if has_permission(role, n)]


def test_filter_accepts_plain_function_schemas():
    schemas = [{"name": "get_analytics"}, {"name": "search_venues"}]
    assert DEFAULT_PERMISSIONS.filter_functions_by_role(schemas, "guest") == [{"name": "search_venues"}]


def test_table_is_read_only():
    assert isinstance(FUNCTION_PERMISSIONS, MappingProxyType)
    with pytest.raises(TypeError):
        FUNCTION_PERMISSIONS["guest"] = ("create_booking",)


def test_injected_policy():
    table = PermissionTable({"kiosk": ("search_venues",)})
    assert table.is_permitted("kiosk", "search_venues")
    assert not table.is_permitted("admin", "search_venues")
