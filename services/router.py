# services/router.py
# Function registry + dispatcher: permission check, argument validation, execution.
import logging
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from . import tools
from .booking_api import BookingAPI
from .permissions import DEFAULT_PERMISSIONS, DEFAULT_ROLE, PermissionTable
from .redact import redact_sensitive_data
from .schemas import (
    AnalyticsQueryArgs,
    CheckAvailabilityArgs,
    CreateBookingArgs,
    FunctionCall,
    FunctionResult,
    SearchVenuesArgs,
    UserQueryArgs,
)
from .tools_schema import ALL_TOOLS, required_fields, tool_name

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    name: str
    schema: Dict[str, Any]
    args_model: Type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[FunctionResult]]

    def parse_arguments(self, arguments: Dict[str, Any]) -> BaseModel:
        return self.args_model.model_validate(arguments)

    async def execute(self, arguments: Dict[str, Any]) -> FunctionResult:
        return await self.handler(self.parse_arguments(arguments))


BINDINGS = MappingProxyType({
    "search_venues": (SearchVenuesArgs, tools.search_venues),
    "check_availability": (CheckAvailabilityArgs, tools.check_availability),
    "create_booking": (CreateBookingArgs, tools.create_booking),
    "get_analytics": (AnalyticsQueryArgs, tools.get_analytics),
    "get_user_info": (UserQueryArgs, tools.get_user_info),
})


def build_registry(api: BookingAPI) -> Tuple[Operation, ...]:
    """All callable functions, bound to one backend client. Order follows ALL_TOOLS."""
    ops = []
    for schema in ALL_TOOLS:
        name = tool_name(schema)
        args_model, handler = BINDINGS[name]
        ops.append(Operation(name=name, schema=schema, args_model=args_model, handler=partial(handler, api)))
    return tuple(ops)


def _format_validation_error(e: ValidationError) -> str:
    # only field paths and messages; never echo the input values
    parts = []
    for err in e.errors(include_url=False, include_input=False):
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class FunctionRouter:
    def __init__(self, operations, permissions: PermissionTable = DEFAULT_PERMISSIONS):
        self._operations = MappingProxyType({op.name: op for op in operations})
        self.permissions = permissions

    @property
    def operations(self):
        return self._operations

    def get_available_functions(self) -> List[Dict[str, Any]]:
        return [op.schema for op in self._operations.values()]

    def get_functions_for_role(self, role: str) -> List[Dict[str, Any]]:
        return self.permissions.filter_functions_by_role(self.get_available_functions(), role)

    def missing_required_arguments(self, function_name: str, args: Dict[str, Any]) -> List[str]:
        op = self._operations[function_name]
        return [f for f in required_fields(op.schema) if f not in args]

    def validate_function_arguments(self, function_name: str, args: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Presence check of required fields only; types are checked by the argument models."""
        if function_name not in self._operations:
            return False, [f"Unknown function: {function_name}"]
        missing = self.missing_required_arguments(function_name, args)
        if missing:
            return False, [f"Missing required arguments: {', '.join(missing)}"]
        return True, []

    async def execute_function_call(self, call: FunctionCall, role: str = DEFAULT_ROLE) -> FunctionResult:
        name, args = call.name, call.arguments
        log.info("Executing function: %s role=%s args=%s", name, role, redact_sensitive_data(args))

        op: Optional[Operation] = self._operations.get(name)
        if op is None:
            log.error("Unknown function: %s", name)
            return FunctionResult.fail(f"Unknown function: {name}")

        if not self.permissions.is_permitted(role, name):
            log.warning("Function %s denied for role %s", name, role)
            return FunctionResult.fail(f"Function {name} is not permitted for role {role}")

        valid, errors = self.validate_function_arguments(name, args)
        if not valid:
            log.warning("Function %s rejected: %s", name, "; ".join(errors))
            return FunctionResult.fail("; ".join(errors))

        try:
            result = await op.execute(args)
        except ValidationError as e:
            detail = _format_validation_error(e)
            log.warning("Function %s rejected: %s", name, detail)
            return FunctionResult.fail(f"Invalid arguments for {name}: {detail}")
        except Exception:
            log.exception("Error executing function %s args=%s", name, redact_sensitive_data(args))
            return FunctionResult.fail(f"Failed to execute {name}. Please try again.")

        log.info("Function %s executed success=%s", name, result.success)
        return result


def build_router(api: Optional[BookingAPI] = None, permissions: PermissionTable = DEFAULT_PERMISSIONS) -> FunctionRouter:
    return FunctionRouter(build_registry(api or BookingAPI()), permissions=permissions)
