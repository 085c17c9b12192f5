# services/bot_logic.py
# One chat turn: role-scoped prompt -> first LLM call -> optional function -> follow-up LLM call.
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .llm import LLM, ModelFunctionCall, ModelReply
from .permissions import DEFAULT_ROLE
from .redact import redact_sensitive_data
from .router import FunctionRouter
from .schemas import ChatResponse, FunctionCall, FunctionCallRecord, FunctionResult

log = logging.getLogger(__name__)

SYSTEM_PROMPT_BASE = (
    "You are PRIMA AI, a helpful restaurant booking assistant. You can help users search for "
    "restaurants, check availability, and make reservations.\n"
    "\n"
    "Current user role: {role}\n"
    "\n"
    "Key guidelines:\n"
    "- Be friendly, professional, and helpful\n"
    "- Always confirm details before making bookings\n"
    "- Provide clear information about venues and availability\n"
    "- If you need to make a booking, ensure you have all required information "
    "(name, email, party size, date, time)\n"
    "- Respect user privacy and only access information appropriate for your role level"
)

ROLE_GUIDELINES = {
    "admin": (
        "\n- You have full access to all functions including analytics and user information"
        "\n- You can help with business insights and operational data"
        "\n- Use analytics functions to provide business intelligence when requested"
    ),
    "manager": (
        "\n- You can access analytics and booking functions"
        "\n- You can help with operational insights and booking management"
        "\n- You cannot access sensitive user personal information"
    ),
    "staff": (
        "\n- You can help with searching venues and making bookings"
        "\n- Focus on customer service and reservation management"
        "\n- You cannot access analytics or sensitive user data"
    ),
    "user": (
        "\n- You can help search for restaurants and check availability"
        "\n- You cannot make bookings for others - only provide booking information"
        "\n- Focus on helping find the perfect dining experience"
    ),
    "guest": (
        "\n- You can help search for restaurants"
        "\n- You have limited access - mainly browsing and discovery"
        "\n- Encourage users to sign up for full booking capabilities"
    ),
}

APOLOGY_TEMPLATE = "I apologize, but I encountered an error: {error}"


def generate_system_prompt(role: str) -> str:
    return SYSTEM_PROMPT_BASE.format(role=role) + ROLE_GUIDELINES.get(role, ROLE_GUIDELINES["user"])


class MalformedArgumentsError(ValueError):
    """The model's argument payload is not a JSON object."""


def parse_function_arguments(raw: Optional[str]) -> Dict[str, Any]:
    # no payload at all means "no arguments"; anything else must be a JSON object
    if raw is None or not raw.strip():
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedArgumentsError(f"invalid JSON at position {e.pos}") from e
    if not isinstance(args, dict):
        raise MalformedArgumentsError(f"expected an object, got {type(args).__name__}")
    return args


class TurnState(str, Enum):
    INIT = "INIT"
    FIRST_CALL = "FIRST_CALL"
    DIRECT_REPLY = "DIRECT_REPLY"
    FUNCTION_REQUESTED = "FUNCTION_REQUESTED"
    DISPATCH = "DISPATCH"
    FOLLOW_UP_CALL = "FOLLOW_UP_CALL"
    DONE = "DONE"


@dataclass
class Turn:
    message: str
    role: str = DEFAULT_ROLE
    state: TurnState = TurnState.INIT
    path: List[TurnState] = field(default_factory=lambda: [TurnState.INIT])
    messages: List[Dict[str, Any]] = field(default_factory=list)
    offered: List[Dict[str, Any]] = field(default_factory=list)
    function_calls: List[FunctionCallRecord] = field(default_factory=list)
    final: str = ""

    def advance(self, state: TurnState) -> None:
        self.state = state
        self.path.append(state)


def resolve_role(context: Optional[Dict[str, Any]]) -> str:
    role = (context or {}).get("role")
    return str(role) if role else DEFAULT_ROLE


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ChatOrchestrator:
    def __init__(self, router: FunctionRouter, llm: LLM):
        self.router = router
        self.llm = llm

    async def run_turn(self, message: str, role: str = DEFAULT_ROLE) -> Turn:
        turn = Turn(message=message, role=role)

        # INIT: only functions this role may call are ever shown to the model
        turn.offered = self.router.get_functions_for_role(role)
        turn.messages = [
            {"role": "system", "content": generate_system_prompt(role)},
            {"role": "user", "content": message},
        ]

        turn.advance(TurnState.FIRST_CALL)
        first: ModelReply = await self.llm.complete(turn.messages, turn.offered or None)

        if first.function_call is None:
            turn.advance(TurnState.DIRECT_REPLY)
            turn.final = first.content
            turn.advance(TurnState.DONE)
            return turn

        turn.advance(TurnState.FUNCTION_REQUESTED)
        result = await self._dispatch(turn, first.function_call)

        if result.success:
            turn.advance(TurnState.FOLLOW_UP_CALL)
            follow_up = turn.messages + [
                first.function_call.to_message(),
                {
                    "role": "tool",
                    "tool_call_id": first.function_call.id,
                    "name": first.function_call.name,
                    "content": json.dumps(result.to_dict(), ensure_ascii=False, default=str),
                },
            ]
            second = await self.llm.complete(follow_up)
            # rare: empty narration -> reuse what we have
            turn.final = second.content or first.content or (result.message or "")
        else:
            turn.final = APOLOGY_TEMPLATE.format(error=result.error)

        turn.advance(TurnState.DONE)
        return turn

    async def _dispatch(self, turn: Turn, invocation: ModelFunctionCall) -> FunctionResult:
        name = invocation.name
        try:
            args = parse_function_arguments(invocation.arguments)
        except MalformedArgumentsError as e:
            log.warning("Malformed arguments for %s: %s", name, e)
            result = FunctionResult.fail(f"Malformed arguments for {name}")
            turn.function_calls.append(FunctionCallRecord(name=name, arguments={}, result=result))
            return result

        log.info("Function call requested: %s role=%s args=%s", name, turn.role, redact_sensitive_data(args))

        turn.advance(TurnState.DISPATCH)
        result = await self.router.execute_function_call(FunctionCall(name=name, arguments=args), turn.role)
        turn.function_calls.append(FunctionCallRecord(name=name, arguments=args, result=result))
        return result

    async def process_message(
        self,
        message: str,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ChatResponse:
        role = resolve_role(context)
        log.info("Chat request received: user=%s session=%s role=%s length=%s",
                 user_id, session_id, role, len(message))

        turn = await self.run_turn(message, role)

        response = ChatResponse(
            message=turn.final,
            function_calls=turn.function_calls or None,
            session_id=session_id or f"session_{int(time.time() * 1000)}",
            timestamp=now_iso(),
        )
        log.info("Chat response sent: user=%s session=%s length=%s function_calls=%s",
                 user_id, response.session_id, len(turn.final), len(turn.function_calls))
        return response
