import logging

from services.router import FunctionRouter, build_registry
from services.schemas import FunctionCall, FunctionResult
from services.tools_schema import ALL_TOOLS, tool_name

AVAILABILITY_ARGS = {"venueId": "v1", "date": "2026-11-02", "time": "19:30", "partySize": 4}


def test_registry_is_closed_and_ordered(router):
    assert list(router.operations) == [
        "search_venues", "check_availability", "create_booking", "get_analytics", "get_user_info",
    ]
    assert [f["function"]["name"] for f in router.get_available_functions()] == list(router.operations)


def test_validate_reports_exact_missing_fields(router):
    args = dict(AVAILABILITY_ARGS)
    del args["date"]
    assert router.missing_required_arguments("check_availability", args) == ["date"]
    assert router.validate_function_arguments("check_availability", args) == (
        False, ["Missing required arguments: date"],
    )


def test_validate_is_presence_only(router):
    args = {"venueId": 1, "date": "tomorrow", "time": None, "partySize": "lots"}
    assert router.validate_function_arguments("check_availability", args) == (True, [])
    assert router.validate_function_arguments("search_venues", {}) == (True, [])


def test_validate_unknown_function(router):
    assert router.validate_function_arguments("drop_tables", {}) == (False, ["Unknown function: drop_tables"])


def test_unknown_function_never_reaches_backend(router, backend, run):
    result = run(router.execute_function_call(FunctionCall(name="drop_tables", arguments={}), "admin"))
    assert result == FunctionResult(success=False, error="Unknown function: drop_tables")
    assert backend.requests == []


def test_denied_function_never_reaches_backend(router, backend, run):
    backend.on("POST", "/bookings", json={"id": 7})
    call = FunctionCall(name="create_booking", arguments={
        **AVAILABILITY_ARGS, "guestName": "Ann", "guestEmail": "ann@example.com",
    })
    for role in ("guest", "user", "nobody"):
        result = run(router.execute_function_call(call, role))
        assert result.success is False
        assert result.error == f"Function create_booking is not permitted for role {role}"
    assert backend.requests == []


def test_missing_arguments_fail_before_backend(router, backend, run):
    args = dict(AVAILABILITY_ARGS)
    del args["partySize"]
    result = run(router.execute_function_call(FunctionCall(name="check_availability", arguments=args), "user"))
    assert result.error == "Missing required arguments: partySize"
    assert backend.requests == []


def test_typed_validation_rejects_bad_formats(router, backend, run):
    args = {**AVAILABILITY_ARGS, "date": "02/11/2026", "partySize": 50}
    result = run(router.execute_function_call(FunctionCall(name="check_availability", arguments=args), "user"))
    assert result.success is False
    assert result.error.startswith("Invalid arguments for check_availability: ")
    assert "date" in result.error and "partySize" in result.error
    assert backend.requests == []


def test_validation_error_does_not_echo_values(router, run):
    args = {**AVAILABILITY_ARGS, "guestName": "Ann", "guestEmail": "ann-at-example"}
    result = run(router.execute_function_call(FunctionCall(name="create_booking", arguments=args), "admin"))
    assert "guestEmail" in result.error
    assert "ann-at-example" not in result.error


def test_success_returns_handler_result_unchanged(router, backend, run):
    backend.on("POST", "/venues/v1/availability", json={"available": True, "capacity": 6})
    result = run(router.execute_function_call(FunctionCall(name="check_availability", arguments=AVAILABILITY_ARGS), "staff"))
    assert result.success is True
    assert result.data == {"available": True, "capacity": 6}
    assert len(backend.requests) == 1


def test_handler_exception_becomes_generic_failure(api, run, caplog):
    async def broken(_args):
        raise KeyError("boom")

    ops = [op if op.name != "search_venues" else op.__class__(op.name, op.schema, op.args_model, broken)
           for op in build_registry(api)]
    router = FunctionRouter(ops)

    with caplog.at_level(logging.ERROR):
        result = run(router.execute_function_call(
            FunctionCall(name="search_venues", arguments={"query": "sushi", "email": "a@b.com"}), "guest",
        ))
    assert result == FunctionResult(success=False, error="Failed to execute search_venues. Please try again.")
    assert "a@b.com" not in caplog.text
    assert "[REDACTED]" in caplog.text


def test_dispatch_logs_are_redacted(router, backend, run, caplog):
    backend.on("POST", "/bookings", json={"id": 11})
    args = {**AVAILABILITY_ARGS, "guestName": "Ann", "guestEmail": "ann@example.com", "guestPhone": "555-123-4567"}
    with caplog.at_level(logging.INFO):
        result = run(router.execute_function_call(FunctionCall(name="create_booking", arguments=args), "staff"))
    assert result.success
    assert "ann@example.com" not in caplog.text
    assert "555-123-4567" not in caplog.text


def test_registry_follows_tool_schema_order(router):
    assert list(router.operations) == [tool_name(t) for t in ALL_TOOLS]


def test_venue_id_cannot_leave_the_venue_path(router, backend, run):
    backend.on("POST", "/bookings", json={"id": 99})
    for venue_id in ("../bookings#", "v1/../../bookings", "v1?x=1", ""):
        args = {**AVAILABILITY_ARGS, "venueId": venue_id}
        result = run(router.execute_function_call(FunctionCall(name="check_availability", arguments=args), "user"))
        assert result.success is False
        assert result.error.startswith("Invalid arguments for check_availability: venueId")
    assert backend.requests == []
