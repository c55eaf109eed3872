from admin_api.forge.sdk.core import request_context
from admin_api.forge.sdk.core.request_context import RequestContext
from admin_api.forge.sdk.forge_log import add_error_processor, add_kv_pairs_to_msg


def test_kv_pairs_include_request_context() -> None:
    request_context.set(RequestContext(request_id="req_1", user_id="auth0|alice"))
    try:
        event_dict = add_kv_pairs_to_msg(None, "info", {"msg": "Task created", "task_id": 42})  # type: ignore[arg-type]
    finally:
        request_context.reset()

    assert event_dict["request_id"] == "req_1"
    assert event_dict["user_id"] == "auth0|alice"
    assert event_dict["msg"].startswith("Task created | ")
    assert "task_id=42" in event_dict["msg"]


def test_error_type_is_tagged() -> None:
    try:
        raise ValueError("boom")
    except ValueError as e:
        event_dict = add_error_processor(None, "error", {"exc_info": e})  # type: ignore[arg-type]

    assert event_dict["error_type"] == "builtins.ValueError"
