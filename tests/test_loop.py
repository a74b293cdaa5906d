import json

from autocli.config.models import PlanConfig
from autocli.core.loop import SOFT_STOP_DIRECTIVE, DriverState
from autocli.core.session import Role
from autocli.llm.client import AssistantMessage

TOKEN = "TASK COMPLETE"


def tool_call(name, **parameters):
    return f"<tool_call>{json.dumps({'name': name, 'parameters': parameters})}</tool_call>"


def tool_responses(message):
    assert message.role == Role.USER
    return json.loads(message.content)["tool_responses"]


def test_plain_reply_ends_turn(make_driver):
    h = make_driver(["Hello there."])
    outcome = h.driver.handle_user_request("hi")

    assert outcome.iterations == 1
    assert outcome.final_text == "Hello there."
    assert outcome.error is None
    assert [m.role for m in h.session.messages] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
    assert h.driver.state == DriverState.AWAITING_USER


def test_missing_file_round_trips_as_single_tool_responses_message(make_driver):
    h = make_driver([tool_call("Read", filePath="missing.txt"), "The file does not exist."])
    outcome = h.driver.handle_user_request("list files")

    assert outcome.iterations == 2
    second_call = h.model.calls[1]
    assert second_call[0]["role"] == "system"
    last = second_call[-1]
    assert last["role"] == "user"
    (entry,) = json.loads(last["content"])["tool_responses"]
    assert entry["tool_name"] == "Read"
    assert entry["parameters"] == {"filePath": "missing.txt"}
    assert entry["status"] == "error"
    assert "not found" in entry["output"]


def test_all_calls_of_a_turn_share_one_message(make_driver):
    reply = tool_call("Read", filePath="README.md") + tool_call("LS", dirPath="docs")
    h = make_driver([reply, "ok"])
    h.driver.handle_user_request("look around")

    entries = tool_responses(h.session.messages[3])
    assert [e["tool_name"] for e in entries] == ["Read", "LS"]
    assert [name for name, _ in h.gate.requests] == ["Read", "LS"]


def test_soft_stop_bounds_loop_to_ceiling_plus_one(make_driver):
    h = make_driver(factory=lambda n: tool_call("LS"), max_iterations=3)
    outcome = h.driver.handle_user_request("loop forever")

    assert len(h.model.calls) == 4
    assert outcome.iterations == 4
    assert outcome.stopped_by_ceiling
    final_request = h.model.calls[-1]
    assert final_request[-1] == {"role": "user", "content": SOFT_STOP_DIRECTIVE}
    assert all(m["content"] != SOFT_STOP_DIRECTIVE for m in h.model.calls[-2])
    # tools from the reply after the soft stop are not executed
    assert len(h.gate.requests) == 3
    assert h.session.messages[-1].role == Role.ASSISTANT


def test_denied_tool_is_reported_to_model(make_driver, project):
    h = make_driver([tool_call("Write", filePath="x.txt", content="data"), "ok"], answers=[False])
    h.driver.handle_user_request("write it")

    (entry,) = tool_responses(h.session.messages[3])
    assert entry["status"] == "error"
    assert entry["output"] == "User denied tool execution"
    assert not (project / "x.txt").exists()


def test_invalid_tool_call_skips_gate(make_driver):
    h = make_driver(["<tool_call>{broken</tool_call>", "sorry"])
    h.driver.handle_user_request("go")

    (entry,) = tool_responses(h.session.messages[3])
    assert entry["tool_name"] == "InvalidToolCall"
    assert entry["parameters"] == {"raw": "{broken"}
    assert entry["status"] == "error"
    assert h.gate.requests == []


def test_model_error_ends_turn_without_retry(make_driver):
    h = make_driver([AssistantMessage(error="Connection error: boom", code="connection_error")])
    outcome = h.driver.handle_user_request("hi")

    assert outcome.error == "Connection error: boom"
    assert len(h.model.calls) == 1
    assert h.session.messages[-1].role == Role.ASSISTANT
    assert "Connection error: boom" in h.session.messages[-1].content
    assert h.driver.state == DriverState.AWAITING_USER


def test_thinking_is_stripped_from_history(make_driver):
    h = make_driver(["<think>secret reasoning</think>\nVisible answer"])
    h.driver.handle_user_request("hi")
    assert h.session.messages[-1].content == "Visible answer"


def test_plan_steps_run_in_order(make_driver):
    replies = [
        '<plan>["step A", "step B"]</plan>I will do it in two steps.',
        "Working on A",  # no token, no tools -> reminder
        f"A finished. {TOKEN}",
        f"B finished. {TOKEN}",
    ]
    h = make_driver(replies)
    outcome = h.driver.handle_user_request("do the thing")

    assert outcome.plan == ["step A", "step B"]
    assert outcome.steps_completed == 2
    contents = [m.content for m in h.session.messages]
    step_a = next(i for i, c in enumerate(contents) if c.startswith("Plan step 1/2: step A"))
    reminder = next(i for i, c in enumerate(contents) if c.startswith("Reminder: you are working on plan step 1/2"))
    token_a = contents.index(f"A finished. {TOKEN}")
    step_b = next(i for i, c in enumerate(contents) if c.startswith("Plan step 2/2: step B"))
    assert step_a < reminder < token_a < step_b
    assert contents[step_a].endswith('reply with "TASK COMPLETE".')


def test_plan_step_executes_tools_before_checking_token(make_driver):
    replies = [
        '<plan>["read it"]</plan>',
        tool_call("Read", filePath="README.md") + f" {TOKEN}",
    ]
    h = make_driver(replies)
    outcome = h.driver.handle_user_request("go")

    assert outcome.steps_completed == 1
    (entry,) = tool_responses(h.session.messages[-1])
    assert entry["status"] == "success"
    assert len(h.model.calls) == 2


def test_plan_step_ceiling_moves_on(make_driver):
    replies = ['<plan>["never ends", "second"]</plan>'] + ["still going"] * 3 + [f"done {TOKEN}"]
    plan = PlanConfig(max_step_iterations=2)
    h = make_driver(replies, plan=plan)
    outcome = h.driver.handle_user_request("go")

    assert outcome.steps_completed == 1
    contents = [m.content for m in h.session.messages]
    assert SOFT_STOP_DIRECTIVE in contents
    assert contents.index(SOFT_STOP_DIRECTIVE) < next(
        i for i, c in enumerate(contents) if c.startswith("Plan step 2/2")
    )


def test_model_error_aborts_plan(make_driver):
    replies = ['<plan>["one", "two"]</plan>', AssistantMessage(error="down", code="server_error")]
    h = make_driver(replies)
    outcome = h.driver.handle_user_request("go")

    assert outcome.error == "down"
    assert outcome.steps_completed == 0
    assert not any(m.content.startswith("Plan step 2/2") for m in h.session.messages)


def test_plan_disabled_is_not_executed(make_driver):
    h = make_driver(['<plan>["one"]</plan>ok'], plan=PlanConfig(enabled=False))
    outcome = h.driver.handle_user_request("go")
    assert outcome.plan == ["one"]
    assert len(h.model.calls) == 1


def test_history_is_append_only_across_requests(make_driver):
    h = make_driver(["first", "second"])
    h.driver.handle_user_request("a")
    snapshot = list(h.session.messages)
    h.driver.handle_user_request("b")
    assert list(h.session.messages[: len(snapshot)]) == snapshot
    assert h.session.messages[0].role == Role.SYSTEM


def test_bracketed_tool_parameters_are_displayed_literally(make_driver):
    h = make_driver([tool_call("Grep", filePath="README.md", regex="[/\\\\]"), "no slashes"])
    outcome = h.driver.handle_user_request("find slashes")

    assert outcome.tool_calls == 1
    assert h.gate.requests == [("Grep", {"filePath": "README.md", "regex": "[/\\\\]"})]
    responses = tool_responses(h.session.messages[-2])
    assert responses[0]["status"] == "success"
    assert "> Grep" in h.output.getvalue()
    assert "[/" in h.output.getvalue()


def test_bracketed_plan_step_is_displayed_literally(make_driver):
    h = make_driver(['<plan>["fix [/x] handling"]</plan>Plan ready.', f"Fixed. {TOKEN}"])
    outcome = h.driver.handle_user_request("fix it")

    assert outcome.steps_completed == 1
    assert "Plan step 1/1: fix [/x] handling" in h.output.getvalue()


def test_bracketed_model_error_is_displayed_literally(make_driver):
    h = make_driver([AssistantMessage(error="HTTP 400: [/bad] request", code="api_error")])
    outcome = h.driver.handle_user_request("hi")

    assert outcome.error == "HTTP 400: [/bad] request"
    assert "Error: HTTP 400: [/bad] request" in h.output.getvalue()
