from autocli.tools.protocol import (
    INVALID_TOOL_CALL,
    extract_plan,
    format_tool_responses,
    iter_tool_calls,
    parse_reply,
    strip_thinking,
)


def test_text_without_tags_is_returned_trimmed():
    reply = parse_reply("  just talking \n")
    assert reply.calls == []
    assert reply.plan is None
    assert reply.text == "just talking"


def test_single_read_call_and_residual_text():
    reply = parse_reply('<tool_call>{"name":"Read","parameters":{"filePath":"a.txt"}}</tool_call>Hello')
    assert len(reply.calls) == 1
    call = reply.calls[0]
    assert call.is_valid
    assert call.name == "Read"
    assert call.parameters == {"filePath": "a.txt"}
    assert reply.text == "Hello"


def test_multiple_calls_keep_order():
    text = (
        "Let me look.\n"
        '<tool_call>{"name": "LS", "parameters": {}}</tool_call>\n'
        '<tool_call>\n{"name": "Read", "parameters": {"filePath": "b"}}\n</tool_call>'
    )
    reply = parse_reply(text)
    assert [c.name for c in reply.calls] == ["LS", "Read"]
    assert reply.text == "Let me look."


def test_invalid_json_yields_error_call_with_raw_content():
    reply = parse_reply("<tool_call>{not json}</tool_call>after")
    assert len(reply.calls) == 1
    call = reply.calls[0]
    assert not call.is_valid
    assert call.name == INVALID_TOOL_CALL
    assert call.raw == "{not json}"
    assert call.parameters == {"raw": "{not json}"}
    assert "Invalid JSON" in call.error
    assert reply.text == "after"


def test_missing_fields_yield_error_call():
    calls = list(iter_tool_calls('<tool_call>{"name": "Read"}</tool_call><tool_call>{"parameters": {}}</tool_call>'))
    assert len(calls) == 2
    assert all(not c.is_valid for c in calls)
    assert all("missing name or parameters" in c.error for c in calls)


def test_non_object_parameters_are_rejected():
    (call,) = iter_tool_calls('<tool_call>{"name": "Read", "parameters": [1]}</tool_call>')
    assert not call.is_valid


def test_scanner_is_restartable():
    text = '<tool_call>{"name": "LS", "parameters": {}}</tool_call>'
    first = [c.name for c in iter_tool_calls(text)]
    second = [c.name for c in iter_tool_calls(text)]
    assert first == second == ["LS"]


def test_plan_is_extracted_and_removed():
    reply = parse_reply('Plan:\n<plan>["step A", "step B"]</plan>\n<tool_call>{"name": "LS", "parameters": {}}</tool_call>')
    assert reply.plan == ["step A", "step B"]
    assert [c.name for c in reply.calls] == ["LS"]
    assert reply.text == "Plan:"


def test_invalid_plan_is_dropped_but_block_removed():
    plan, remaining = extract_plan('before <plan>{"a": 1}</plan> after')
    assert plan is None
    assert "<plan>" not in remaining
    plan, _ = extract_plan("<plan>not json</plan>")
    assert plan is None


def test_only_first_plan_is_used():
    plan, remaining = extract_plan('<plan>["one"]</plan><plan>["two"]</plan>rest')
    assert plan == ["one"]
    assert remaining == "rest"


def test_strip_thinking_removes_blocks_and_trailing_newline():
    text, thoughts = strip_thinking("<think>\nhmm\n</think>\nAnswer <think>more</think>done")
    assert text == "Answer done"
    assert thoughts == ["hmm", "more"]


def test_strip_thinking_without_blocks_is_identity():
    assert strip_thinking("plain") == ("plain", [])


def test_format_tool_responses_wraps_entries():
    payload = format_tool_responses([{"tool_name": "LS", "parameters": {}, "status": "success", "output": []}])
    assert payload == '{"tool_responses": [{"tool_name": "LS", "parameters": {}, "status": "success", "output": []}]}'
