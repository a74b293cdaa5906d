import json

from autocli.core.commands import DEFAULT_COMMANDS, CommandKind, CommandProcessor


def test_plain_input_is_not_a_command():
    result = CommandProcessor().process_input("hello /there")
    assert result.kind == CommandKind.NO_COMMAND
    assert result.content == "hello /there"


def test_help_is_client_handled():
    processor = CommandProcessor()
    result = processor.process_input("/help")
    assert result.kind == CommandKind.CLIENT_HANDLED
    assert ("help", DEFAULT_COMMANDS["help"]["description"]) in processor.help_rows()


def test_template_substitutes_trimmed_arguments():
    processor = CommandProcessor(
        {"fix": {"prompt_template": "Please fix: ARGS now", "arg_placeholder": "ARGS"}}
    )
    result = processor.process_input("/fix   the login bug  ")
    assert result.kind == CommandKind.LLM_PROMPT
    assert result.content == "Please fix: the login bug now"
    assert result.command_name == "fix"


def test_template_without_arguments_is_sent_as_is():
    processor = CommandProcessor({"fix": {"prompt_template": "Fix ARGS", "arg_placeholder": "ARGS"}})
    assert processor.process_input("/fix").content == "Fix ARGS"


def test_unknown_command_forwards_original_input():
    result = CommandProcessor().process_input("/frobnicate now")
    assert result.kind == CommandKind.UNKNOWN_COMMAND
    assert result.content == "/frobnicate now"
    assert result.command_name == "frobnicate"


def test_command_without_template_is_unknown():
    processor = CommandProcessor({"odd": {"description": "nothing"}})
    assert processor.process_input("/odd").kind == CommandKind.UNKNOWN_COMMAND


def test_from_file_replaces_defaults(tmp_path):
    path = tmp_path / "commands.json"
    path.write_text(json.dumps({"deploy": {"prompt_template": "Deploy the app"}}))
    processor = CommandProcessor.from_file(path)
    assert list(processor.commands) == ["deploy"]
    assert processor.process_input("/deploy").content == "Deploy the app"


def test_from_file_falls_back_on_bad_file(tmp_path):
    path = tmp_path / "commands.json"
    path.write_text("[not json")
    assert "help" in CommandProcessor.from_file(path).commands
    assert "help" in CommandProcessor.from_file(tmp_path / "missing.json").commands
