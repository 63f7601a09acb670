"""Tests for ctxmap.services.turn_extractor."""

from ctxmap.services.jsonl_parser import parse_raw_entry, parse_session_file
from ctxmap.services.turn_extractor import (
    extract_turns,
    extract_user_text,
    find_tool_result,
    find_user_prompt,
)


def _user(content, sidechain=False):
    return parse_raw_entry({
        "type": "user",
        "isSidechain": sidechain,
        "message": {"role": "user", "content": content},
    })


def _assistant(usage=None, tool_uses=(), sidechain=False, timestamp=""):
    content = [
        {"type": "tool_use", "id": tid, "name": name, "input": inp}
        for tid, name, inp in tool_uses
    ]
    message = {"role": "assistant", "content": content}
    if usage is not None:
        message["usage"] = usage
    return parse_raw_entry({
        "type": "assistant",
        "isSidechain": sidechain,
        "timestamp": timestamp,
        "message": message,
    })


def _result(tool_use_id, content):
    return _user([{"type": "tool_result", "tool_use_id": tool_use_id, "content": content}])


# ---------------------------------------------------------------------------
# 1. Token deltas
# ---------------------------------------------------------------------------

def test_simple_session_deltas(simple_session_path):
    """1600 context then 1800 context: deltas of 1600 and 200."""
    turns = extract_turns(parse_session_file(simple_session_path))

    assert len(turns) == 2
    assert [t.context_tokens for t in turns] == [1600, 1800]
    assert [t.token_delta for t in turns] == [1600, 200]
    assert [t.output_tokens for t in turns] == [50, 80]
    assert turns[0].tool_call is None
    assert turns[0].timestamp == "2026-02-13T12:00:05.000Z"


def test_first_turn_delta_equals_context():
    turns = extract_turns([_assistant({"input_tokens": 1234, "output_tokens": 1})])
    assert turns[0].token_delta == turns[0].context_tokens == 1234


def test_negative_delta():
    turns = extract_turns([
        _assistant({"input_tokens": 50000, "output_tokens": 1}),
        _assistant({"input_tokens": 20000, "output_tokens": 1}),
    ])
    assert turns[1].token_delta == -30000


def test_deltas_telescope_to_last_context(tools_session_path):
    turns = extract_turns(parse_session_file(tools_session_path))
    assert sum(t.token_delta for t in turns) == turns[-1].context_tokens


# ---------------------------------------------------------------------------
# 2. Skipped entries and dense indices
# ---------------------------------------------------------------------------

def test_sidechain_and_usageless_entries_skipped():
    entries = [
        _user("go"),
        _assistant({"input_tokens": 100, "output_tokens": 1}),
        _assistant({"input_tokens": 99999, "output_tokens": 1}, sidechain=True),
        _assistant(None),
        _assistant({}),
        _assistant({"input_tokens": 300, "output_tokens": 1}),
    ]
    turns = extract_turns(entries)

    assert [t.turn_index for t in turns] == [0, 1]
    assert [t.context_tokens for t in turns] == [100, 300]
    assert turns[1].token_delta == 200


def test_tools_session_turns(tools_session_path):
    turns = extract_turns(parse_session_file(tools_session_path))

    assert [t.turn_index for t in turns] == list(range(6))
    assert [t.context_tokens for t in turns] == [5000, 8000, 8500, 9000, 9300, 9500]
    assert [t.token_delta for t in turns] == [5000, 3000, 500, 500, 300, 200]
    assert [t.tool_call.tool_name if t.tool_call else None for t in turns] == [
        "Read", "Edit", "Bash", None, "Grep", None,
    ]


def test_no_entries():
    assert extract_turns([]) == []


# ---------------------------------------------------------------------------
# 3. Tool results
# ---------------------------------------------------------------------------

def test_result_size_is_utf8_bytes(tools_session_path):
    turns = extract_turns(parse_session_file(tools_session_path))
    assert [t.result_size for t in turns] == [22, 26, 16, None, 21, None]
    assert turns[0].tool_call.result == "def parse():\n    pass\n"


def test_result_size_counts_multibyte():
    entries = [
        _assistant({"input_tokens": 10, "output_tokens": 1}, tool_uses=[("t1", "Read", {"file_path": "/a"})]),
        _result("t1", "héllo"),
    ]
    turns = extract_turns(entries)
    assert turns[0].result_size == 6


def test_missing_result_leaves_size_unset():
    entries = [_assistant({"input_tokens": 10, "output_tokens": 1}, tool_uses=[("t1", "Bash", {"command": "ls"})])]
    turns = extract_turns(entries)
    assert turns[0].tool_call.tool_name == "Bash"
    assert turns[0].tool_call.result is None
    assert turns[0].result_size is None


def test_empty_result_is_attached():
    entries = [
        _assistant({"input_tokens": 10, "output_tokens": 1}, tool_uses=[("t1", "Bash", {"command": "true"})]),
        _result("t1", ""),
    ]
    turns = extract_turns(entries)
    assert turns[0].tool_call.result == ""
    assert turns[0].result_size == 0


def test_only_first_tool_use_is_recorded():
    entries = [
        _assistant(
            {"input_tokens": 10, "output_tokens": 1},
            tool_uses=[("t1", "Read", {"file_path": "/a"}), ("t2", "Read", {"file_path": "/b"})],
        ),
    ]
    turns = extract_turns(entries)
    assert turns[0].tool_call.tool_id == "t1"
    assert turns[0].tool_call.input == {"file_path": "/a"}
    assert turns[0].tool_call.is_error is False


class TestFindToolResult:
    def test_finds_first_match_after_start(self):
        entries = [_result("t1", "early"), _user("text"), _result("t1", "late")]
        assert find_tool_result(entries, "t1", 1).content == "late"

    def test_ignores_string_content(self):
        entries = [_user("t1")]
        assert find_tool_result(entries, "t1", 0) is None

    def test_ignores_other_ids(self):
        entries = [_result("t2", "other")]
        assert find_tool_result(entries, "t1", 0) is None


# ---------------------------------------------------------------------------
# 4. User prompts
# ---------------------------------------------------------------------------

def test_prompts_in_tools_session(tools_session_path):
    turns = extract_turns(parse_session_file(tools_session_path))
    assert [t.user_prompt for t in turns] == [
        "Fix the bug in parser", None, None, None, "Now search for TODOs", None,
    ]


def test_prompts_skip_commands_and_interrupts(compaction_session_path):
    turns = extract_turns(parse_session_file(compaction_session_path))
    assert [t.user_prompt for t in turns] == [
        "Start the refactor", "Continue", "Pick up where we left off", None,
    ]


def test_prompt_skips_sidechain_entries():
    entries = [
        _user("real prompt"),
        _user("subagent prompt", sidechain=True),
        _assistant({"input_tokens": 1, "output_tokens": 1}, sidechain=True),
        _assistant({"input_tokens": 10, "output_tokens": 1}),
    ]
    assert find_user_prompt(entries, 3) == "real prompt"


def test_prompt_stops_at_previous_assistant():
    entries = [
        _user("old prompt"),
        _assistant({"input_tokens": 10, "output_tokens": 1}),
        _result("t1", "data"),
        _assistant({"input_tokens": 20, "output_tokens": 1}),
    ]
    assert find_user_prompt(entries, 3) is None


class TestExtractUserText:
    def test_plain_string(self):
        assert extract_user_text(_user("hello")) == "hello"

    def test_text_block(self):
        assert extract_user_text(_user([{"type": "text", "text": "hi there"}])) == "hi there"

    def test_local_command(self):
        assert extract_user_text(_user("<local-command-stdout>ok</local-command-stdout>")) is None

    def test_command_name(self):
        assert extract_user_text(_user("<command-name>/clear</command-name>")) is None

    def test_interrupt_in_string(self):
        assert extract_user_text(_user("[Request interrupted by user]")) is None

    def test_interrupt_in_block(self):
        block = [{"type": "text", "text": "[Request interrupted by user]"}]
        assert extract_user_text(_user(block)) is None

    def test_tool_result_only(self):
        assert extract_user_text(_result("t1", "data")) is None

    def test_assistant_entry(self):
        assert extract_user_text(_assistant({"input_tokens": 1})) is None
