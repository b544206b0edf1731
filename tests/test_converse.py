import builtins

from botocore.exceptions import ClientError

from bedrock_tools import bedrock_client, converse_main
from bedrock_tools.config import CLAUDE_SONNET_PROFILE_ID
from bedrock_tools.converse_main import ConversationState, handle_line, run_shell, say


class FakeClient:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def converse(self, **kwargs):
        # Snapshot: history is mutated after the call returns.
        self.calls.append({**kwargs, "messages": list(kwargs["messages"])})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return {"output": {"message": {"role": "assistant", "content": reply}}, "stopReason": "end_turn"}


def _state(client, **kwargs):
    return ConversationState(model="us.amazon.nova-lite-v1:0", client=client, **kwargs)


def test_say_appends_both_turns():
    client = FakeClient([[{"text": "Hi there"}]])
    state = _state(client, system_prompt=[{"text": "be kind"}])
    lines = []
    assert say(state, "hello", [], lines.append) is True
    assert lines == ["Hi there"]
    assert [m["role"] for m in state.messages] == ["user", "assistant"]
    call = client.calls[0]
    assert call["modelId"] == "us.amazon.nova-lite-v1:0"
    assert call["system"] == [{"text": "be kind"}]
    assert "inferenceConfig" not in call


def test_history_is_sent_each_turn():
    client = FakeClient([[{"text": "one"}], [{"text": "two"}]])
    state = _state(client)
    say(state, "first", [], lambda _: None)
    say(state, "second", [], lambda _: None)
    assert len(client.calls[1]["messages"]) == 3
    assert len(state.messages) == 4


def test_non_text_blocks_render_placeholders():
    client = FakeClient([[{"text": "calling"}, {"toolUse": {"toolUseId": "t1", "name": "x", "input": {}}}]])
    lines = []
    say(_state(client), "go", [], lines.append)
    assert lines == ["calling", "-- tool use --"]


def test_invalid_attachment_aborts_turn():
    client = FakeClient([])
    state = _state(client)
    lines = []
    assert say(state, "look", ["s3://bucket/cat.png"], lines.append) is False
    assert lines == ["Invalid attachment path, aborting turn. path: s3://bucket/cat.png"]
    assert state.messages == []
    assert client.calls == []


def test_failed_call_drops_user_turn():
    err = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "Converse")
    client = FakeClient([err])
    state = _state(client)
    lines = []
    assert say(state, "hello", [], lines.append) is False
    assert state.messages == []
    assert any("ThrottlingException" in line for line in lines)


def test_handle_line_commands(tmp_path):
    doc = tmp_path / "notes.txt"
    doc.write_text("hello", encoding="utf-8")
    client = FakeClient([[{"text": "summary"}]])
    state = _state(client)
    lines = []
    assert handle_line(state, f'say -a {doc} "summarize this"', lines.append) is True
    sent = client.calls[0]["messages"][0]["content"]
    assert sent[0] == {"text": "summarize this"}
    assert sent[1]["document"]["name"] == "notes"
    assert handle_line(state, "say", lines.append) is True
    assert lines[-1].startswith("say:")
    assert handle_line(state, "dance", lines.append) is True
    assert "unknown command" in lines[-1]
    assert handle_line(state, "quit", lines.append) is False


def test_run_shell_stops_on_eof():
    inputs = iter(["", "exit"])
    prompts = []

    def read(prompt):
        prompts.append(prompt)
        return next(inputs)

    run_shell(_state(FakeClient([])), read=read, out=lambda _: None)
    assert prompts == ["[us.amazon.nova-lite-v1:0]\n> "] * 2


def test_unreadable_attachment_keeps_shell_alive(tmp_path):
    client = FakeClient([[{"text": "hi"}]])
    state = _state(client)
    lines = []
    missing = tmp_path / "missing" / "cat.png"
    assert handle_line(state, f"say -a {missing} x", lines.append) is True
    assert lines[-1].startswith("\nerror:\n")
    assert state.messages == []
    assert client.calls == []

    assert handle_line(state, "say hello", lines.append) is True
    assert len(client.calls) == 1
    assert client.calls[0]["messages"] == [{"role": "user", "content": [{"text": "hello"}]}]
    assert lines[-1] == "hi"


def test_run_shell_reads_from_patched_input(monkeypatch):
    inputs = iter(["say hello", "quit"])
    monkeypatch.setattr(builtins, "input", lambda prompt: next(inputs))
    client = FakeClient([[{"text": "hey"}]])
    lines = []
    run_shell(_state(client), out=lines.append)
    assert lines == ["", "hey"]
    assert len(client.calls) == 1


def _start_shell(monkeypatch, argv):
    seen = {}

    def fake_run_shell(state, read=None, out=print):
        seen["state"] = state

    monkeypatch.setattr(bedrock_client, "get_runtime_client", lambda profile=None, region=None: FakeClient([]))
    monkeypatch.setattr(converse_main, "run_shell", fake_run_shell)
    assert converse_main.main(argv) == 0
    return seen["state"]


def test_main_uses_default_converse_model(monkeypatch):
    state = _start_shell(monkeypatch, [])
    assert state.model == CLAUDE_SONNET_PROFILE_ID
    assert state.system_prompt is None
    assert state.inference_config is None


def test_main_honours_converse_model_env(monkeypatch):
    monkeypatch.setenv("BEDROCK_CONVERSE_MODEL_ID", "lite")
    state = _start_shell(monkeypatch, ["-s", "be brief", "--max-tokens", "64"])
    assert state.model == "us.amazon.nova-lite-v1:0"
    assert state.system_prompt == [{"text": "be brief"}]
    assert state.inference_config == {"maxTokens": 64}
    assert _start_shell(monkeypatch, ["-m", "pro"]).model == "us.amazon.nova-pro-v1:0"
