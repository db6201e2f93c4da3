import json

import main
import orchestration.cli_runner as cli_runner
import orchestration.prompt_task as prompt_task_module
import pytest
from core.backend_resolver import BackendResolver
from core.backends import LLMBackend
from core.models import ModelFamily
from core.options import ExecutionOptions
from core.usage import TokenUsage
from orchestration.cli_runner import (
    format_result,
    load_inputs,
    parse_bindings,
    run_batch,
)
from orchestration.prompt_task import VersioningOptions, create_prompt_task


def test_parse_bindings_nests_dotted_keys():
    assert parse_bindings(["name=Ana", "user.city=Porto", "user.zip=4000", "eq=a=b"]) == {
        "name": "Ana",
        "user": {"city": "Porto", "zip": "4000"},
        "eq": "a=b",
    }


def test_parse_bindings_rejects_malformed_pairs():
    with pytest.raises(ValueError):
        parse_bindings(["novalue"])


def test_load_inputs_reads_jsonl(tmp_path):
    path = tmp_path / "inputs.jsonl"
    path.write_text('{"n": 1}\n\n{"n": 2}\n', encoding="utf-8")
    assert load_inputs(str(path)) == [{"n": 1}, {"n": 2}]


def test_load_inputs_rejects_non_objects(tmp_path):
    path = tmp_path / "inputs.jsonl"
    path.write_text("[1, 2]\n", encoding="utf-8")
    with pytest.raises(ValueError, match="expected a JSON object"):
        load_inputs(str(path))


def test_format_result():
    assert format_result("text") == "text"
    assert json.loads(format_result({"a": [1, 2]})) == {"a": [1, 2]}


@pytest.mark.asyncio
async def test_run_batch_merges_bindings_and_keeps_order(monkeypatch):
    class EchoBackend:
        async def dispatch(self, prompt, options):
            if "fail" in prompt:
                raise RuntimeError("backend down")
            return prompt

    async def fake_resolve(model_name):
        return EchoBackend()

    monkeypatch.setattr(prompt_task_module, "resolve_backend", fake_resolve)
    task = create_prompt_task(
        "{{greeting}} {{name}}", ExecutionOptions(model="gpt-3.5-turbo-0125")
    )

    results = await run_batch(
        task,
        [{"name": "a"}, {"name": "fail"}, {"name": "c", "greeting": "bye"}],
        {"greeting": "hi"},
        concurrency=2,
    )

    assert results == ["hi a", None, "bye c"]


def test_main_reports_configuration_errors(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main.main(
            ["--template", "x", "--model", "gpt-3.5-turbo-0125", "--temperature", "3"]
        )
    assert exc_info.value.code == 1
    assert "temperature" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_run_logs_token_usage_and_closes_handles(monkeypatch, capsys):
    class CountingBackend(LLMBackend):
        family = ModelFamily.OPENAI

        async def chat_completion(self, messages, options):
            self._record_usage(
                options.model,
                TokenUsage(prompt_tokens=4, completion_tokens=2, total_tokens=6),
            )
            return messages[0]["content"]

    class RecordingLogger:
        def __init__(self):
            self.events = []

        def info(self, event, **kw):
            self.events.append((event, kw))

    resolver = BackendResolver({ModelFamily.OPENAI: CountingBackend})
    recorder = RecordingLogger()
    monkeypatch.setattr(cli_runner, "backend_resolver", resolver)
    monkeypatch.setattr(cli_runner, "logger", recorder)
    monkeypatch.setattr(prompt_task_module, "resolve_backend", resolver.resolve)

    await cli_runner._run(
        "say {{word}}",
        ExecutionOptions(model="gpt-3.5-turbo-0125"),
        {"word": "hi"},
        None,
        1,
        VersioningOptions(),
    )

    assert capsys.readouterr().out.strip() == "say hi"
    assert recorder.events == [
        (
            "Token usage for run",
            {
                "family": "openai",
                "calls": 1,
                "prompt_tokens": 4,
                "completion_tokens": 2,
                "total_tokens": 6,
            },
        )
    ]
    assert resolver.usage_by_family() == {}
