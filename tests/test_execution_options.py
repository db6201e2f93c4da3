import pytest
from core.errors import ConfigurationError
from core.models import DEFAULT_MAX_TOKENS_LIMIT, ModelFamily, family_for_model
from core.options import ExecutionOptions, create_execution_options
from pydantic import ValidationError


def test_defaults():
    options = create_execution_options(model="gpt-4o-2024-08-06")
    assert options.stream is False
    assert options.raw_output is False
    assert options.snapshot() == {
        "model": "gpt-4o-2024-08-06",
        "stream": False,
        "raw_output": False,
    }


@pytest.mark.parametrize(
    "field,value",
    [
        ("temperature", -0.1),
        ("temperature", 1.5),
        ("top_p", 1.01),
        ("frequency_penalty", -2.5),
        ("presence_penalty", 2.1),
        ("top_logprobs", 21),
    ],
)
def test_out_of_range_values_raise_configuration_error(field, value):
    with pytest.raises(ConfigurationError):
        ExecutionOptions(model="gpt-4o-2024-08-06", **{field: value})


def test_boundaries_are_inclusive():
    options = ExecutionOptions(
        model="claude-3-haiku-20240307",
        max_tokens=9000,
        temperature=1,
        top_p=0,
        frequency_penalty=-2.0,
        presence_penalty=2.0,
        top_logprobs=20,
    )
    assert options.max_tokens == 9000


def test_max_tokens_limit_depends_on_model():
    ExecutionOptions(model="gpt-3.5-turbo-0125", max_tokens=4096)
    with pytest.raises(ConfigurationError, match="gpt-3.5-turbo-0125"):
        ExecutionOptions(model="gpt-3.5-turbo-0125", max_tokens=4097)
    with pytest.raises(ConfigurationError):
        ExecutionOptions(model="gpt-3.5-turbo-0125", max_tokens=0)


def test_max_tokens_without_model_uses_default_limit():
    ExecutionOptions(max_tokens=DEFAULT_MAX_TOKENS_LIMIT)
    with pytest.raises(ConfigurationError):
        ExecutionOptions(max_tokens=DEFAULT_MAX_TOKENS_LIMIT + 1)


def test_type_errors_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        ExecutionOptions(model="gpt-4o-2024-08-06", temperature="hot")
    with pytest.raises(ConfigurationError):
        ExecutionOptions(model="gpt-4o-2024-08-06", unknown_field=1)


def test_options_are_frozen():
    options = ExecutionOptions(model="gpt-4o-2024-08-06")
    with pytest.raises(ValidationError):
        options.temperature = 0.5  # type: ignore[misc]


def test_model_catalogue():
    assert family_for_model("gpt-4o-mini-2024-07-18") is ModelFamily.OPENAI
    assert family_for_model("claude-3-opus-20240229") is ModelFamily.ANTHROPIC
    assert family_for_model("gpt-neo-2.7B") is None
