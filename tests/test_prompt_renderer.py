import prompt_renderer
import pytest
from core.errors import ConfigurationError
from prompt_renderer import PromptTemplate, create_prompt_template, render_template
from pydantic import BaseModel


def test_render_replaces_every_placeholder():
    template = create_prompt_template("Hello {{name}}, balance {{balance}}")
    result = render_template(template, {"name": "Alice", "balance": "1000"})
    assert result == "Hello Alice, balance 1000"


def test_missing_binding_renders_empty_string():
    template = create_prompt_template("Hi {{name}}! Code: {{code}}.")
    assert template.render({"name": "Bob"}) == "Hi Bob! Code: ."


def test_values_are_stringified():
    template = create_prompt_template("{{count}} items at {{price}}")
    assert template.render({"count": 3, "price": 2.5}) == "3 items at 2.5"


def test_dotted_names_walk_nested_mappings():
    template = create_prompt_template("{{user.address.city}} / {{user.name}}")
    bindings = {"user": {"name": "Ana", "address": {"city": "Lisbon"}}}
    assert template.render(bindings) == "Lisbon / Ana"


def test_dotted_names_short_circuit_on_missing_step():
    template = create_prompt_template("[{{user.address.city}}][{{ghost.a.b}}]")
    assert template.render({"user": {"name": "Ana"}}) == "[][]"


def test_dotted_lookup_prefers_mapping_keys_over_methods():
    template = create_prompt_template("{{data.items}}")
    assert template.render({"data": {"items": "three"}}) == "three"


def test_placeholders_are_distinct_in_first_occurrence_order():
    template = create_prompt_template("{{b}} {{ a.x }} {{b}} {{c}} {{a.x}}")
    assert template.placeholders == ("b", "a.x", "c")


def test_constant_template_is_valid():
    template = create_prompt_template("No placeholders here.\n")
    assert template.placeholders == ()
    assert template.render({"unused": 1}) == "No placeholders here.\n"


def test_rendering_is_deterministic():
    template = create_prompt_template("{{a}}-{{b}}-{{c}}")
    bindings = {"a": 1, "c": "z"}
    assert template.render(bindings) == template.render(bindings) == "1--z"


def test_json_braces_in_text_are_left_alone():
    template = create_prompt_template('Reply as {"answer": "{{q}}"}')
    assert template.render({"q": "yes"}) == 'Reply as {"answer": "yes"}'


def test_invalid_template_is_configuration_error():
    with pytest.raises(ConfigurationError):
        PromptTemplate("{{ unclosed ")


class Person(BaseModel):
    name: str
    nickname: str | None = None


def test_render_with_pydantic_object():
    result = prompt_renderer.render_prompt(
        "Hello {{ person.name }}", {"person": Person(name="Alice")}
    )
    assert result == "Hello Alice"


def test_tojson_with_pydantic_object():
    result = prompt_renderer.render_prompt(
        "{{ person | tojson }}", {"person": Person(name="Alice")}
    )
    assert result == '{"name": "Alice"}'


def test_template_is_immutable():
    template = create_prompt_template("{{x}}")
    with pytest.raises(AttributeError):
        template.text = "changed"  # type: ignore[misc]


def test_block_and_comment_markers_render_literally():
    template = create_prompt_template(
        "Report the {# of items} in {{list}}. Give {%} share; end #} %}"
    )
    assert template.placeholders == ("list",)
    assert (
        template.render({"list": "stock"})
        == "Report the {# of items} in stock. Give {%} share; end #} %}"
    )


def test_jinja_statement_syntax_is_plain_text():
    text = "{% if x %}yes{% endif %} {{x}}"
    assert render_template(create_prompt_template(text), {"x": "1"}) == (
        "{% if x %}yes{% endif %} 1"
    )


def test_dotted_step_into_non_mapping_renders_empty():
    template = create_prompt_template("[{{a.upper}}][{{n.real}}][{{person.dict}}]")
    bindings = {"a": "x", "n": 3, "person": Person(name="Alice")}
    assert template.render(bindings) == "[][][]"
