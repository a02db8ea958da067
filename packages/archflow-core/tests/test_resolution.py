from __future__ import annotations

from archflow.core.resolution import interpolate, to_json_text, to_text


def test_plain_text_is_returned_unchanged():
    assert interpolate("https://example.test/items", {"a": 1}) == "https://example.test/items"
    assert interpolate("", {"a": 1}) == ""
    assert interpolate(None, {"a": 1}) is None


def test_path_tokens_are_substituted():
    assert interpolate("{{$input.a}}-{{$input.b}}", {"a": 1, "b": "x"}) == "1-x"


def test_spaces_inside_braces_are_allowed():
    assert interpolate("id={{  $input.user.id  }}", {"user": {"id": 42}}) == "id=42"


def test_unresolvable_path_leaves_token_intact():
    assert interpolate("{{$input.b.c}}", {"a": 1}) == "{{$input.b.c}}"
    assert interpolate("x={{$input.a.b}}", {"a": 5}) == "x={{$input.a.b}}"


def test_whole_input_token_serializes_as_json():
    assert interpolate("{{$input}}", {"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'
    assert interpolate("{{$input}}", "hello") == "hello"


def test_container_values_are_json_text():
    assert interpolate("{{$input.user}}", {"user": {"id": 1}}) == '{"id":1}'
    assert interpolate("{{$input.tags}}", {"tags": ["a", "b"]}) == '["a","b"]'


def test_list_indexes_are_walkable():
    assert interpolate("{{$input.items.1.name}}", {"items": [{"name": "a"}, {"name": "b"}]}) == "b"
    assert interpolate("{{$input.items.5}}", {"items": [1]}) == "{{$input.items.5}}"


def test_scalar_rendering_is_json_flavoured():
    assert interpolate("{{$input.flag}}/{{$input.none}}", {"flag": True, "none": None}) == "true/null"
    assert to_text(2.0) == "2"
    assert to_text(2.5) == "2.5"
    assert to_text(False) == "false"
    assert to_json_text({"a": "é"}) == '{"a":"é"}'
