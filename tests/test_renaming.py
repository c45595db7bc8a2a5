from decipher_engine.core.scoring import calculate_readability_score
from decipher_engine.transformers.renaming import RenameVariablesTransformer


def rename(code, **options):
    return RenameVariablesTransformer().transform(code, options or None)


def test_rename_end_to_end():
    code = 'var a=function(b){var c="Hello, "+b+"!";return c};var d=a("World");console.log(d);'
    result = rename(code)

    assert result.stats["rename_map"] == {"a": "callback", "b": "param", "c": "text", "d": "text2"}
    assert result.stats["variables_renamed"] == 4
    assert result.code == (
        'var callback=function(param){var text="Hello, "+param+"!";return text};'
        'var text2=callback("World");console.log(text2);'
    )
    assert calculate_readability_score(result.code) >= calculate_readability_score(code)


def test_loop_variable_does_not_touch_keywords():
    code = "for (var i = 0; i < 3; i++) { if (i > 1) { console.log(i); } }"
    result = rename(code)

    assert result.stats["rename_map"] == {"i": "index"}
    assert "if (index > 1)" in result.code
    assert "for (var index = 0; index < 3; index++)" in result.code


def test_other_loop_variables_get_index_suffix():
    result = rename("for (var j = 0; j < n; j++) {}")
    assert result.stats["rename_map"]["j"] == "jIndex"


def test_array_callback_parameters():
    assert rename("var t = items.reduce(function(a, x) { return a + x; }, 0);").stats["rename_map"]["a"] == "acc"
    assert rename("var r = list.map(v => v * 2);").stats["rename_map"]["v"] == "item"


def test_named_function_hints():
    assert rename("function getUser(u) { return u; }").stats["rename_map"]["u"] == "id"
    mapping = rename("function calcTotal(a, b) { return a * b; }").stats["rename_map"]
    assert mapping == {"a": "value", "b": "factor"}


def test_initializer_shapes():
    mapping = rename(
        "var d = new Date();\nvar el = document.getElementById('x');\nvar ok = true;"
    ).stats["rename_map"]
    assert mapping["d"] == "date"
    assert mapping["el"] == "element"
    assert mapping["ok"] == "isEnabled"


def test_generated_names_avoid_existing_identifiers():
    result = rename("var a = 1; var value = 2; console.log(a + value);")
    assert result.stats["rename_map"] == {"a": "value2"}
    assert "console.log(value2 + value)" in result.code


def test_fallbacks():
    mapping = rename("var q; var zz; use(q, zz);").stats["rename_map"]
    assert mapping == {"q": "queue", "zz": "zzValue"}


def test_long_names_are_untouched():
    code = "var total = 1;"
    result = rename(code)
    assert result.code == code
    assert result.stats == {"variables_renamed": 0, "total_replacements": 0, "rename_map": {}}


def test_anonymous_function_parameters_by_position():
    result = rename("var a = function(b, c) { return b + c; };")
    assert result.stats["rename_map"]["b"] == "param"
    assert result.stats["rename_map"]["c"] == "param2"
    assert "return param + param2;" in result.code
