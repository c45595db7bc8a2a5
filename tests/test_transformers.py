from decipher_engine.samples import load_sample
from decipher_engine.transformers.base import (
    ES6ToES5Transformer,
    FormatTransformer,
    JSXToJSTransformer,
    MinifyTransformer,
    format_code,
)


def test_format_indents_by_brace_depth():
    result = FormatTransformer().transform("function f() {\nreturn 1;\n}")
    assert result.code == "function f() {\n  return 1;\n}"
    assert result.stats["lines"] == 3
    assert result.stats["lines_changed"] == 1


def test_format_else_line_keeps_current_indent():
    lines = format_code("if (a) {\nb();\n} else {\nc();\n}").split("\n")
    # "} else {" ends with "{", so it is indented before the closing brace is seen.
    assert lines[2] == "  } else {"
    assert lines[3] == "    c();"


def test_format_is_idempotent_on_sample():
    once = format_code(load_sample())
    assert format_code(once) == once


def test_format_empty_input():
    result = FormatTransformer().transform("")
    assert result.code == ""
    assert result.stats["lines"] == 0


def test_minify_strips_comments_and_whitespace():
    code = "// c\nvar a = 1;  /* x */ var b = 2;"
    result = MinifyTransformer().transform(code)
    assert result.code == "var a = 1;var b = 2;"
    assert result.stats["original_size"] == len(code)
    assert result.stats["minified_size"] == len(result.code)
    assert result.stats["reduction"] > 0


def test_minify_can_keep_comments():
    result = MinifyTransformer().transform("/* keep */ f ( x ) ;", {"remove_comments": False})
    assert "/* keep */" in result.code
    assert result.code.endswith("f(x);")


def test_es6_to_es5():
    code = "const add = (a, b) => {\n  return a + b;\n};\nlet x = `Hi ${name}!`;"
    result = ES6ToES5Transformer().transform(code)
    assert "function add(a, b) {" in result.code
    assert 'var x = "Hi " + name + "!";' in result.code
    assert result.stats["arrow_functions"] == 1
    assert result.stats["let_const"] == 1
    assert result.stats["template_literals"] == 1
    assert result.stats["total"] == 3


def test_es6_leaves_es5_alone():
    code = "var a = 1;"
    result = ES6ToES5Transformer().transform(code)
    assert result.code == code
    assert result.stats["total"] == 0


def test_jsx_to_js():
    transformer = JSXToJSTransformer()
    assert (
        transformer.transform('<div className="box">Hello</div>').code
        == 'React.createElement("div", {"className": "box"}, "Hello")'
    )
    result = transformer.transform("<span>Hi</span>")
    assert result.code == 'React.createElement("span", null, "Hi")'
    assert result.stats["elements_converted"] == 1


def test_descriptor_lists_options():
    descriptor = MinifyTransformer().descriptor
    assert descriptor.id == "minify"
    assert descriptor.defaults() == {"remove_comments": True}
    assert descriptor.to_dict()["options"]["remove_comments"]["type"] == "boolean"
