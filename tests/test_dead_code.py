import re

from decipher_engine.transformers.dead_code import RemoveDeadCodeTransformer


def remove(code, **options):
    return RemoveDeadCodeTransformer().transform(code, options or None)


def test_constant_false_if_is_removed():
    result = remove("if(false){console.log(1);}")

    assert result.code == "// Dead code removed: constant-false if block\n"
    assert result.stats["unreachable_if"] == 1
    assert result.stats["total_removed"] == 1


def test_constant_zero_if_with_else_is_kept():
    code = "if (0) { a(); } else { b(); }"
    result = remove(code)
    assert result.code == code
    assert result.stats["unreachable_if"] == 0


def test_unreachable_loops():
    result = remove("while (false) { x(); }\nfor (;false;) { y(); }\nz();")
    assert result.stats["unreachable_loops"] == 2
    assert "x();" not in result.code
    assert "y();" not in result.code
    assert "z();" in result.code


def test_nested_block_in_dead_branch():
    result = remove("if (false) {\n  if (a) { b(); }\n}\nc();")
    assert result.stats["unreachable_if"] == 1
    assert "b();" not in result.code


def test_unused_variable_is_removed():
    result = remove("var used = 1;\nvar unused = 2;\nconsole.log(used);")

    assert result.stats["unused_variables"] == 1
    assert "var unused" not in result.code
    assert "// Removed unused variable: unused" in result.code
    assert "var used = 1;" in result.code


def test_conventional_names_are_never_unused():
    code = "var data = 1;\nvar i = 0;"
    result = remove(code)
    assert result.stats["unused_variables"] == 0
    assert result.code == code


def test_empty_blocks_are_normalized():
    result = remove("function f() {   }\nf();")
    assert result.stats["empty_blocks"] == 1
    assert "function f() {}" in result.code


def test_empty_blocks_option_off():
    code = "function f() {   }\nf();"
    result = remove(code, remove_empty_blocks=False)
    assert result.stats["empty_blocks"] == 0
    assert result.code == code


def test_already_empty_block_is_not_counted():
    assert remove("function f() {}\nf();").stats["total_removed"] == 0


def test_rule_is_idempotent():
    once = remove("if (false) { a(); }\nvar x = 1;\nb();").code
    twice = remove(once)
    assert twice.stats["total_removed"] == 0
    assert twice.code == once


def test_branch_chained_after_else_is_kept():
    code = "if (a) {\n  x();\n} else if (false) {\n  y();\n}\nz();"
    result = remove(code)

    assert result.stats["unreachable_if"] == 0
    assert result.code == code


def test_standalone_branch_removed_next_to_else_chain():
    result = remove("if (false) { a(); }\nif (b) { c(); } else if (0) { d(); }\nz();")

    assert result.stats["unreachable_if"] == 1
    assert "a();" not in result.code
    assert re.search(r"else\s*if\s*\(\s*0\s*\)", result.code)
    assert "d();" in result.code
    assert "z();" in result.code


def test_declarations_in_line_comments_are_ignored():
    code = "var t = 1; // var t2 = 3;\nconsole.log(t);"
    result = remove(code)

    assert result.stats["unused_variables"] == 0
    assert result.code == code
