from decipher_engine.transformers.control_flow import FlattenControlFlowTransformer, negate_condition
from decipher_engine.utils.helpers import max_nesting_level

NESTED = """if (a) {
  if (b) {
    if (c) {
      x();
    } else {
      y();
    }
  } else {
    z();
  }
}"""

SWITCH = """switch (map[key]) {
  case 1:
    r = "one";
    break;
  case 2:
  case 3:
    r = "few";
    break;
  default:
    r = "many";
}"""


def flatten(code, **options):
    return FlattenControlFlowTransformer().transform(code, options or None)


def test_nested_if_is_flattened():
    result = flatten(NESTED)

    assert result.stats["nested_ifs"] == 1
    assert "// Flattened nested if statements" in result.code
    assert "if (a && b && c) {" in result.code
    assert "else if (a && b) {" in result.code
    assert "else if (a) {" in result.code
    assert max_nesting_level(result.code) <= max_nesting_level(NESTED) - 1


def test_nested_if_conditions_with_or_are_grouped():
    code = NESTED.replace("if (b)", "if (b || d)")
    assert "if (a && (b || d) && c) {" in flatten(code).code


def test_max_depth_three_skips_nested_if():
    result = flatten(NESTED, max_depth=3)
    assert result.stats["nested_ifs"] == 0
    assert result.code == NESTED


def test_while_true_with_single_break():
    code = "while (true) {\n  x++;\n  if (x > 10) {\n    break;\n  }\n}"
    result = flatten(code)

    assert result.stats["while_true"] == 1
    assert "while (!(x > 10))" in result.code
    assert "break" not in result.code


def test_while_true_with_two_breaks_is_left_alone():
    code = "while (true) {\n  if (a) { break; }\n  if (b) { break; }\n}"
    result = flatten(code)
    assert result.stats["while_true"] == 0
    assert result.code == code


def test_mapping_switch_becomes_if_chain():
    result = flatten(SWITCH)

    assert result.stats["switch_mappings"] == 1
    assert "switch (" not in result.code
    assert "if (map[key] === 1) {" in result.code
    assert "else if (map[key] === 2 || map[key] === 3) {" in result.code
    assert "else {" in result.code
    assert 'r = "many";' in result.code


def test_switch_with_inner_break_is_left_alone():
    code = "switch (m[k]) {\n  case 1:\n    if (x) { break; }\n    y();\n    break;\n}"
    result = flatten(code)
    assert result.stats["total_transformations"] == 0
    assert result.code == code


def test_switch_with_fallthrough_is_left_alone():
    code = "switch (m[k]) {\n  case 1:\n    y();\n  case 2:\n    z();\n    break;\n}"
    assert flatten(code).stats["switch_mappings"] == 0


def test_no_patterns_is_a_no_op():
    code = "var total = 1;"
    result = flatten(code)
    assert result.code == code
    assert result.stats == {"nested_ifs": 0, "while_true": 0, "switch_mappings": 0, "total_transformations": 0}


def test_negate_condition():
    assert negate_condition("x > 1") == "!(x > 1)"
    assert negate_condition("!done") == "done"
    assert negate_condition("!(a && b)") == "a && b"
    assert negate_condition("!a && b") == "!(!a && b)"
    assert negate_condition("!(a) && (b)") == "!(!(a) && (b))"
