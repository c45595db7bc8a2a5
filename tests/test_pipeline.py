from decipher_engine.samples import available_samples, load_sample
from decipher_engine.transformers.pipeline import SIZE_GROWTH_BOUND, AutoDeobfuscateTransformer
from decipher_engine.utils.helpers import max_nesting_level


def test_sample_is_bundled():
    assert "obfuscated" in available_samples()


def test_auto_deobfuscate_sample():
    code = load_sample()
    result = AutoDeobfuscateTransformer().transform(code)
    transformations = result.stats["transformations"]

    # if (false), while (false) and the unused o and p
    assert transformations["dead_code_removed"] == 4
    # nested if in h, while (true) in q, switch in l
    assert transformations["control_flow_flattened"] == 3
    assert transformations["variables_renamed"] > 0

    assert result.stats["original_size"] == len(code)
    assert result.stats["final_size"] == len(result.code)
    assert result.stats["final_size"] <= SIZE_GROWTH_BOUND * result.stats["original_size"]
    total = sum(transformations.values())
    assert result.stats["readability_improvement"] == min(100, 10 * total)

    assert "while (true)" not in result.code
    assert "switch(" not in result.code
    assert max_nesting_level(result.code) < max_nesting_level(code)


def test_auto_deobfuscate_respects_max_depth():
    result = AutoDeobfuscateTransformer().transform(load_sample(), {"max_depth": 3})
    assert result.stats["transformations"]["control_flow_flattened"] == 2


def test_auto_deobfuscate_empty_input():
    result = AutoDeobfuscateTransformer().transform("")
    assert result.code == ""
    assert result.stats["readability_improvement"] == 0
    assert result.stats["original_size"] == 0
