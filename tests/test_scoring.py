from decipher_engine.core.models import HistoryEntry
from decipher_engine.core.scoring import (
    ChallengeScorer,
    ReadabilityScorer,
    calculate_readability_score,
    get_challenge_score,
    readability_label,
)
from decipher_engine.samples import load_sample
from decipher_engine.transformers.pipeline import AutoDeobfuscateTransformer


def make_history(count, transformer_id="format"):
    return [
        HistoryEntry(transformer_id=transformer_id, options={}, original_code="", transformed_code="", score=0)
        for _ in range(count)
    ]


def test_readability_empty_input():
    assert calculate_readability_score("") == 0
    assert calculate_readability_score(None) == 0


def test_readability_is_clamped():
    assert calculate_readability_score("eval(a);" * 20) == 0
    assert calculate_readability_score("var userName = 1; var max_value = 2;") == 100


def test_readability_penalizes_single_letter_names():
    assert ReadabilityScorer.score("var a = 1;") == 95


def test_readability_labels():
    assert readability_label(85) == "Excellent"
    assert readability_label(60) == "Good"
    assert readability_label(45) == "Fair"
    assert readability_label(20) == "Poor"
    assert readability_label(0) == "Very Poor"


def test_challenge_empty_inputs_are_defined():
    result = get_challenge_score("", "")
    breakdown = result["breakdown"]

    assert breakdown.clarity_gain == 0
    assert breakdown.transform_accuracy == 25
    assert breakdown.obfuscation_reduction == 0
    assert breakdown.efficiency == 5
    assert breakdown.step_wise_optimization == 5
    assert result["score"] == 35


def test_challenge_total_invariant():
    code = load_sample()
    transformed = AutoDeobfuscateTransformer().transform(code).code
    for history in ([], make_history(3), make_history(12, "auto-deobfuscate")):
        for manual in (True, False):
            b = ChallengeScorer.score(code, transformed, history, manual)
            raw = (
                b.clarity_gain + b.transform_accuracy + b.obfuscation_reduction
                + b.efficiency + b.step_wise_optimization + b.bonus - b.penalty
            )
            assert b.total == max(0, min(100, raw))
            assert 0 <= b.clarity_gain <= 40
            assert 0 <= b.transform_accuracy <= 25
            assert 0 <= b.obfuscation_reduction <= 15
            assert 0 <= b.efficiency <= 10
            assert 0 <= b.step_wise_optimization <= 10


def test_step_wise_is_monotonic_in_history_length():
    scores = [ChallengeScorer.step_wise_optimization(make_history(n)) for n in range(1, 15)]
    assert scores == sorted(scores, reverse=True)
    assert ChallengeScorer.step_wise_optimization([]) == 5


def test_step_wise_penalizes_repeats():
    assert ChallengeScorer.step_wise_optimization(make_history(3)) == 10
    assert ChallengeScorer.step_wise_optimization(make_history(5)) == 8
    mixed = make_history(2, "format") + make_history(2, "minify") + make_history(1, "jsx-to-js")
    assert ChallengeScorer.step_wise_optimization(mixed) == 10


def test_step_wise_accepts_plain_dicts():
    history = [{"transformer_id": "format"}] * 6
    assert ChallengeScorer.step_wise_optimization(history) == 10 - 3 - 2


def test_removing_eval_reduces_obfuscation():
    assert ChallengeScorer.obfuscation_reduction("eval(x);", "x;", []) == 3


def test_added_escapes_do_not_cancel_other_gains():
    original = "eval(x);"
    transformed = "x; var s = '\\x41\\x42';"
    assert ChallengeScorer.obfuscation_reduction(original, transformed, []) == 3


def test_growing_escape_family_is_floored_at_zero():
    original = "eval(x); var s = '\\x41';"
    transformed = "x; var s = '\\x41\\x42\\x43';"
    assert ChallengeScorer.obfuscation_reduction(original, transformed, []) == 3


def test_retained_eval_after_many_steps_is_penalized():
    bonus, penalty = ChallengeScorer.bonus_penalty("eval(x)", make_history(6))
    assert (bonus, penalty) == (0, 10)


def test_assisted_history_earns_bonus():
    bonus, _ = ChallengeScorer.bonus_penalty("eval(x)", make_history(1, "auto-deobfuscate"))
    assert bonus == 5


def test_clean_result_bonus():
    bonus, penalty = ChallengeScorer.bonus_penalty("var userName = 1;", [])
    assert (bonus, penalty) == (10, 0)


def test_auto_mode_efficiency_uses_readability_delta():
    original = "var a = 1; var b = 2; var c = 3; var d = 4; var e = 5; var f = 6; var g = 7;"
    transformed = "var firstValue = 1;"
    assert ChallengeScorer.efficiency(original, transformed, [], is_manual_mode=False) == 10
    assert ChallengeScorer.efficiency(transformed, original, [], is_manual_mode=False) == 2
