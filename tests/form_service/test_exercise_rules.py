"""
Generic classifier tests: phase buckets, rep encodings, scoring and the
positive rep key, using small purpose-built rule tables.
"""

import pytest

from form_service.models import (
    ErrorTracker,
    ExerciseFamily,
    ExerciseRule,
    FormQuality,
    Phase,
    RepEncoding,
    compute_joint_angles,
)
from form_service.models.exercise_rules import (
    Band,
    ExerciseContext,
    PhaseRule,
    Violation,
    quality_for_score,
)


KNEE_PHASES = PhaseRule(signal=lambda c: c.avg_knee, down=Band("<", 100), up=Band(">", 160))


def _knee_rule(encoding, violations=()):
    return ExerciseRule(
        slug="drill",
        family=ExerciseFamily.CYCLIC,
        phase_rule=KNEE_PHASES,
        rep_encoding=encoding,
        violations=violations,
    )


def _run(rule, pose, knee_angles, start_ms=0, step_ms=100):
    """Feed squat frames through a rule; returns the per-frame results."""
    phase = rule.initial_phase
    tracker = ErrorTracker()
    results = []
    for i, knee in enumerate(knee_angles):
        frame = pose.squat(knee)
        result = rule.classify(compute_joint_angles(frame), frame, phase, tracker, start_ms + i * step_ms)
        phase = result.phase
        results.append(result)
    return results


# ═══════════════════════════════════════════════════════════════════════════════
# RULE TABLE TYPES
# ═══════════════════════════════════════════════════════════════════════════════

def test_band_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Band("==", 1.0)


@pytest.mark.parametrize("knee, expected", [
    (95.0, Phase.DOWN),
    (101.0, Phase.TRANSITION),
    (159.0, Phase.TRANSITION),
    (165.0, Phase.UP),
])
def test_phase_buckets(pose, knee, expected):
    frame = pose.squat(knee)
    ctx = ExerciseContext(compute_joint_angles(frame), frame)
    assert KNEE_PHASES.classify(ctx) == expected


def test_binary_phase_rule_has_no_transition(pose):
    rule = PhaseRule(signal=lambda c: c.avg_knee, down=Band("<", 100))
    frame = pose.squat(130.0)
    assert rule.classify(ExerciseContext(compute_joint_angles(frame), frame)) == Phase.UP


def test_cyclic_rule_needs_phase_rule():
    with pytest.raises(ValueError):
        ExerciseRule(slug="drill", family=ExerciseFamily.CYCLIC)


def test_feedback_keys_are_namespaced_by_slug():
    with pytest.raises(ValueError):
        ExerciseRule(
            slug="drill",
            family=ExerciseFamily.HOLD,
            violations=(Violation("other.key", 10, lambda c: True),),
        )


@pytest.mark.parametrize("score, expected", [
    (100, FormQuality.OPTIMAL),
    (80, FormQuality.OPTIMAL),
    (79, FormQuality.GOOD),
    (60, FormQuality.GOOD),
    (59, FormQuality.CORRECTIVE),
    (0, FormQuality.CORRECTIVE),
])
def test_quality_tiers(score, expected):
    assert quality_for_score(score) == expected


# ═══════════════════════════════════════════════════════════════════════════════
# REP ENCODINGS
# ═══════════════════════════════════════════════════════════════════════════════

def test_direct_counts_straight_down_to_up(pose):
    results = _run(_knee_rule(RepEncoding.DIRECT), pose, [165, 95, 95, 165])
    assert [r.rep_complete for r in results] == [False, False, False, True]


def test_direct_misses_rep_through_transition(pose):
    results = _run(_knee_rule(RepEncoding.DIRECT), pose, [95, 95, 130, 165])
    assert not any(r.rep_complete for r in results)


def test_latched_counts_rep_through_transition(pose):
    results = _run(_knee_rule(RepEncoding.LATCHED), pose, [95, 95, 130, 165, 165])
    assert [r.rep_complete for r in results] == [False, False, False, True, False]


def test_transition_only_never_counts(pose):
    for encoding in RepEncoding:
        results = _run(_knee_rule(encoding), pose, [130, 165, 130, 120, 165])
        assert not any(r.rep_complete for r in results)


def test_one_rep_per_cycle(pose):
    results = _run(_knee_rule(RepEncoding.LATCHED), pose, [165, 95, 165, 165, 130, 165, 95, 130, 165])
    assert sum(r.rep_complete for r in results) == 2


# ═══════════════════════════════════════════════════════════════════════════════
# SCORING
# ═══════════════════════════════════════════════════════════════════════════════

def test_score_is_floored_at_zero(pose):
    violations = tuple(Violation(f"drill.fault_{i}", 40, lambda c: True) for i in range(4))
    result = _run(_knee_rule(RepEncoding.LATCHED, violations), pose, [165])[0]
    assert result.score == 0
    assert result.quality == FormQuality.CORRECTIVE


def test_penalty_is_immediate_and_feedback_debounced(pose):
    rule = _knee_rule(RepEncoding.LATCHED, (Violation("drill.fault", 15, lambda c: True),))
    results = _run(rule, pose, [165] * 5, step_ms=1000)
    assert all(r.score == 85 for r in results)
    assert [r.feedback for r in results] == [(), (), (), ("drill.fault",), ("drill.fault",)]


def test_depth_check_sees_current_phase(pose):
    rule = _knee_rule(RepEncoding.LATCHED, (Violation("drill.deeper", 10, lambda c: c.is_down),))
    results = _run(rule, pose, [165, 95])
    assert [r.score for r in results] == [100, 90]


@pytest.mark.parametrize("penalty, expected_key", [
    (0, "general.perfect_form"),
    (20, "general.perfect_form"),
    (25, "general.rep_complete"),
    (45, None),
])
def test_positive_key_on_rep(pose, penalty, expected_key):
    violations = (Violation("drill.fault", penalty, lambda c: True),) if penalty else ()
    results = _run(_knee_rule(RepEncoding.LATCHED, violations), pose, [95, 165])
    rep = results[-1]
    assert rep.rep_complete
    if expected_key is None:
        assert rep.feedback == ()
    else:
        assert rep.feedback[0] == expected_key
    assert "general.perfect_form" not in results[0].feedback


def test_positive_key_goes_ahead_of_violation_keys(pose):
    rule = _knee_rule(RepEncoding.LATCHED, (Violation("drill.fault", 5, lambda c: True),))
    results = _run(rule, pose, [165, 165, 95, 95, 165], step_ms=1000)
    assert results[-1].rep_complete
    assert results[-1].feedback == ("general.perfect_form", "drill.fault")


# ═══════════════════════════════════════════════════════════════════════════════
# HOLD AND POSITION FAMILIES
# ═══════════════════════════════════════════════════════════════════════════════

def test_hold_family_fails_below_forty(pose):
    rule = ExerciseRule(
        slug="hold",
        family=ExerciseFamily.HOLD,
        violations=(Violation("hold.sag", 61, lambda c: c.avg_knee < 150),),
    )
    tracker = ErrorTracker()
    bent, straight = pose.squat(120), pose.standing()

    failed = rule.classify(compute_joint_angles(bent), bent, Phase.HOLDING, tracker, 0)
    assert failed.phase == Phase.FAILED
    assert failed.score == 39

    recovered = rule.classify(compute_joint_angles(straight), straight, failed.phase, tracker, 100)
    assert recovered.phase == Phase.HOLDING
    assert not recovered.rep_complete


def test_position_family_is_always_active(pose):
    rule = ExerciseRule(slug="still", family=ExerciseFamily.POSITION)
    assert rule.initial_phase == Phase.ACTIVE
    frame = pose.squat(90)
    result = rule.classify(compute_joint_angles(frame), frame, Phase.ACTIVE, ErrorTracker(), 0)
    assert result.phase == Phase.ACTIVE
    assert not result.rep_complete
    assert result.to_dict() == {
        "rep_complete": False,
        "score": 100,
        "quality": "optimal",
        "feedback": [],
        "phase": "active",
    }
