"""
FORMCOACH Form Service - Exercise Catalog

Rule tables for every supported exercise. Thresholds are fixed constants
tuned offline; feedback keys are a stable wire contract and must never be
renamed.

Coordinates are normalized image coordinates: y grows toward the bottom of
the frame, so "higher on screen" means a smaller y.
"""

from enum import Enum
from typing import Dict

from .exercise_rules import (
    Band,
    ExerciseContext,
    ExerciseFamily,
    ExerciseRule,
    PhaseRule,
    RepEncoding,
    Violation,
)
from .landmarks import JointType as J


class ExerciseType(Enum):
    """Supported exercise types."""
    SQUAT = "squat"
    PUSHUP = "pushup"
    PLANK = "plank"
    LUNGE = "lunge"
    GLUTE_BRIDGE = "glute_bridge"
    SIDE_PLANK = "side_plank"
    SUPERMAN = "superman"
    MOUNTAIN_CLIMBER = "mountain_climber"
    BURPEE = "burpee"
    JUMP_SQUAT = "jump_squat"
    SUMO_SQUAT = "sumo_squat"
    DONKEY_KICK = "donkey_kick"
    FIRE_HYDRANT = "fire_hydrant"
    HIP_THRUST = "hip_thrust"
    WALL_SIT = "wall_sit"
    CRUNCH = "crunch"
    BICYCLE_CRUNCH = "bicycle_crunch"
    LEG_RAISE = "leg_raise"
    RUSSIAN_TWIST = "russian_twist"
    DEAD_BUG = "dead_bug"
    BIRD_DOG = "bird_dog"
    FLUTTER_KICK = "flutter_kick"
    PIKE_PUSHUP = "pike_pushup"
    DIAMOND_PUSHUP = "diamond_pushup"
    WIDE_PUSHUP = "wide_pushup"
    TRICEP_DIP = "tricep_dip"
    HIGH_KNEES = "high_knees"
    INCHWORM = "inchworm"


def _knee_past_toe(ctx: ExerciseContext, left: bool) -> float:
    knee = ctx.point(J.LEFT_KNEE if left else J.RIGHT_KNEE)
    toe = ctx.point(J.LEFT_FOOT_INDEX if left else J.RIGHT_FOOT_INDEX)
    return abs(knee.x - toe.x)


def _lunge_front_knee_past_toe(ctx: ExerciseContext) -> float:
    # The more bent knee is the front leg
    front_is_left = ctx.angles.left_knee < ctx.angles.right_knee
    return _knee_past_toe(ctx, left=front_is_left)


def _stance_ratio(ctx: ExerciseContext) -> float:
    """Ankle spread over hip spread; 0 when the hips are too close to measure."""
    if ctx.hip_spread <= 0.01:
        return 0.0
    return ctx.ankle_spread / ctx.hip_spread


def _hip_shoulder_x_gap(ctx: ExerciseContext) -> float:
    shoulder_x = (ctx.point(J.LEFT_SHOULDER).x + ctx.point(J.RIGHT_SHOULDER).x) / 2
    hip_x = (ctx.point(J.LEFT_HIP).x + ctx.point(J.RIGHT_HIP).x) / 2
    return abs(hip_x - shoulder_x)


def _knees_caving(ctx: ExerciseContext, threshold: float) -> bool:
    left_cave = ctx.point(J.LEFT_ANKLE).x - ctx.point(J.LEFT_KNEE).x > threshold
    right_cave = ctx.point(J.RIGHT_KNEE).x - ctx.point(J.RIGHT_ANKLE).x > threshold
    return left_cave or right_cave


# ═══════════════════════════════════════════════════════════════════════════════
# LEGS / GLUTES
# ═══════════════════════════════════════════════════════════════════════════════

SQUAT_KNEE_DOWN_MAX = 100
SQUAT_KNEE_UP_MIN = 160
SQUAT_KNEE_TOE_THR = 0.092
SQUAT_DEPTH_KNEE_THR = 127
SQUAT_BACK_TILT_DEG = 52

SQUAT = ExerciseRule(
    slug="squat",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_knee,
        down=Band("<", SQUAT_KNEE_DOWN_MAX),
        up=Band(">", SQUAT_KNEE_UP_MIN),
    ),
    violations=(
        Violation("squat.knees_over_toes", 18, lambda c: _knee_past_toe(c, left=True) > SQUAT_KNEE_TOE_THR),
        Violation("squat.go_deeper", 12, lambda c: c.is_down and c.avg_knee > SQUAT_DEPTH_KNEE_THR),
        Violation("squat.keep_back_straight", 18, lambda c: c.angles.spine < 180 - SQUAT_BACK_TILT_DEG),
    ),
    description="Bodyweight squat, tracked by average knee angle",
)

LUNGE = ExerciseRule(
    slug="lunge",
    family=ExerciseFamily.CYCLIC,
    rep_encoding=RepEncoding.DIRECT,
    phase_rule=PhaseRule(
        signal=lambda c: c.front_knee,
        down=Band("<", 105),
        up=Band(">", 160),
    ),
    violations=(
        Violation("lunge.knee_over_toe", 20, lambda c: _lunge_front_knee_past_toe(c) > 0.1),
        Violation("lunge.keep_torso_upright", 20, lambda c: c.angles.spine < 140),
        Violation("lunge.go_deeper", 15, lambda c: c.is_down and c.front_knee > 115),
    ),
    description="Forward lunge, tracked by the more bent (front) knee",
)

GLUTE_BRIDGE = ExerciseRule(
    slug="glute_bridge",
    family=ExerciseFamily.CYCLIC,
    rep_encoding=RepEncoding.DIRECT,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_hip,
        down=Band("<", 115),
        up=Band(">", 150),
    ),
    violations=(
        Violation("glute_bridge.low_hips", 18, lambda c: c.is_up and c.avg_hip < 120),
        Violation("glute_bridge.hip_asymmetry", 12, lambda c: c.hip_y_gap > 0.079),
        Violation("glute_bridge.feet_too_wide", 8, lambda c: _stance_ratio(c) > 1.85),
    ),
    description="Glute bridge, tracked by average hip angle",
)

JUMP_SQUAT = ExerciseRule(
    slug="jump_squat",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_knee,
        down=Band("<", 130),
        up=Band(">", 158),
    ),
    violations=(
        Violation("jump_squat.go_deeper", 15, lambda c: c.is_down and c.avg_knee > 120),
        Violation("jump_squat.land_evenly", 12, lambda c: c.knee_gap > 22),
    ),
    description="Jump squat, tracked by average knee angle",
)

SUMO_SQUAT = ExerciseRule(
    slug="sumo_squat",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_knee,
        down=Band("<", 130),
        up=Band(">", 155),
    ),
    violations=(
        Violation("sumo_squat.go_deeper", 15, lambda c: c.is_down and c.avg_knee > 125),
        Violation(
            "sumo_squat.widen_stance", 18,
            lambda c: c.hip_spread > 0.01 and _stance_ratio(c) < 1.3,
        ),
        Violation("sumo_squat.knees_out", 18, lambda c: _knees_caving(c, 0.055)),
    ),
    description="Wide-stance squat with knee tracking checks",
)

DONKEY_KICK = ExerciseRule(
    slug="donkey_kick",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        # Kicked leg extends the hip, so "down" is the high-angle side
        signal=lambda c: c.max_hip,
        down=Band(">=", 148),
        up=Band("<=", 110),
    ),
    violations=(
        Violation("donkey_kick.keep_hips_level", 18, lambda c: c.hip_y_gap > 0.055),
        Violation("donkey_kick.kick_higher", 15, lambda c: c.is_down and c.max_hip < 130),
    ),
    description="Quadruped donkey kick, tracked by the more extended hip",
)

FIRE_HYDRANT = ExerciseRule(
    slug="fire_hydrant",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.knee_y_gap,
        down=Band(">=", 0.060),
        up=Band("<=", 0.030),
    ),
    violations=(
        Violation("fire_hydrant.keep_hips_level", 18, lambda c: c.hip_y_gap > 0.055),
        Violation("fire_hydrant.lift_higher", 15, lambda c: c.is_down and c.knee_y_gap < 0.080),
    ),
    description="Quadruped side knee raise, tracked by knee height asymmetry",
)

HIP_THRUST = ExerciseRule(
    slug="hip_thrust",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_hip,
        down=Band("<", 110),
        up=Band(">", 155),
    ),
    violations=(
        Violation("hip_thrust.thrust_higher", 18, lambda c: c.is_up and c.avg_hip < 138),
        Violation("hip_thrust.hip_asymmetry", 12, lambda c: c.hip_y_gap > 0.069),
    ),
    description="Hip thrust, tracked by average hip angle",
)

WALL_SIT = ExerciseRule(
    slug="wall_sit",
    family=ExerciseFamily.POSITION,
    violations=(
        Violation("wall_sit.adjust_knee_angle", 15, lambda c: c.avg_knee < 75 or c.avg_knee > 108),
        Violation("wall_sit.keep_back_straight", 12, lambda c: c.angles.spine < 140),
    ),
    description="Wall sit, knees held between 75 and 108 degrees",
)


# ═══════════════════════════════════════════════════════════════════════════════
# CORE
# ═══════════════════════════════════════════════════════════════════════════════

PLANK_HIP_HIGH_THR = 0.06
PLANK_HIP_LOW_THR = 0.06
PLANK_SHOULDER_TILT_THR = 0.05

PLANK = ExerciseRule(
    slug="plank",
    family=ExerciseFamily.HOLD,
    violations=(
        Violation("plank.lower_hips", 30, lambda c: c.hip_deviation < -PLANK_HIP_HIGH_THR),
        Violation("plank.raise_hips", 30, lambda c: c.hip_deviation > PLANK_HIP_LOW_THR),
        Violation("plank.hips_collapsing", 30, lambda c: c.hip_deviation > 2 * PLANK_HIP_LOW_THR),
        Violation("plank.level_shoulders", 15, lambda c: c.shoulder_y_gap > PLANK_SHOULDER_TILT_THR),
    ),
    description="Forearm plank hold, scored on shoulder-hip-ankle alignment",
)

SIDE_PLANK = ExerciseRule(
    slug="side_plank",
    family=ExerciseFamily.HOLD,
    violations=(
        Violation("side_plank.hip_too_high", 22, lambda c: c.hip_deviation < -0.069),
        Violation("side_plank.hip_dropping", 22, lambda c: c.hip_deviation > 0.069),
        Violation("side_plank.neck_dropped", 12, lambda c: c.point(J.NOSE).y - c.shoulder_y > 0.046),
    ),
    description="Side plank hold",
)


def _superman_arms_up(ctx: ExerciseContext) -> bool:
    return abs(ctx.wrist_y - ctx.shoulder_y) < 0.069


def _superman_legs_up(ctx: ExerciseContext) -> bool:
    return abs(ctx.ankle_y - ctx.hip_y) < 0.069


SUPERMAN = ExerciseRule(
    slug="superman",
    family=ExerciseFamily.HOLD,
    violations=(
        Violation(
            "superman.hold_position", 20,
            lambda c: not _superman_arms_up(c) and not _superman_legs_up(c),
        ),
        Violation(
            "superman.only_arms", 15,
            lambda c: _superman_arms_up(c) and not _superman_legs_up(c),
        ),
        Violation("superman.head_too_high", 10, lambda c: c.shoulder_y - c.point(J.NOSE).y > 0.046),
    ),
    description="Prone superman hold with arms and legs raised",
)

CRUNCH = ExerciseRule(
    slug="crunch",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        # Crunching closes the hip angle
        signal=lambda c: c.avg_hip,
        down=Band("<=", 65),
        up=Band(">=", 95),
    ),
    violations=(
        Violation("crunch.crunch_higher", 15, lambda c: c.is_down and c.avg_hip > 55),
    ),
    description="Crunch, tracked by average hip angle",
)

BICYCLE_CRUNCH = ExerciseRule(
    slug="bicycle_crunch",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.knee_drive,
        down=Band("<", -0.045),
    ),
    violations=(
        Violation("bicycle_crunch.lower_hips", 20, lambda c: c.hip_deviation < -0.072),
        Violation("bicycle_crunch.raise_hips", 20, lambda c: c.hip_deviation > 0.072),
    ),
    description="Alternating knee drive while lying on the back",
)

LEG_RAISE = ExerciseRule(
    slug="leg_raise",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.ankle_lift,
        down=Band("<", -0.055),
        up=Band(">", 0.030),
    ),
    violations=(
        Violation("leg_raise.keep_back_flat", 18, lambda c: c.hip_deviation > 0.069),
    ),
    description="Lying leg raise, tracked by ankle height relative to the hips",
)

RUSSIAN_TWIST = ExerciseRule(
    slug="russian_twist",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.shoulder_y_gap,
        down=Band(">=", 0.045),
        up=Band("<=", 0.020),
    ),
    violations=(
        Violation("russian_twist.maintain_lean", 12, lambda c: not 100 < c.angles.spine < 150),
    ),
    description="Seated trunk rotation, tracked by shoulder height asymmetry",
)

DEAD_BUG = ExerciseRule(
    slug="dead_bug",
    family=ExerciseFamily.POSITION,
    violations=(
        Violation("dead_bug.keep_back_flat", 20, lambda c: abs(c.hip_deviation) > 0.065),
        Violation("dead_bug.keep_hips_level", 15, lambda c: c.hip_y_gap > 0.055),
    ),
    description="Dead bug, scored on back flatness and hip rotation",
)

BIRD_DOG = ExerciseRule(
    slug="bird_dog",
    family=ExerciseFamily.POSITION,
    violations=(
        Violation("bird_dog.keep_hips_level", 20, lambda c: c.hip_y_gap > 0.055),
        Violation("bird_dog.keep_back_neutral", 15, lambda c: c.angles.spine < 155),
    ),
    description="Bird dog, scored on hip rotation and a neutral spine",
)

FLUTTER_KICK = ExerciseRule(
    slug="flutter_kick",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.ankle_lift,
        down=Band("<", -0.040),
        up=Band(">", 0.020),
    ),
    violations=(
        Violation("flutter_kick.keep_back_flat", 18, lambda c: c.hip_deviation > 0.065),
    ),
    description="Flutter kicks, tracked by ankle height relative to the hips",
)


# ═══════════════════════════════════════════════════════════════════════════════
# PUSH
# ═══════════════════════════════════════════════════════════════════════════════

PUSHUP = ExerciseRule(
    slug="pushup",
    family=ExerciseFamily.CYCLIC,
    rep_encoding=RepEncoding.DIRECT,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_elbow,
        down=Band("<", 95),
        up=Band(">", 155),
    ),
    violations=(
        Violation("pushup.keep_body_straight", 25, lambda c: abs(c.hip_deviation) > 0.08),
        Violation("pushup.go_lower", 15, lambda c: c.is_down and c.avg_elbow > 110),
        Violation("pushup.align_elbows", 10, lambda c: c.elbow_gap > 20),
    ),
    description="Standard pushup, tracked by average elbow angle",
)

PIKE_PUSHUP = ExerciseRule(
    slug="pike_pushup",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_elbow,
        down=Band("<", 100),
        up=Band(">", 155),
    ),
    violations=(
        # Hips must sit above the shoulders in the inverted V
        Violation("pike_pushup.raise_hips", 20, lambda c: c.hip_y > c.shoulder_y - 0.060),
        Violation("pike_pushup.keep_body_straight", 15, lambda c: abs(c.hip_deviation) > 0.100),
    ),
    description="Pike pushup from an inverted V position",
)

DIAMOND_PUSHUP = ExerciseRule(
    slug="diamond_pushup",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_elbow,
        down=Band("<", 95),
        up=Band(">", 155),
    ),
    violations=(
        Violation("diamond_pushup.keep_body_straight", 18, lambda c: abs(c.hip_deviation) > 0.106),
        Violation("diamond_pushup.go_lower", 12, lambda c: c.is_down and c.avg_elbow > 148),
        Violation("diamond_pushup.bring_hands_together", 15, lambda c: c.wrist_spread > 0.28),
    ),
    description="Narrow-grip pushup",
)

WIDE_PUSHUP = ExerciseRule(
    slug="wide_pushup",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_elbow,
        down=Band("<", 95),
        up=Band(">", 155),
    ),
    violations=(
        Violation("wide_pushup.keep_body_straight", 18, lambda c: abs(c.hip_deviation) > 0.106),
        Violation("wide_pushup.go_lower", 12, lambda c: c.is_down and c.avg_elbow > 148),
        Violation("wide_pushup.align_elbows", 8, lambda c: c.elbow_gap > 26),
    ),
    description="Wide-grip pushup",
)

TRICEP_DIP = ExerciseRule(
    slug="tricep_dip",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_elbow,
        down=Band("<", 95),
        up=Band(">", 150),
    ),
    violations=(
        Violation("tricep_dip.dip_lower", 15, lambda c: c.is_down and c.avg_elbow > 140),
        Violation("tricep_dip.align_elbows", 12, lambda c: c.elbow_gap > 25),
        Violation("tricep_dip.keep_hips_close", 12, lambda c: _hip_shoulder_x_gap(c) > 0.08),
    ),
    description="Bench or chair dip, tracked by average elbow angle",
)


# ═══════════════════════════════════════════════════════════════════════════════
# FULL BODY
# ═══════════════════════════════════════════════════════════════════════════════

MOUNTAIN_CLIMBER = ExerciseRule(
    slug="mountain_climber",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.knee_drive,
        down=Band("<", -0.050),
    ),
    violations=(
        Violation("mountain_climber.hip_too_high", 22, lambda c: c.hip_deviation < -0.079),
        Violation("mountain_climber.hip_sagging", 22, lambda c: c.hip_deviation > 0.079),
    ),
    description="Mountain climber, a rep is one knee drive toward the chest",
)

BURPEE = ExerciseRule(
    slug="burpee",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.avg_knee,
        down=Band("<=", 115),
        up=Band(">=", 160),
    ),
    violations=(
        # Only judged while the body is near horizontal (plank portion)
        Violation("burpee.arched_back", 20, lambda c: c.body_spread < 0.15 and c.hip_deviation > 0.069),
    ),
    description="Burpee, standing to squat/plank and back",
)

HIGH_KNEES = ExerciseRule(
    slug="high_knees",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.knee_drive,
        down=Band("<", -0.050),
    ),
    violations=(
        Violation("high_knees.stay_upright", 15, lambda c: c.angles.spine < 180 - 55),
    ),
    description="Running in place with knees above hip level",
)

INCHWORM = ExerciseRule(
    slug="inchworm",
    family=ExerciseFamily.CYCLIC,
    phase_rule=PhaseRule(
        signal=lambda c: c.body_spread,
        down=Band("<", 0.15),
        up=Band(">", 0.30),
    ),
    violations=(
        Violation(
            "inchworm.keep_hips_aligned", 18,
            lambda c: c.body_spread < 0.20 and abs(c.hip_deviation) > 0.100,
        ),
        Violation("inchworm.keep_legs_straight", 12, lambda c: c.body_spread < 0.20 and c.avg_knee < 130),
    ),
    description="Inchworm, walking out from standing to plank and back",
)


EXERCISE_RULES: Dict[ExerciseType, ExerciseRule] = {
    ExerciseType.SQUAT: SQUAT,
    ExerciseType.PUSHUP: PUSHUP,
    ExerciseType.PLANK: PLANK,
    ExerciseType.LUNGE: LUNGE,
    ExerciseType.GLUTE_BRIDGE: GLUTE_BRIDGE,
    ExerciseType.SIDE_PLANK: SIDE_PLANK,
    ExerciseType.SUPERMAN: SUPERMAN,
    ExerciseType.MOUNTAIN_CLIMBER: MOUNTAIN_CLIMBER,
    ExerciseType.BURPEE: BURPEE,
    ExerciseType.JUMP_SQUAT: JUMP_SQUAT,
    ExerciseType.SUMO_SQUAT: SUMO_SQUAT,
    ExerciseType.DONKEY_KICK: DONKEY_KICK,
    ExerciseType.FIRE_HYDRANT: FIRE_HYDRANT,
    ExerciseType.HIP_THRUST: HIP_THRUST,
    ExerciseType.WALL_SIT: WALL_SIT,
    ExerciseType.CRUNCH: CRUNCH,
    ExerciseType.BICYCLE_CRUNCH: BICYCLE_CRUNCH,
    ExerciseType.LEG_RAISE: LEG_RAISE,
    ExerciseType.RUSSIAN_TWIST: RUSSIAN_TWIST,
    ExerciseType.DEAD_BUG: DEAD_BUG,
    ExerciseType.BIRD_DOG: BIRD_DOG,
    ExerciseType.FLUTTER_KICK: FLUTTER_KICK,
    ExerciseType.PIKE_PUSHUP: PIKE_PUSHUP,
    ExerciseType.DIAMOND_PUSHUP: DIAMOND_PUSHUP,
    ExerciseType.WIDE_PUSHUP: WIDE_PUSHUP,
    ExerciseType.TRICEP_DIP: TRICEP_DIP,
    ExerciseType.HIGH_KNEES: HIGH_KNEES,
    ExerciseType.INCHWORM: INCHWORM,
}
