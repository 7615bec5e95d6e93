import pytest

from Motion_Analysis.core.exercise import AngleRange, ExercisePhase as P, ExerciseProfile, ExerciseType
from Motion_Analysis.core.phase_detector import (
    CycleCompletion, HoldCompletion, LungePhaseClassifier, PhaseDetector, SquatPhaseClassifier,
    create_motion_model,
)

from conftest import elbow_frame, hip_frame, knee_frame


def run(detector, frames, start=0, step=100):
    states = []
    for i, frame in enumerate(frames):
        states.append(detector.update(frame, timestamp=start + i * step))
    return states


def test_squat_rep_counts_once(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    phases = []
    for i, angle in enumerate([175, 120, 80, 120]):
        phases.append(detector.update(knee_frame(angle), timestamp=i * 100).current_phase)
    assert phases == [P.STARTING, P.DESCENDING, P.BOTTOM, P.ASCENDING]
    assert {P.DESCENDING, P.BOTTOM, P.ASCENDING} <= set(detector.phase_history)
    assert detector.rep_count == 0

    state = detector.update(knee_frame(175), timestamp=500)
    assert state.current_phase is P.STARTING
    assert state.previous_phase is P.ASCENDING
    assert state.rep_count == 1
    assert detector.phase_history == ()

    # Standing still does not count again
    run(detector, [knee_frame(176)] * 5, start=600)
    assert detector.rep_count == 1


def test_squat_multiple_reps(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    cycle = [175, 130, 85, 130]
    run(detector, [knee_frame(a) for a in cycle * 3 + [175]])
    assert detector.rep_count == 3


def test_half_squat_does_not_count(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    run(detector, [knee_frame(a) for a in [175, 130, 110, 130, 175]])
    assert detector.rep_count == 0


@pytest.mark.parametrize("left,right,expected", [
    (60, 124, P.DESCENDING),   # average 92
    (60, 118, P.BOTTOM),       # average 89
    (150, 175, P.STARTING),    # average 162.5
])
def test_squat_uses_average_knee_angle(library, left, right, expected):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    state = detector.update(knee_frame(left, right), timestamp=0)
    assert state.current_phase is expected


def test_missing_landmark_holds_phase(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    run(detector, [knee_frame(175), knee_frame(120)])
    assert detector.current_phase is P.DESCENDING

    state = detector.update(knee_frame(80, visibility=0.4), timestamp=300)
    assert state.current_phase is P.DESCENDING
    state = detector.update(knee_frame(175)[:5], timestamp=400)
    assert state.current_phase is P.DESCENDING


def test_phase_change_records_timestamp(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    detector.update(knee_frame(120), timestamp=250)
    state = detector.update(knee_frame(121), timestamp=300)
    assert state.phase_start_time == 250
    assert state.previous_phase is P.STARTING


def test_state_is_a_snapshot(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    state = detector.update(knee_frame(120), timestamp=0)
    state.rep_count = 99
    assert detector.rep_count == 0


def test_push_up_rep(library):
    detector = PhaseDetector(library.get('push_ups'), timestamp=0)
    states = run(detector, [elbow_frame(a) for a in [170, 130, 80, 130, 170]])
    assert [s.current_phase for s in states] == [P.TOP, P.DESCENDING, P.BOTTOM, P.ASCENDING, P.TOP]
    assert detector.rep_count == 1


@pytest.mark.parametrize("current,angle,expected", [
    (P.STARTING, 120, P.DESCENDING),
    (P.DESCENDING, 140, P.DESCENDING),
    (P.BOTTOM, 120, P.ASCENDING),
    (P.ASCENDING, 125, P.ASCENDING),
    (P.ASCENDING, 130, P.RETURNING),
    (P.BOTTOM, 150, P.RETURNING),
    (P.RETURNING, 140, P.RETURNING),
    (P.RETURNING, 110, P.ASCENDING),
    (P.TOP, 120, P.RETURNING),
    (P.DESCENDING, 170, P.STARTING),
    (P.RETURNING, 95, P.BOTTOM),
])
def test_lunge_middle_band_precedence(current, angle, expected):
    assert LungePhaseClassifier().classify(angle, current) is expected


def test_lunge_rep_needs_returning(library):
    detector = PhaseDetector(library.get('lunges'), timestamp=0)
    # Front (left) leg drives the phase; back leg stays straighter
    angles = [175, 130, 90, 115, 145, 175]
    states = run(detector, [knee_frame(a, 178) for a in angles])
    assert [s.current_phase for s in states] == [
        P.STARTING, P.DESCENDING, P.BOTTOM, P.ASCENDING, P.RETURNING, P.STARTING]
    assert detector.rep_count == 1


def test_lunge_without_returning_does_not_count(library):
    detector = PhaseDetector(library.get('lunges'), timestamp=0)
    run(detector, [knee_frame(a, 178) for a in [175, 130, 90, 115, 175]])
    assert detector.rep_count == 0


def test_plank_hold_completes_after_ten_seconds(library):
    detector = PhaseDetector(library.get('planks'), timestamp=0)
    for t in range(0, 10000, 500):
        state = detector.update(hip_frame(180), timestamp=t)
        assert state.current_phase is P.HOLDING
    assert detector.rep_count == 0
    assert detector.hold_duration(9500) == pytest.approx(9.5)

    state = detector.update(hip_frame(179), timestamp=10000)
    assert state.rep_count == 1
    state = detector.update(hip_frame(179), timestamp=10500)
    assert state.rep_count == 1


def test_plank_interruption_resets_hold(library):
    detector = PhaseDetector(library.get('planks'), timestamp=0)
    run(detector, [hip_frame(180)] * 12, step=500)
    assert detector.hold_duration(5500) == pytest.approx(5.5)

    state = detector.update(hip_frame(140), timestamp=6000)
    assert state.current_phase is P.STARTING
    assert detector.hold_duration(6000) == 0.0

    run(detector, [hip_frame(180)] * 19, start=6500, step=500)
    # 9 seconds into the new hold: nothing counted yet
    assert detector.rep_count == 0
    detector.update(hip_frame(180), timestamp=16500)
    assert detector.rep_count == 1


def test_plank_missing_frame_keeps_hold(library):
    detector = PhaseDetector(library.get('planks'), timestamp=0)
    detector.update(hip_frame(180), timestamp=0)
    detector.update(hip_frame(180, visibility=0.2), timestamp=5000)
    assert detector.current_phase is P.HOLDING
    detector.update(hip_frame(180), timestamp=10000)
    assert detector.rep_count == 1


def test_unsupported_exercise_never_counts(library):
    detector = PhaseDetector(library.get('deadlifts'), timestamp=0)
    run(detector, [knee_frame(a) for a in [175, 120, 80, 120, 175] * 3])
    assert detector.current_phase is P.STARTING
    assert detector.rep_count == 0
    assert detector.phase_history == ()


def test_motion_model_selection(library):
    classifier, rule = create_motion_model(library.get('squats'))
    assert isinstance(classifier, SquatPhaseClassifier)
    assert isinstance(rule, CycleCompletion)
    assert rule.anchor is P.STARTING
    _, rule = create_motion_model(library.get('planks'))
    assert isinstance(rule, HoldCompletion)


def test_synthetic_profile_drives_cycle():
    profile = ExerciseProfile(
        exercise_type=ExerciseType.SQUATS,
        name="Shallow squat",
        key_angles={'left_knee': AngleRange(80, 180, 120)},
        phases=[P.STARTING, P.DESCENDING, P.BOTTOM],
    )
    detector = PhaseDetector(profile, timestamp=0)
    run(detector, [knee_frame(a) for a in [175, 120, 80, 175]])
    assert detector.rep_count == 1


def test_next_set_keeps_phase(library):
    detector = PhaseDetector(library.get('squats'), timestamp=0)
    run(detector, [knee_frame(a) for a in [175, 120, 80, 120, 175, 120]])
    assert detector.rep_count == 1
    before = detector.state

    detector.next_set()
    state = detector.state
    assert state.set_count == 2
    assert state.rep_count == 0
    assert state.current_phase is P.DESCENDING
    assert state.phase_start_time == before.phase_start_time
    assert detector.phase_history == ()


def test_reset_restores_initial_state(library):
    detector = PhaseDetector(library.get('planks'), timestamp=0)
    run(detector, [hip_frame(180)] * 5, step=1000)
    detector.next_set()
    detector.reset(timestamp=9000)
    state = detector.state
    assert state.current_phase is P.STARTING
    assert state.previous_phase is None
    assert (state.rep_count, state.set_count) == (0, 1)
    assert state.phase_start_time == 9000
    assert detector.hold_duration(9500) == 0.0
