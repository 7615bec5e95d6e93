#!/usr/bin/env python3
"""
RepCoach - Landmark Replay Demo
Runs a recorded landmark stream through the motion core and prints phase,
rep count and form score per frame.

Usage: python demo_replay.py recording.json [--exercise squats] [--every 5]

Recording format:
    {"exercise": "squats",
     "frames": [{"timestamp": 0, "landmarks": [{"name": "left_hip", "x": .., "y": .., "visibility": ..}, ...]}]}
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from Motion_Analysis.config.exercise_library import ExerciseLibrary
from Motion_Analysis.config.thresholds import SmoothingDefaults
from Motion_Analysis.core.landmarks import Landmark
from Motion_Analysis.core.session import ExerciseSession, SetSummary


def parse_args(argv=None):
    defaults = SmoothingDefaults()
    parser = argparse.ArgumentParser(description="RepCoach landmark replay")
    parser.add_argument("recording", type=Path, help="JSON recording of landmark frames")
    parser.add_argument("--exercise", "-e", default=None, help="Exercise type (overrides the recording)")
    parser.add_argument("--profiles", type=Path, default=None, help="Exercise profile JSON")
    parser.add_argument("--process-noise", type=float, default=defaults.PROCESS_NOISE)
    parser.add_argument("--measurement-noise", type=float, default=defaults.MEASUREMENT_NOISE)
    parser.add_argument("--every", type=int, default=1, help="Print every Nth frame")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def load_recording(path: Path) -> Tuple[Optional[str], List[Tuple[float, List[Landmark]]]]:
    """Read a recording into (exercise, [(timestamp_ms, landmarks), ...])."""
    with open(path, encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)
    frames = [
        (float(frame['timestamp']), [Landmark.from_dict(lm) for lm in frame['landmarks']])
        for frame in data.get('frames', [])
    ]
    return data.get('exercise'), frames


def replay(session: ExerciseSession, frames, every: int = 1) -> SetSummary:
    for i, (timestamp, landmarks) in enumerate(frames):
        result = session.process_frame(landmarks, timestamp)
        if every > 0 and i % every == 0:
            rep = result.repetition
            print(f"{timestamp:9.0f} ms  {rep.current_phase.value:<10s} reps={rep.rep_count:<3d} "
                  f"score={result.form.score:6.1f}  {'; '.join(result.form.feedback)}")
    return session.summary()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    exercise, frames = load_recording(args.recording)
    library = ExerciseLibrary.from_json(args.profiles) if args.profiles else ExerciseLibrary.default()
    profile = library.get(args.exercise or exercise or 'custom')

    print("\n" + "=" * 50)
    print(f"  RepCoach replay - {profile.name}")
    print(f"  {len(frames)} frames from {args.recording}")
    print("=" * 50 + "\n")

    session = ExerciseSession(profile, args.process_noise, args.measurement_noise,
                              start_time=frames[0][0] if frames else None)
    summary = replay(session, frames, args.every)

    print(f"\nSet {summary.set_number}: {summary.completed_reps} reps in "
          f"{summary.duration_seconds:.1f}s, average form score {summary.average_form_score:.1f}")
    for error_type, count in sorted(summary.error_counts.items(), key=lambda kv: -kv[1]):
        print(f"  {error_type:30s} {count:5d}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
