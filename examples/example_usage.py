"""Example: evaluate punches with the classifier directly (no Flask, no database).

Run from the repository root after ``pip install -e .``.
"""

from datetime import date, datetime, time

from timeclock.attendance.classifier import AttendanceClassifier, compute_hours_worked
from timeclock.attendance.model import PunchRecord
from timeclock.policy.model import AttendancePolicy


def main():
    policy = AttendancePolicy.default()
    classifier = AttendanceClassifier()

    decision = classifier.classify_check_in(policy, 8 * 60 + 20)
    print("08:20 check-in ->", decision.status.value, decision.late_minutes, "min late")
    print("08:00-16:30 ->", compute_hours_worked(8 * 60, 16 * 60 + 30), "hours")

    day = date(2025, 3, 2)
    punch = PunchRecord(work_date=day, check_in_time=time(8, 10), check_out_time=time(16, 5))
    result = classifier.classify_day(policy=policy, punch=punch, work_date=day, as_of=datetime(2025, 3, 3, 9, 0))
    print(day.isoformat(), "->", result.to_payload())


if __name__ == "__main__":
    main()
