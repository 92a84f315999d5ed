"""
Performance Analytics
=====================
Weekly averages and trend direction computed from graded submissions.
Zero AI API calls, nothing stored: every record is recomputed on demand.

Submissions are expected most-recent-first (the repository prepends new ones),
so the first half of a student's list is their "recent" work.
"""
import math
import re
from collections import OrderedDict

from campusdesk.models import PerformanceRecord

TREND_THRESHOLD = 5

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"

UNKNOWN_YEAR = 0


# ═══════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════

def classify_trend(percentages):
    """Given percentages most-recent-first, return 'improving', 'declining', or 'stable'."""
    if len(percentages) < 2:
        return STABLE
    mid = math.ceil(len(percentages) / 2)
    recent = percentages[:mid]
    older = percentages[mid:]
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    if recent_avg > older_avg + TREND_THRESHOLD:
        return IMPROVING
    if recent_avg < older_avg - TREND_THRESHOLD:
        return DECLINING
    return STABLE


def average_percentage(percentages):
    """Rounded mean of a list of percentages, 0 for an empty list."""
    if not percentages:
        return 0
    return int(math.floor(sum(percentages) / len(percentages) + 0.5))


def year_from_class_id(class_id):
    """Extract the year from a class identifier like 'CS-2A' (first digit), else 0."""
    match = re.search(r"\d", class_id or "")
    return int(match.group()) if match else UNKNOWN_YEAR


def performance_band(weekly_average):
    """Label a weekly average for display."""
    if weekly_average >= 90:
        return "Excellent"
    if weekly_average >= 75:
        return "Good"
    if weekly_average >= 60:
        return "Average"
    return "Needs Attention"


def filter_by_year(submissions, year, assignment_years):
    """Keep submissions whose assignment maps to `year`; unmapped ones are year 0."""
    assignment_years = assignment_years or {}
    return [s for s in submissions
            if assignment_years.get(s.assignment_id, UNKNOWN_YEAR) == year]


def _record(student_id, submissions):
    percentages = [s.percentage for s in submissions]
    return PerformanceRecord(
        student_id=student_id,
        student_name=submissions[0].student_name if submissions else "",
        weekly_average=average_percentage(percentages),
        total_assignments=len(submissions),
        completed_assignments=len(submissions),
        trend=classify_trend(percentages),
    )


# ═══════════════════════════════════════════════════════
# ANALYSIS
# ═══════════════════════════════════════════════════════

def analyze_student(submissions, student_id):
    """Performance record for one student; zero average and 'stable' when they have no work."""
    mine = [s for s in submissions if s.student_id == student_id]
    return _record(student_id, mine)


def analyze_cohort(submissions, year=None, assignment_years=None):
    """Records for every student, best weekly average first.

    With `year`, only submissions to assignments of that year are counted.
    Ties keep the order in which students first appear.
    """
    if year is not None:
        submissions = filter_by_year(submissions, year, assignment_years)

    groups = OrderedDict()
    for sub in submissions:
        groups.setdefault(sub.student_id, []).append(sub)

    records = [_record(student_id, subs) for student_id, subs in groups.items()]
    records.sort(key=lambda r: r.weekly_average, reverse=True)
    return records


def analyze(submissions, for_student=None, year=None, assignment_years=None):
    """Single-student record when `for_student` is given, otherwise the cohort list."""
    if for_student is not None:
        if year is not None:
            submissions = filter_by_year(submissions, year, assignment_years)
        return analyze_student(submissions, for_student)
    return analyze_cohort(submissions, year=year, assignment_years=assignment_years)


def performance_by_year(submissions, assignment_years):
    """Average score and submission count per resolvable year, e.g. {2: {"avgScore": 81, "submissions": 4}}."""
    buckets = {}
    for sub in submissions:
        year = (assignment_years or {}).get(sub.assignment_id, UNKNOWN_YEAR)
        if year == UNKNOWN_YEAR:
            continue
        buckets.setdefault(year, []).append(sub.percentage)

    return {
        year: {"avgScore": average_percentage(scores), "submissions": len(scores)}
        for year, scores in sorted(buckets.items())
    }
