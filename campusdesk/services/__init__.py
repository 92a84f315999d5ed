"""
CampusDesk Services
===================

Business logic services for the CampusDesk application.

Services:
- grading_service: Auto-grading of submitted answers
- performance_service: Weekly averages and trend analysis
- publisher: Assignment draft / scheduled / published lifecycle
- auto_publish: Background sweep that publishes due assignments
- pass_service: Pass request approval workflow
- department_service: Period timings, timetable, subjects and teachers
- ai_service: Question generation, semester planning and assistant chat
"""

# Services are imported directly when needed to avoid circular imports
# Example: from campusdesk.services.grading_service import grade

__all__ = [
    'grading_service',
    'performance_service',
    'publisher',
    'auto_publish',
    'pass_service',
    'department_service',
    'ai_service',
]
