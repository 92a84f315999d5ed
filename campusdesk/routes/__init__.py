"""
CampusDesk API Routes
=====================

All API route blueprints for the CampusDesk application.

Usage:
    from campusdesk.routes import register_routes
    register_routes(app)
"""
from .auth_routes import auth_bp
from .assignment_routes import assignment_bp
from .analytics_routes import analytics_bp
from .pass_routes import pass_bp
from .timetable_routes import timetable_bp
from .planner_routes import planner_bp
from .assistant_routes import assistant_bp


def register_routes(app):
    """Register all route blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(assignment_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(pass_bp)
    app.register_blueprint(timetable_bp)
    app.register_blueprint(planner_bp)
    app.register_blueprint(assistant_bp)


__all__ = [
    'register_routes',
    'auth_bp',
    'assignment_bp',
    'analytics_bp',
    'pass_bp',
    'timetable_bp',
    'planner_bp',
    'assistant_bp',
]
