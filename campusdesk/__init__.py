"""
CampusDesk Backend Package
==========================

Flask-based backend for the CampusDesk academic administration dashboard
(student / teacher / head-of-department views).

Structure:
- routes/: API route blueprints
- services/: Grading, performance analytics, publishing and AI text generation
- models.py: Domain dataclasses
- repository.py: In-memory data store seeded with demo data
- config.py: Configuration management
"""

from .config import config, Config

__version__ = "1.0.0"

__all__ = ['config', 'Config']
