"""Accessors for the per-app objects created in ``create_app``."""
from flask import current_app


def _extension():
    return current_app.extensions["campusdesk"]


def get_settings():
    return _extension()["settings"]


def get_repository():
    return _extension()["repository"]


def get_text_client():
    return _extension()["text_client"]
