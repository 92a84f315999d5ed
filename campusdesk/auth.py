"""
JWT Authentication for CampusDesk.
Validates Bearer tokens on all /api/ routes except public endpoints and
attaches the caller (id, name, role) to ``g.user``.
"""
import time
from functools import wraps

import jwt
from flask import g, jsonify, request

from campusdesk.models import ROLES, User
from campusdesk.state import get_settings

AUDIENCE = "campusdesk"
ALGORITHM = "HS256"

# Routes that don't require authentication
PUBLIC_PREFIXES = []

PUBLIC_EXACT = [
    '/api/status',           # Health check
    '/api/auth/demo-token',  # Role switcher for the demo users
]


def get_jwt_secret():
    """Get the JWT signing secret from the app settings."""
    secret = get_settings().jwt_secret
    if not secret:
        raise RuntimeError('CAMPUSDESK_JWT_SECRET not configured')
    return secret


def issue_token(user, secret, ttl_seconds=8 * 60 * 60):
    """Sign a token carrying the user's id, name and role."""
    now = int(time.time())
    payload = {
        "sub": user.id,
        "name": user.name,
        "role": user.role,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def validate_token(token, secret):
    """
    Validate a JWT and return the decoded payload.
    Returns None if invalid.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("role") not in ROLES or not payload.get("sub"):
        return None
    return payload


def is_public_route(path):
    """Check if a route is public (no auth required)."""
    if path in PUBLIC_EXACT:
        return True
    for prefix in PUBLIC_PREFIXES:
        if path.startswith(prefix):
            return True
    return False


def init_auth(app):
    """
    Register the before_request auth hook on the Flask app.
    Call this BEFORE registering blueprints.
    """
    @app.before_request
    def check_auth():
        # Skip non-API routes
        if not request.path.startswith('/api/'):
            return None

        if is_public_route(request.path):
            return None

        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return jsonify({'error': 'Authentication required'}), 401

        token = auth_header[7:]  # Strip 'Bearer '
        payload = validate_token(token, get_jwt_secret())
        if payload is None:
            return jsonify({'error': 'Invalid or expired token'}), 401

        g.user = User(id=payload['sub'], name=payload.get('name', ''), role=payload['role'])


def require_role(*roles):
    """Reject the request with 403 unless the caller has one of `roles`."""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = g.get('user')
            if user is None:
                return jsonify({'error': 'Authentication required'}), 401
            if user.role not in roles:
                return jsonify({'error': f"This action requires role: {', '.join(roles)}"}), 403
            return view(*args, **kwargs)
        return wrapper
    return decorator
