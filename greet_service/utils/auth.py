# greet_service/utils/auth.py

import http
import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

import cachecontrol
import google.auth.transport.requests
import requests
from flask import current_app, g, jsonify, request
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import id_token

logger = logging.getLogger(__name__)
KEY_ERROR = "error"

TokenVerifier = Callable[[str], Dict[str, Any]]


# ------------------------------------------------------------------------------
# Google ID token support
# ------------------------------------------------------------------------------

class TokenUser:
    """Lightweight object to hold the authenticated user's claims."""
    def __init__(self, subject, email=None, username=None):
        self.subject = subject
        self.email = email
        self.username = username


class GoogleTokenVerifier:
    """Verifies Google-signed ID tokens issued to the configured client id."""

    def __init__(self, client_id: str):
        self.client_id = client_id
        # Google's signing certificates are cached per their Cache-Control headers.
        self._request = google.auth.transport.requests.Request(
            session=cachecontrol.CacheControl(requests.Session())
        )

    def __call__(self, token: str) -> Dict[str, Any]:
        return id_token.verify_oauth2_token(token, self._request, self.client_id)


def create_token_verifier(config) -> Optional[TokenVerifier]:
    client_id = config.get("GOOGLE_CLIENT_ID")
    if not client_id:
        return None
    return GoogleTokenVerifier(client_id)


def require_google_token(f):
    """
    Decorator to protect routes with a Bearer ID token.

    When the app has no token verifier the route is left open.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        verifier = current_app.extensions.get("token_verifier")
        if verifier is None:
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({KEY_ERROR: "Missing or invalid Authorization header"}), http.HTTPStatus.UNAUTHORIZED

        token = auth_header.split("Bearer ")[1]

        try:
            claims = verifier(token)
            subject = claims.get("sub")
            if not subject:
                return jsonify({KEY_ERROR: "Invalid token: no subject"}), http.HTTPStatus.UNAUTHORIZED

            email = claims.get("email")
            g.user = TokenUser(
                subject=subject,
                email=email,
                username=claims.get("name") or (email.split("@")[0] if email else None)
            )

        except (ValueError, GoogleAuthError) as e:
            logger.warning(f"ID token verification failed: {e}")
            return jsonify({KEY_ERROR: "Invalid or expired token"}), http.HTTPStatus.UNAUTHORIZED

        return f(*args, **kwargs)
    return decorated
