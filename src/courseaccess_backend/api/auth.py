"""
Bearer token authentication for the HTTP API.

Tokens are mapped to principal ids by a YAML file:

    tokens:
      3f9a...: alice
      77c1...: bob

A request without a known token gets an anonymous principal; the
authorization gate rejects it wherever authentication is required.
"""

import hashlib
import logging
from typing import Dict, Optional

import yaml
from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param

from courseaccess_backend.context import ServiceContainer
from courseaccess_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class TokenDirectory:

    def __init__(self, tokens: Optional[Dict[str, str]] = None):
        self._tokens = dict(tokens or {})

    @classmethod
    def from_file(cls, path: str) -> "TokenDirectory":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        tokens = data.get("tokens") or {}
        logger.info(f"Loaded {len(tokens)} API tokens from {path}")
        return cls({str(token): str(user_id) for token, user_id in tokens.items()})

    def resolve(self, token: str) -> Optional[str]:
        return self._tokens.get(token)


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:12]


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


async def get_current_principal(request: Request) -> Principal:
    authorization = request.headers.get("Authorization")
    scheme, token = get_authorization_scheme_param(authorization)

    if not authorization or scheme.lower() != "bearer" or not token:
        return Principal.anonymous()

    user_id = request.app.state.tokens.resolve(token)
    if user_id is None:
        logger.warning(f"Unknown API token {_token_fingerprint(token)}")
        return Principal.anonymous()

    return Principal.authenticated_as(user_id)
