"""
Bearer token authentication for the write endpoints.

Only sample ingest and manual recalculation change state, so only those two
routes depend on :class:`BearerAuth`; every read endpoint is public.
Clients are registered in the API_TOKENS setting as ``token:client`` pairs
and identified by the client name in the logs. Token lookup compares every
registered token with secrets.compare_digest.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import logging
import secrets

from fastapi import HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)


def parse_api_tokens(raw: str) -> dict[str, str]:
    """Turn ``"token1:client1,token2:client2"`` into ``{token: client}``.

    Whitespace around entries, tokens and client names is ignored. Only the
    first colon separates token from client, so client names may contain
    colons. Entries without a colon, or with an empty half, are skipped; a
    repeated token keeps its last client.

    Args:
        raw: The API_TOKENS value.

    Returns:
        dict[str, str]: Client name per token; empty when nothing parses.
    """
    token_map: dict[str, str] = {}
    for position, entry in enumerate(raw.split(",") if raw else []):
        token, sep, client = entry.strip().partition(":")
        if not sep:
            if entry.strip():
                logger.warning("API_TOKENS entry %d has no ':' separator, skipped", position)
            continue
        token, client = token.strip(), client.strip()
        if not token or not client:
            continue
        if token in token_map:
            logger.warning("API_TOKENS entry %d repeats an earlier token", position)
        token_map[token] = client
    return token_map


def verify_bearer_token(token: str, token_map: dict[str, str]) -> str | None:
    """Client registered for *token*, or None."""
    if not token:
        return None
    presented = token.encode("utf-8")
    for candidate, client in token_map.items():
        if secrets.compare_digest(presented, candidate.encode("utf-8")):
            return client
    return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class BearerAuth:
    """Route dependency resolving the ``Authorization`` header to a client.

    An instance is created in the application lifespan and kept on
    ``app.state.auth``; :func:`pqmonitor.api.deps.get_client_id` calls
    :meth:`verify`.

    Attributes:
        token_map: Client name per valid token.
    """

    def __init__(self, token_map: dict[str, str]) -> None:
        self.token_map = token_map
        self._scheme = HTTPBearer(auto_error=False)

    async def verify(self, request: Request) -> str:
        """Return the calling client's name.

        Raises:
            HTTPException: 401 when the header is missing, uses another
                scheme, or carries an unknown token.
        """
        credentials: HTTPAuthorizationCredentials | None = await self._scheme(request)
        if credentials is None:
            raise _unauthorized("Missing authorization credentials.")

        client = verify_bearer_token(credentials.credentials, self.token_map)
        if client is None:
            logger.info("Rejected request to %s with an unknown token", request.url.path)
            raise _unauthorized("Invalid or expired token.")
        return client
