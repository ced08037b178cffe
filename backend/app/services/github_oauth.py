"""
GitHub OAuth2 client - builds the authorize URL, exchanges the callback
code for an access token and reads the profile claims we need.
"""
import logging
from urllib.parse import urlencode

import httpx

from app.core.exceptions import UnauthorizedError
from app.services.account_linker import ExternalIdentity

logger = logging.getLogger(__name__)

PROVIDER = "github"


class GitHubOAuthClient:
    """Thin async client for the GitHub OAuth2 web flow."""

    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"
    API_URL = "https://api.github.com"

    HEADERS = {
        "Accept": "application/json",
        "User-Agent": "taskflow-api",
    }

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    def authorize_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "read:user user:email",
            "state": state,
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        async with httpx.AsyncClient(headers=self.HEADERS, timeout=self.timeout) as client:
            try:
                resp = await client.post(
                    self.TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                    },
                )
                resp.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("[OAUTH] GitHub token exchange failed: %s", e)
                raise UnauthorizedError("GitHub authentication failed")

        data = resp.json()
        token = data.get("access_token")
        if not token:
            logger.warning("[OAUTH] GitHub token exchange returned no token: %s", data.get("error"))
            raise UnauthorizedError("GitHub authentication failed")
        return token

    async def fetch_identity(self, access_token: str) -> ExternalIdentity:
        headers = {**self.HEADERS, "Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient(headers=headers, timeout=self.timeout) as client:
            try:
                resp = await client.get(f"{self.API_URL}/user")
                resp.raise_for_status()
                profile = resp.json()

                email = profile.get("email")
                if not email:
                    # Private email addresses are only listed by /user/emails
                    resp = await client.get(f"{self.API_URL}/user/emails")
                    if resp.status_code == 200:
                        email = next(
                            (
                                entry.get("email")
                                for entry in resp.json()
                                if entry.get("primary") and entry.get("verified")
                            ),
                            None,
                        )
            except httpx.HTTPError as e:
                logger.error("[OAUTH] GitHub profile fetch failed: %s", e)
                raise UnauthorizedError("GitHub authentication failed")

        external_id = profile.get("id")
        return ExternalIdentity(
            email=email,
            name=profile.get("name") or profile.get("login"),
            external_id=str(external_id) if external_id is not None else None,
        )
