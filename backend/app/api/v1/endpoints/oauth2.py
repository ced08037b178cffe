from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.core.container import Container
from app.core.db import get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import TOKEN_TYPE_OAUTH_STATE, TokenService
from app.services.auth_service import AuthService
from app.services.github_oauth import PROVIDER, GitHubOAuthClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth2", tags=["OAuth2"])


@router.get("/authorize/github")
@inject
async def authorize_github(
    token_service: TokenService = Depends(Provide[Container.token_service]),
    github_client: GitHubOAuthClient = Depends(Provide[Container.github_client]),
):
    """
    Start the GitHub OAuth2 flow
    """
    state = token_service.issue_state_token()
    return RedirectResponse(github_client.authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/callback/github")
@inject
async def github_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(Provide[Container.token_service]),
    github_client: GitHubOAuthClient = Depends(Provide[Container.github_client]),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
):
    """
    GitHub redirect URI. Signs the user in and sends them back to the
    frontend with the access token (or an error) as a query parameter.
    """
    if error or not code:
        logger.warning("[OAUTH] GitHub callback without code: %s", error)
        return RedirectResponse(auth_service.redirect_url(error=error or "authentication_failed"), status_code=status.HTTP_302_FOUND)

    if not token_service.validate(state, token_type=TOKEN_TYPE_OAUTH_STATE):
        logger.warning("[OAUTH] GitHub callback with invalid state")
        return RedirectResponse(auth_service.redirect_url(error="invalid_state"), status_code=status.HTTP_302_FOUND)

    try:
        access_token = await github_client.exchange_code(code)
        identity = await github_client.fetch_identity(access_token)
    except UnauthorizedError:
        return RedirectResponse(auth_service.redirect_url(error="authentication_failed"), status_code=status.HTTP_302_FOUND)

    target_url = await auth_service.oauth2_success(db, PROVIDER, identity)
    return RedirectResponse(target_url, status_code=status.HTTP_302_FOUND)
