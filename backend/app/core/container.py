from dependency_injector import containers, providers

from app.core.config import configs
from app.core.security import TokenService
from app.services.account_linker import AccountLinker
from app.services.auth_service import AuthService, CredentialVerifier
from app.services.category_service import CategoryService
from app.services.github_oauth import GitHubOAuthClient
from app.services.task_service import TaskService
from app.services.user_service import UserService


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(
        modules=[
            "app.core.dependencies",
            "app.api.v1.endpoints.auth",
            "app.api.v1.endpoints.oauth2",
            "app.api.v1.endpoints.task",
            "app.api.v1.endpoints.category",
            "app.api.v1.endpoints.user",
        ]
    )

    token_service = providers.Singleton(
        TokenService,
        secret_key=configs.SECRET_KEY,
        algorithm=configs.JWT_ALGORITHM,
        access_token_expire_minutes=configs.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_minutes=configs.REFRESH_TOKEN_EXPIRE_MINUTES,
        state_expire_minutes=configs.OAUTH_STATE_EXPIRE_MINUTES,
    )

    github_client = providers.Singleton(
        GitHubOAuthClient,
        client_id=configs.GITHUB_CLIENT_ID,
        client_secret=configs.GITHUB_CLIENT_SECRET,
        redirect_uri=configs.GITHUB_REDIRECT_URI,
    )

    credential_verifier = providers.Factory(CredentialVerifier)
    account_linker = providers.Factory(AccountLinker)

    auth_service = providers.Factory(
        AuthService,
        token_service=token_service,
        credential_verifier=credential_verifier,
        account_linker=account_linker,
        frontend_redirect_uri=configs.OAUTH2_REDIRECT_URI,
    )
    task_service = providers.Factory(TaskService)
    category_service = providers.Factory(CategoryService)
    user_service = providers.Factory(UserService)
