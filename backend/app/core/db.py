from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
import ssl
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from app.core.config import configs


def prepare_database_url(url: str) -> tuple[str, dict]:
    """
    Prepare database URL for asyncpg compatibility.
    asyncpg doesn't support 'sslmode' parameter, need to convert to 'ssl' context.
    """
    if not url:
        return url, {}

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    connect_args = {}

    if 'sslmode' not in query_params:
        return url, connect_args

    sslmode = query_params.pop('sslmode')[0]

    if sslmode == 'require':
        # Require SSL but don't verify certificates
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        connect_args['ssl'] = ssl_context
    elif sslmode == 'verify-ca' or sslmode == 'verify-full':
        connect_args['ssl'] = ssl.create_default_context()
    elif sslmode == 'disable':
        connect_args['ssl'] = False

    new_query = urlencode(query_params, doseq=True)

    cleaned_url = urlunparse((
        parsed.scheme,
        parsed.netloc,
        parsed.path,
        parsed.params,
        new_query,
        parsed.fragment
    ))

    return cleaned_url, connect_args


cleaned_url, connect_args = prepare_database_url(configs.DATABASE_URI)

engine = create_async_engine(
    cleaned_url,
    echo=configs.DB_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
