from passlib.context import CryptContext
import hashlib
import secrets

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

def _prehash(password: str) -> str:
    # bcrypt only reads the first 72 bytes
    return hashlib.sha256(password.encode("utf-8")).hexdigest()

def hash_password(password: str) -> str:
    return pwd_context.hash(_prehash(password))

def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(_prehash(password), hashed)
    except (ValueError, TypeError):
        # Malformed stored hash
        return False

def dummy_verify() -> None:
    """Spend the same time as a real verification for an unknown account."""
    pwd_context.dummy_verify()

def generate_random_password_hash() -> str:
    """Hash of a random secret, for accounts that only sign in through OAuth2."""
    return hash_password(secrets.token_urlsafe(32))
