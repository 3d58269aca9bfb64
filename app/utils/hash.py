# app/utils/hash.py
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a candidate password with a stored hash; a missing hash never matches."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in storage
        return False


def dummy_verify() -> None:
    """Spend the same time as a real comparison when there is no hash to check."""
    pwd_context.dummy_verify()
