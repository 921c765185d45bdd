from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Malformed stored hashes count as a mismatch."""
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False
