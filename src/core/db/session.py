from sqlalchemy import select
from src.core.db.tables.secretkey import SecretKey
from fastapi import Depends, Request
from typing import Generator
from sqlalchemy.orm import sessionmaker, Session
from src.core.db.engine import engine
from src.core.errors import Unauthenticated
from src.core.principal import Principal, Role
from src.core.security import extract_key_id, verify_key

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SECRET_KEY_COOKIE = "secret_key"
SECRET_KEY_HEADER = "X-Secret-Key"


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def resolve_principal(session: Session, secret_key: str | None) -> Principal | None:
    """Look up the principal owning a secret key, or None if the key is unknown."""
    if not secret_key:
        return None

    sk_object = session.execute(
        select(SecretKey).where(SecretKey.sk_id == extract_key_id(secret_key))
    ).scalar()

    # Verify the full key against the hash
    if not sk_object or not verify_key(secret_key, sk_object.sk_hash):
        return None

    return Principal(id=sk_object.username, role=Role(sk_object.role))


def read_secret_key(request: Request) -> str | None:
    """Secret key from the HttpOnly cookie, falling back to the API header"""
    return request.cookies.get(SECRET_KEY_COOKIE) or request.headers.get(SECRET_KEY_HEADER)


def get_current_user(
    request: Request,
    session: Session = Depends(get_db),
) -> Principal:
    """Dependency to authenticate the caller via secret key"""
    secret_key = read_secret_key(request)
    if not secret_key:
        raise Unauthenticated("Not authenticated")

    principal = resolve_principal(session, secret_key)
    if principal is None:
        raise Unauthenticated("Invalid secret key")

    return principal


def get_current_user_optional(
    request: Request,
    session: Session = Depends(get_db),
) -> Principal | None:
    """Like get_current_user, but anonymous callers get None instead of 401"""
    return resolve_principal(session, read_secret_key(request))
