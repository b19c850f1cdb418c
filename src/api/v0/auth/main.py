"""
Identity endpoints: account registration, key recovery, login and logout.

Accounts are identified by a secret key (sent as an HttpOnly cookie or the
X-Secret-Key header) and recovered with a separate recovery key. Only
bcrypt hashes of either key are stored.
"""
import os

from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response

from src.core.security import new_sk, new_rk, hash_key, verify_key, extract_key_id, role_for_username
from src.core.rate_limit import limiter
from src.core.db.tables.recoverykey import RecoveryKey
from src.core.db.tables.secretkey import SecretKey
from src.core.db.session import get_db, SECRET_KEY_COOKIE
from src.core.errors import Unauthenticated
from src.core.logger import get_logger
from src.api.v0.auth.models import (
    NewTokenRequest,
    NewTokenResponse,
    RecoveryTokenRequest,
    VerifyLoginRequest,
    VerifyLoginResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

COOKIE_MAX_AGE = 365 * 24 * 60 * 60  # 1 year in seconds


def set_auth_cookie(response: Response, secret_key: str) -> None:
    """
    HttpOnly keeps the key away from page scripts; SameSite=Strict blocks
    cross-site submission. Secure is enabled with INKWELL_SECURE_COOKIES.
    """
    response.set_cookie(
        key=SECRET_KEY_COOKIE,
        value=secret_key,
        httponly=True,
        secure=os.getenv("INKWELL_SECURE_COOKIES", "false").lower() == "true",
        samesite="strict",
        max_age=COOKIE_MAX_AGE,
        path="/",
    )


@router.post("/new", response_model=NewTokenResponse)
@limiter.limit("5/minute")
def new_user(
    request: Request,
    response: Response,
    new_token_request: NewTokenRequest,
    session: Session = Depends(get_db),
):
    """
    Register a new account.

    Rate limited to 5 requests per minute per IP.
    The plaintext keys are returned once and never stored.
    """
    username = new_token_request.username
    logger.info(f"New user registration attempt: {username}")

    existing_sk = session.execute(
        select(SecretKey).where(SecretKey.username == username)
    ).scalar()

    if existing_sk:
        logger.warning(f"Registration failed - username already exists: {username}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists!",
        )

    new_secret_key = new_sk()
    new_recovery_key = new_rk()
    role = role_for_username(username)

    session.add(SecretKey(
        sk_id=extract_key_id(new_secret_key),
        sk_hash=hash_key(new_secret_key),
        username=username,
        role=role,
    ))
    session.add(RecoveryKey(
        rk_id=extract_key_id(new_recovery_key),
        rk_hash=hash_key(new_recovery_key),
        username=username,
    ))

    try:
        session.commit()
        logger.info(f"User created successfully: {username} ({role})")
    except IntegrityError:
        session.rollback()
        logger.error(f"Database integrity error during user creation: {username}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists!",
        )

    set_auth_cookie(response, new_secret_key)
    return NewTokenResponse(username=username, role=role, sk=new_secret_key, rk=new_recovery_key)


@router.post("/recovery", response_model=NewTokenResponse)
@limiter.limit("3/minute")
def refresh_token(
    request: Request,
    recovery_token_request: RecoveryTokenRequest,
    session: Session = Depends(get_db),
):
    """
    Issue a new secret key using the recovery key.

    Rate limited to 3 requests per minute per IP.
    Both keys are always verified so the response does not reveal which
    one was wrong.
    """
    secret_key = recovery_token_request.sk
    recovery_key = recovery_token_request.rk
    sk_id = extract_key_id(secret_key)

    sk_object = session.execute(
        select(SecretKey).where(SecretKey.sk_id == sk_id)
    ).scalar()
    rk_object = session.execute(
        select(RecoveryKey).where(RecoveryKey.rk_id == extract_key_id(recovery_key))
    ).scalar()

    sk_valid = bool(sk_object) and verify_key(secret_key, sk_object.sk_hash)
    rk_valid = bool(rk_object) and verify_key(recovery_key, rk_object.rk_hash)
    username_match = bool(sk_object and rk_object) and sk_object.username == rk_object.username

    if not (sk_valid and rk_valid and username_match):
        logger.warning(f"Recovery failed - invalid credentials for sk_id: {sk_id}")
        raise Unauthenticated("Invalid credentials")

    new_secret_key = new_sk()

    try:
        # Rotate in place rather than delete + insert
        sk_object.sk_id = extract_key_id(new_secret_key)
        sk_object.sk_hash = hash_key(new_secret_key)
        session.commit()
        logger.info(f"Secret key refreshed successfully for user: {sk_object.username}")
    except IntegrityError:
        session.rollback()
        logger.error(f"Database error during key refresh for user: {rk_object.username}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred",
        )

    return NewTokenResponse(
        username=sk_object.username,
        role=sk_object.role,
        sk=new_secret_key,
        rk=recovery_key,
    )


@router.post("/verify", response_model=VerifyLoginResponse)
@limiter.limit("10/minute")
def verify_login(
    request: Request,
    response: Response,
    verify_request: VerifyLoginRequest,
    session: Session = Depends(get_db),
):
    """
    Verify a secret key and set the auth cookie.

    Rate limited to 10 requests per minute per IP.
    """
    sk_object = session.execute(
        select(SecretKey).where(SecretKey.sk_id == extract_key_id(verify_request.sk))
    ).scalar()

    if not sk_object or not verify_key(verify_request.sk, sk_object.sk_hash):
        raise Unauthenticated("Invalid credentials")

    set_auth_cookie(response, verify_request.sk)

    logger.info(f"Login verified for user: {sk_object.username}")
    return VerifyLoginResponse(username=sk_object.username, role=sk_object.role, valid=True)


@router.post("/logout")
def logout(response: Response):
    """Clear the HttpOnly auth cookie"""
    response.delete_cookie(key=SECRET_KEY_COOKIE, path="/")
    logger.info("User logged out")
    return {"message": "Logged out successfully"}
