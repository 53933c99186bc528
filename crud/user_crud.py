import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import Conflict, Unauthorized
from core.security import dummy_password_hash, hash_password, verify_password
from models.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, username: str, email: str, raw_password: str, rounds: int = 12) -> User:
    user = User(
        username=username,
        email=email,
        password=hash_password(raw_password, rounds=rounds),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # username and email are both unique; the store decides, not a pre-check
        db.rollback()
        logger.info("Registration rejected, username or email taken: %s", username)
        raise Conflict("User already exists")
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def verify_login(db: Session, username: str, raw_password: str, rounds: int = 12) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        verify_password(raw_password, dummy_password_hash(rounds))
        raise Unauthorized(INVALID_CREDENTIALS)
    if not verify_password(raw_password, user.password):
        raise Unauthorized(INVALID_CREDENTIALS)
    return user
