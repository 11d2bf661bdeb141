import logging
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from docshare.errors import AuthenticationError, Conflict
from docshare.models import User
from docshare.security import create_access_token, get_password_hash, verify_password
from docshare.utils import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, clock: Callable = utcnow):
        self.db = db
        self.clock = clock

    def register(self, email: str, password: str, full_name: str) -> Tuple[User, str]:
        """Регистрация нового пользователя"""
        email = email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise Conflict("Email already registered")

        user = User(email=email, password_hash=get_password_hash(password), full_name=full_name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Параллельная регистрация с тем же email
            self.db.rollback()
            raise Conflict("Email already registered")
        self.db.refresh(user)

        logger.info("User %s registered", user.id)
        return user, create_access_token(user.id, user.email)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """Авторизация пользователя"""
        user = (
            self.db.query(User)
            .filter(User.email == email.lower(), User.is_active.is_(True))
            .first()
        )
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        user.last_login = self.clock()
        self.db.commit()
        self.db.refresh(user)
        return user, create_access_token(user.id, user.email)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
