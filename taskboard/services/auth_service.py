import hashlib
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Any

from taskboard.database import models
from taskboard.database.models.enums import UserRole
from taskboard.repositories.interfaces import IUserRepository
from taskboard.services.exceptions import (
    UserCreationError, AuthenticationError, TokenInvalidError
)
from taskboard.services.serializers import user_to_dict

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class AuthService:
    """회원가입, 로그인, 로그아웃, 토큰 검증 등 사용자 인증 서비스를 제공합니다."""
    _token_cache = {}

    def __init__(self, user_repo: IUserRepository, token_ttl_minutes: int = 60):
        """
        AuthService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            token_ttl_minutes: 발급한 토큰의 유효 시간(분).
        """
        self.user_repo = user_repo
        self.token_ttl = timedelta(minutes=token_ttl_minutes)

    def register(self, name: str, email: str, password: str, role: str = UserRole.USER.value) -> Dict[str, Any]:
        """
        새로운 사용자를 생성하고 인증 토큰을 발급합니다. 비밀번호는 해시하여 저장합니다.

        Returns:
            생성된 사용자 정보('user')와 토큰 정보('token', 'expires_at')를 담은 딕셔너리.

        Raises:
            ValueError: 이름, 이메일, 비밀번호 형식이 올바르지 않거나 알 수 없는 역할일 때.
            UserCreationError: 동일한 이메일의 사용자가 이미 존재할 때.
        """
        if not all(isinstance(value, str) for value in (name, email, password) if value is not None):
            raise ValueError("Name, email and password must be strings.")
        if not name or not name.strip():
            raise ValueError("Name is required.")
        if not email or "@" not in email:
            raise ValueError("A valid email address is required.")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        try:
            user_role = UserRole(role)
        except ValueError:
            raise ValueError(f"Invalid role '{role}'. Must be one of: {', '.join(r.value for r in UserRole)}.")

        if self.user_repo.find_by_email(email):
            raise UserCreationError(f"User with email '{email}' already exists.")

        new_user = models.User(
            name=name.strip(), email=email, password_hash=hash_password(password), role=user_role
        )
        created_user = self.user_repo.create(new_user)
        logger.info("User registered: user_id=%s email=%s", created_user.id, created_user.email)
        return {"user": user_to_dict(created_user), **self._issue_token(created_user)}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        자격증명을 검증하고, 성공 시 새 인증 토큰을 발급합니다. 기존 토큰은 모두 폐기됩니다.

        Raises:
            AuthenticationError: 이메일 또는 비밀번호가 올바르지 않을 때.
        """
        user = self.user_repo.find_by_email(email) if isinstance(email, str) and email else None
        if not user or not isinstance(password, str) or user.password_hash != hash_password(password):
            raise AuthenticationError("The provided credentials are incorrect.")

        self._revoke_user_tokens(user.id)
        logger.info("User logged in: user_id=%s", user.id)
        return {"user": user_to_dict(user), **self._issue_token(user)}

    def logout(self, token: str) -> bool:
        """토큰 소유자의 모든 토큰을 폐기합니다."""
        token_data = self._token_cache.get(token)
        if not token_data:
            raise TokenInvalidError("Token not found or invalid.")
        self._revoke_user_tokens(token_data['user_id'])
        logger.info("User logged out: user_id=%s", token_data['user_id'])
        return True

    def validate_token(self, token: str) -> models.User:
        """
        인증 토큰의 유효성을 검증하고, 유효하면 토큰 소유자를 반환합니다.

        Raises:
            TokenInvalidError: 토큰을 찾을 수 없거나, 만료되었거나, 소유자가 더 이상 존재하지 않을 때.
        """
        token_data = self._token_cache.get(token)
        if not token_data:
            raise TokenInvalidError("Token not found or invalid.")

        if datetime.now() > token_data['expires_at']:
            del self._token_cache[token]
            raise TokenInvalidError("Token has expired.")

        user = self.user_repo.find_by_id(token_data['user_id'])
        if not user:
            del self._token_cache[token]
            raise TokenInvalidError("Token not found or invalid.")
        return user

    def _issue_token(self, user: models.User) -> Dict[str, str]:
        token = str(uuid.uuid4())
        expires_at = datetime.now() + self.token_ttl
        self._token_cache[token] = {
            'user_id': user.id,
            'expires_at': expires_at
        }
        return {"token": token, "expires_at": expires_at.isoformat()}

    def _revoke_user_tokens(self, user_id: int):
        for token in [t for t, data in self._token_cache.items() if data['user_id'] == user_id]:
            del self._token_cache[token]
