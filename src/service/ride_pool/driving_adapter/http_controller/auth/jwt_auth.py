"""
Bearer-token authentication

User accounts live in another service; this one only verifies the HS256 token it is handed
and trusts the `user_id` claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError


bearer_scheme = HTTPBearer(auto_error=False)


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = 7

    def create_jwt_token(self, user_id: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_id),
            'exp': now + timedelta(days=self.token_expire_days),
            'iat': now,
            'user_id': user_id,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def get_user_id_from_jwt(self, token: Optional[str]) -> int:
        if not token:
            raise AuthenticationError('Not authenticated')

        user_id = self.decode_jwt_token(token).get('user_id')
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthenticationError('Invalid token')
        return user_id


@inject
async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide['jwt_auth']),
) -> int:
    """Authenticated user id from `Authorization: Bearer <token>` (stateless, no DB query)"""
    return jwt_auth.get_user_id_from_jwt(credentials.credentials if credentials else None)
