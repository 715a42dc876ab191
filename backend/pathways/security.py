"""Password hashing and signed access/refresh tokens.

Tokens are self-contained: nothing is stored server side. Every token carries
a ``type`` claim (``access`` or ``refresh``) and is bound to a fixed issuer and
audience, so a token minted for another service is rejected even when the
signature checks out.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .errors import ConfigurationError, TokenExpired, TokenMalformed, TokenNotYetValid
from .settings import settings

TOKEN_ISSUER = "cognitive-pathways-backend"
TOKEN_AUDIENCE = "cognitive-pathways-frontend"

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)
logger = logging.getLogger(__name__)


def hash_password(plain_password: str) -> str:
	return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def _signing_key() -> str:
	if not settings.jwt_secret_key:
		logger.error("JWT_SECRET_KEY is not configured")
		raise ConfigurationError()
	return settings.jwt_secret_key


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _sign(claims: Dict[str, Any], lifetime: timedelta) -> str:
	key = _signing_key()
	now = _now()
	to_encode = {
		**claims,
		"iat": int(now.timestamp()),
		"exp": int((now + lifetime).timestamp()),
		"iss": TOKEN_ISSUER,
		"aud": TOKEN_AUDIENCE,
	}
	return jwt.encode(to_encode, key, algorithm=settings.jwt_algorithm)


def issue_access_token(subject_id: Any, email: str, expires_delta: Optional[timedelta] = None) -> str:
	lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
	return _sign({"sub": str(subject_id), "email": email, "type": ACCESS_TOKEN}, lifetime)


def issue_refresh_token(subject_id: Any, expires_delta: Optional[timedelta] = None) -> str:
	lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
	return _sign({"sub": str(subject_id), "type": REFRESH_TOKEN}, lifetime)


def verify_token(token: str) -> Dict[str, Any]:
	"""Decode and validate ``token``; return its claims.

	Raises ``TokenExpired``, ``TokenNotYetValid`` or ``TokenMalformed`` for
	client-side problems and ``ConfigurationError`` when no secret is set.
	Callers check the ``type`` claim themselves.
	"""
	key = _signing_key()
	try:
		claims = jwt.decode(
			token,
			key,
			algorithms=[settings.jwt_algorithm],
			audience=TOKEN_AUDIENCE,
			issuer=TOKEN_ISSUER,
			# nbf is checked below so it can be reported as its own kind
			options={"verify_nbf": False},
		)
	except ExpiredSignatureError:
		raise TokenExpired()
	except JWTError:
		raise TokenMalformed()
	nbf = claims.get("nbf")
	if nbf is not None:
		try:
			not_before = float(nbf)
		except (TypeError, ValueError):
			raise TokenMalformed()
		if not_before > _now().timestamp():
			raise TokenNotYetValid()
	return claims
