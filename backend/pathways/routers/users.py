import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import APIKeyHeader
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import AuthError, DuplicateError, NotFoundError, TokenExpired, TokenMalformed, TokenTypeError, ValidationError
from ..models import Account
from ..security import (
	ACCESS_TOKEN,
	REFRESH_TOKEN,
	hash_password,
	issue_access_token,
	issue_refresh_token,
	verify_password,
	verify_token,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

PLACEHOLDER_TOKENS = {"your-jwt-token-here"}
MIN_TOKEN_LENGTH = 10

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class User(BaseModel):
	id: int
	email: Optional[str] = None


def _client_host(request: Request) -> str:
	return request.client.host if request.client else "unknown"


def get_current_user(request: Request, authorization: Optional[str] = Depends(authorization_header)) -> User:
	"""Require a valid access token in ``Authorization: Bearer <token>``.

	Client mistakes become 401s. A missing signing secret is a server fault
	and propagates as ``ConfigurationError`` (500).
	"""
	if not authorization or not authorization.startswith("Bearer "):
		raise AuthError("Access denied. No token provided or invalid format. Expected: Bearer <token>")
	token = authorization[len("Bearer "):].strip()
	if not token or token in ("null", "undefined"):
		raise AuthError("Access denied. No token provided")
	if token in PLACEHOLDER_TOKENS or len(token) < MIN_TOKEN_LENGTH:
		logger.warning("Placeholder/invalid token attempted from %s on %s", _client_host(request), request.url.path)
		raise AuthError("Access denied. Invalid token format")

	try:
		claims = verify_token(token)
	except AuthError as e:
		logger.error(
			"JWT error - type: %s, endpoint: %s, client: %s",
			type(e).__name__, request.url.path, _client_host(request),
		)
		raise

	if claims.get("type") != ACCESS_TOKEN:
		raise TokenTypeError()
	try:
		subject_id = int(claims["sub"])
	except (KeyError, TypeError, ValueError):
		raise TokenMalformed()
	return User(id=subject_id, email=claims.get("email"))


class RegisterRequest(BaseModel):
	firstName: Optional[str] = None
	lastName: Optional[str] = None
	email: Optional[str] = None
	password: Optional[str] = None


class LoginRequest(BaseModel):
	email: Optional[str] = None
	password: Optional[str] = None


class RefreshRequest(BaseModel):
	refreshToken: Optional[str] = None


def _account_summary(row: Account) -> dict:
	return {"id": row.id, "firstName": row.first_name, "lastName": row.last_name, "email": row.email}


def _token_pair(row: Account) -> dict:
	return {
		"accessToken": issue_access_token(row.id, row.email),
		"refreshToken": issue_refresh_token(row.id),
	}


def _valid_registration(req: RegisterRequest) -> bool:
	first = (req.firstName or "").strip()
	last = (req.lastName or "").strip()
	email = (req.email or "").strip()
	password = req.password or ""
	if not (3 <= len(first) <= 50 and 3 <= len(last) <= 50):
		return False
	if not (3 <= len(email) <= 50) or not _EMAIL_RE.match(email):
		return False
	return 6 <= len(password) <= 64


@router.post("/register", status_code=201)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
	if not _valid_registration(req):
		raise ValidationError("Please enter valid credentials")
	email = req.email.strip()
	existing = db.query(Account).filter(Account.email == email).first()
	if existing:
		raise DuplicateError("Email already exists")
	row = Account(
		first_name=req.firstName.strip(),
		last_name=req.lastName.strip(),
		email=email,
		password_hash=hash_password(req.password),
	)
	try:
		db.add(row)
		db.commit()
		db.refresh(row)
	except IntegrityError:
		# Lost a race with a concurrent registration for the same email
		db.rollback()
		raise DuplicateError("Email already exists")
	logger.info("Registered account %s", row.id)
	return {
		"success": True,
		"message": "Account created successfully",
		"user": _account_summary(row),
		"tokens": _token_pair(row),
	}


@router.post("/login")
def login(req: LoginRequest, db: Session = Depends(get_db)):
	if req.email is None or req.password is None:
		raise ValidationError("Please enter valid credentials")
	row = db.query(Account).filter(Account.email == req.email.strip()).first()
	if not row:
		raise ValidationError("User does not exist")
	if not verify_password(req.password, row.password_hash):
		raise AuthError("Incorrect credentials")
	return {
		"success": True,
		"message": "Login successful",
		"user": _account_summary(row),
		"tokens": _token_pair(row),
	}


@router.post("/refresh")
def refresh(req: RefreshRequest, db: Session = Depends(get_db)):
	if not req.refreshToken:
		raise ValidationError("Refresh token is required")
	try:
		claims = verify_token(req.refreshToken)
	except TokenExpired:
		raise AuthError("Refresh token has expired. Please login again")
	except AuthError:
		raise AuthError("Invalid refresh token")
	if claims.get("type") != REFRESH_TOKEN:
		raise TokenTypeError("Invalid token type")
	try:
		subject_id = int(claims["sub"])
	except (KeyError, TypeError, ValueError):
		raise AuthError("Invalid refresh token")
	row = db.get(Account, subject_id)
	if not row:
		raise NotFoundError("User not found")
	return {
		"success": True,
		"message": "Token refreshed successfully",
		"tokens": {"accessToken": issue_access_token(row.id, row.email)},
	}


@router.get("/profile")
def profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = db.get(Account, user.id)
	if not row:
		raise NotFoundError("User not found")
	return {
		"success": True,
		"message": "Profile retrieved successfully",
		"user": {**_account_summary(row), "createdAt": row.created_at.isoformat()},
	}


@router.post("/logout")
def logout(user: User = Depends(get_current_user)):
	# Tokens are stateless; the client discards them
	return {"success": True, "message": "Logged out successfully. Please discard your tokens."}
