from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
import logging

from ..models import User, UserRole
from ..settings import settings
from ..state import SessionContext, new_id, sessions

router = APIRouter(prefix="/auth", tags=["auth"])

logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class LoginRequest(BaseModel):
	email: str
	password: str
	role: UserRole = UserRole.STUDENT


class SignupRequest(LoginRequest):
	name: str


class AuthResponse(BaseModel):
	access_token: str
	token_type: str = "bearer"
	user: User


class _Account(BaseModel):
	id: str
	name: str
	email: str
	password_hash: str


# Accounts created through /auth/signup, keyed by lower-cased email
_accounts: Dict[str, _Account] = {}


def _bcrypt_safe(password: str) -> str:
	# Truncate password to 72 bytes for bcrypt compatibility
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
	return pwd_context.hash(_bcrypt_safe(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)


def display_name_from_email(email: str) -> str:
	local = email.split("@")[0]
	return local[:1].upper() + local[1:]


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	now = datetime.now(timezone.utc)
	try:
		return now + delta
	except OverflowError:
		# Cap at far future but within datetime bounds
		return datetime.max.replace(tzinfo=timezone.utc)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None, *, expires_at: Optional[datetime] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": expires_at or _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _start_session(user: User) -> AuthResponse:
	# The session lives exactly as long as its token
	expires_at = _resolve_expiry(None)
	ctx = sessions.open(user, expires_at=expires_at)
	token = create_access_token({"sub": user.id, "jti": ctx.session_id}, expires_at=expires_at)
	return AuthResponse(access_token=token, user=user)


def _clean_email(raw: str) -> str:
	email = (raw or "").strip()
	if not email:
		raise HTTPException(status_code=400, detail="email is required")
	return email


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(req: SignupRequest):
	email = _clean_email(req.email)
	name = (req.name or "").strip()
	if not name or not req.password:
		raise HTTPException(status_code=400, detail="name and password are required")
	key = email.lower()
	if key in _accounts:
		raise HTTPException(status_code=409, detail="email already registered")
	password_hash = await run_in_threadpool(hash_password, req.password)
	# Another signup may have claimed the email while hashing
	if key in _accounts:
		raise HTTPException(status_code=409, detail="email already registered")
	account = _Account(id=new_id("user"), name=name, email=email, password_hash=password_hash)
	_accounts[key] = account
	return _start_session(User(id=account.id, name=account.name, email=account.email, role=req.role))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest):
	email = _clean_email(req.email)
	account = _accounts.get(email.lower())
	if account is not None:
		if not await run_in_threadpool(verify_password, req.password, account.password_hash):
			raise HTTPException(status_code=401, detail="Incorrect email or password")
		user = User(id=account.id, name=account.name, email=account.email, role=req.role)
	else:
		# Unregistered emails get a demo session named after the mailbox
		user = User(id=new_id("user"), name=display_name_from_email(email), email=email, role=req.role)
	return _start_session(user)


def _decode_token(token: str) -> Dict[str, str]:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise credentials_exception
	user_id: str | None = payload.get("sub")
	jti: str | None = payload.get("jti")
	if user_id is None or jti is None:
		raise credentials_exception
	return {"sub": user_id, "jti": jti}


def get_current_session(token: str = Depends(oauth2_scheme)) -> SessionContext:
	# Sweep first: an expired token is rejected before its session is looked up
	sessions.purge_expired()
	claims = _decode_token(token)
	ctx = sessions.get(claims["jti"])
	# Logged-out sessions are gone even if the token has not expired
	if ctx is None or ctx.user.id != claims["sub"]:
		raise HTTPException(status_code=401, detail="Could not validate credentials")
	return ctx


def require_role(role: UserRole) -> Callable[..., SessionContext]:
	def dependency(ctx: SessionContext = Depends(get_current_session)) -> SessionContext:
		if ctx.user.role != role:
			raise HTTPException(status_code=403, detail=f"{role.value.lower()} role required")
		return ctx
	return dependency


@router.get("/me", response_model=User)
async def me(ctx: SessionContext = Depends(get_current_session)):
	return ctx.user


@router.post("/logout", status_code=204)
async def logout(ctx: SessionContext = Depends(get_current_session)):
	sessions.close(ctx.session_id)
	return Response(status_code=204)
