import logging

import bcrypt
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import AuthContext, get_current_user
from ..errors import Conflict, Unauthenticated
from ..models import User
from ..schemas.auth import LoginForm, SignupForm

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _context_for(user: User) -> AuthContext:
    return AuthContext(user_id=user.id, email=user.email, full_name=user.full_name, timezone=user.timezone)


@router.post("/signup")
async def signup(request: Request, payload: SignupForm, db: Session = Depends(get_db)):
    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).one_or_none()
    if existing:
        raise Conflict("Email already registered")

    user = User(
        email=email,
        full_name=(payload.full_name or "").strip() or None,
        password_hash=get_password_hash(payload.password),
        timezone=payload.timezone,
    )
    db.add(user)
    db.commit()

    ctx = _context_for(user)
    request.session["user"] = ctx.session_payload()
    logger.info("User %s signed up", user.id)
    return JSONResponse({"user": ctx.session_payload()}, status_code=201)


@router.post("/login")
async def login(request: Request, payload: LoginForm, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise Unauthenticated("Invalid credentials")

    ctx = _context_for(user)
    request.session["user"] = ctx.session_payload()
    return JSONResponse({"user": ctx.session_payload()})


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return JSONResponse({"status": "logged_out"})


@router.get("/me")
async def me(ctx: AuthContext = Depends(get_current_user)):
    return JSONResponse({"user": ctx.session_payload()})
