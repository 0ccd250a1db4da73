# routers/auth.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from config import ACCESS_TOKEN_EXPIRE_MINUTES, AUTH_COOKIE_NAME
from database import get_db
from deps.auth import (
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
    login_for_access_token,
)
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Role, User
from schemas import LoginIn, LoginOut, MessageOut, RegisterIn, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token")
def issue_token(resp=Depends(login_for_access_token)):
    return resp


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.username, payload.password)
    if not user:
        raise HTTPException(401, "Incorrect username or password")

    token = create_access_token({"sub": str(user.id), "tenant": user.tenant_id})
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    logger.info("user %s logged in", user.username)
    return {"access_token": token, "token_type": "bearer", "user": user, "tenant": user.tenant}


@router.post("/logout", response_model=MessageOut)
def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/user", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.post(
    "/register",
    response_model=UserOut,
    status_code=201,
    dependencies=[Depends(require_page_access("/users"))],
)
def register(payload: RegisterIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    username = payload.username.strip()
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(409, "Username already exists")

    if payload.role_id is not None:
        role = db.get(Role, payload.role_id)
        if not role or role.tenant_id != tenant_id:
            raise HTTPException(404, "Role not found")

    u = User(
        username=username,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role_id=payload.role_id,
        tenant_id=tenant_id,
        is_active=True,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u
