import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import Principal, get_current_user
from models.users import User as UserModel
from schemas.common import ok
from schemas.users import LoginRequest, LoginResponse, UserOut
from utils.security import create_access_token, verify_password

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


# ✅ [LOGIN] username / password -> bearer token
@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(UserModel).filter(UserModel.username == request.username).first()
    if user is None or not verify_password(request.password, user.password_hash):
        logger.warning(f"failed login for '{request.username}'")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_access_token(user.id, user.username, user.role)
    logger.info(f"login: {user.username} ({user.role})")
    return ok(LoginResponse(token=token, user=UserOut.model_validate(user)))


# ✅ [ME] current principal with profile fields
@router.get("/me")
def me(user: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    record = db.query(UserModel).filter(UserModel.id == user.user_id).first()
    if record is None:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return ok(UserOut.model_validate(record))
