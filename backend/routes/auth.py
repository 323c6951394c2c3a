# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas import user as schemas
from services.cart import merge_guest_cart
from services.errors import DuplicateUser, Unauthorized
from utils.audit import client_ip, write_log
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(tags=["Auth"])

# Register a new customer account
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Normalize identifiers
    username = user.username.strip()
    normalized_email = user.email.strip().lower()

    # Check for existing user
    db_user = db.query(User).filter(
        or_(func.lower(User.username) == username.lower(), func.lower(User.email) == normalized_email)
    ).first()
    if db_user:
        write_log(
            db,
            user_id=None,
            action="REGISTER",
            resource="auth",
            status="FAIL",
            ip=client_ip(request),
            meta={"username": username, "reason": "User exists"},
        )
        raise DuplicateUser()

    # Create new user instance with hashed password
    new_user = User(
        username=username,
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        full_name=user.full_name,
        phone_number=user.phone_number,
        address=user.address,
        is_admin=False,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    # Log successful registration event
    write_log(
        db,
        user_id=new_user.id,
        action="REGISTER",
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"username": new_user.username},
    )
    return new_user


# Authenticate user, issue JWT token and move the guest cart into the account
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.username == payload.username).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"username": payload.username})
        raise Unauthorized("Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.username, "admin": bool(db_user.is_admin)})
    merged = merge_guest_cart(db, request.session, db_user.id)

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"merged_cart_lines": merged})

    return {"access_token": access_token, "token_type": "bearer", "merged_cart_lines": merged}


# Forget the guest session (cart, guest orders); bearer tokens simply expire
@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
