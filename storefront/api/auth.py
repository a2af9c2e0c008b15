from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from storefront.api.responses import created, ok
from storefront.db.session import get_db
from storefront.models.schemas import LoginOut, Token, UserCreate, UserLogin, UserOut
from storefront.services import users_service

router = APIRouter()


@router.post("/register", status_code=201)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    user = users_service.register_user(db, payload.username, payload.email, payload.password)
    return created(UserOut.model_validate(user), "User registered successfully")


@router.post("/login")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    token, user = users_service.login(db, payload.email, payload.password)
    data = LoginOut(token=Token(access_token=token), user=UserOut.model_validate(user))
    return ok(data, "Login successful")


@router.post("/token", response_model=Token)
def token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 clients expect a bare token body; the username field carries the email
    access_token, _ = users_service.login(db, form_data.username, form_data.password)
    return Token(access_token=access_token)
