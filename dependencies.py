# dependencies.py
"""FastAPI dependencies shared by the routers."""
from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from config import get_settings
from database import get_session
from errors import AuthenticationError, AuthorizationError
from models import User
from services.data_source import FinancialDataSource


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     """Decode the bearer token; 401 when missing, 403 when it does not verify."""
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise AuthenticationError("Missing token")
     token = auth.split(" ", 1)[1].strip()
     settings = get_settings()
     try:
          return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
     except JWTError:
          raise AuthorizationError("Invalid token")


def get_current_user_id(token: dict = Depends(verify_token), db: Session = Depends(get_session)) -> int:
     """The id claim of the token, checked against the users table."""
     try:
          user_id = int(token.get("id"))
     except (TypeError, ValueError):
          raise AuthenticationError("Token has no user id")
     if db.get(User, user_id) is None:
          raise AuthenticationError("Unknown user")
     return user_id


def get_data_source(request: Request, db: Session = Depends(get_session)) -> FinancialDataSource:
     """The financial data source chosen at startup, bound to this request's session."""
     return request.app.state.data_source_factory(db)
