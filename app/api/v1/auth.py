from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from app.core.auth.service import AuthService
from app.core.auth.schemas import UserRegister, UserLogin, TokenResponse, UserResponse
from app.core.auth.dependencies import get_current_user
from app.config.settings import Settings
from app.core.dependencies import get_settings, get_storage
from app.shared.schemas.common import UserRecord
from app.shared.storage.base import Storage

router = APIRouter()


def _token_for(user: UserRecord, config: Settings) -> TokenResponse:
    access_token = AuthService.create_access_token(data={
        "user_id": user.id,
        "username": user.username,
        "role": user.role
    }, config=config)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


def _authenticate(storage: Storage, username: str, password: str) -> UserRecord:
    credentials = storage.get_credentials(username)

    if not credentials or not AuthService.verify_password(password, credentials.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return storage.get_user(credentials.id)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Create an account and return an access token

    **Roles:**
    - sender: requests deliveries
    - carrier: accepts and carries deliveries
    - both: default
    """
    user = storage.create_user(
        username=user_data.username,
        password_hash=AuthService.get_password_hash(user_data.password),
        full_name=user_data.full_name,
        role=user_data.role
    )
    return _token_for(user, config)


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    OAuth2 form login

    **Parameters:**
    - **username**: account username
    - **password**: account password
    """
    user = _authenticate(storage, form_data.username, form_data.password)
    return _token_for(user, config)


@router.post("/login-json", response_model=TokenResponse)
async def login_json(
    user_login: UserLogin,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Alternative login accepting JSON

    **Body:**
    ```json
        {
            "username": "john_sender",
            "password": "password123"
        }
    ```
    """
    user = _authenticate(storage, user_login.username, user_login.password)
    return _token_for(user, config)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: UserRecord = Depends(get_current_user)
):
    """
    Current user
    **Required headers:**
    - Authorization: Bearer {token}
    """
    return UserResponse.model_validate(current_user)


@router.post("/logout")
async def logout():
    """Stateless JWT: the client just drops its token"""
    return {"message": "Logged out. Remove the token on the client."}
