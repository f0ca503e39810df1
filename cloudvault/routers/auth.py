from fastapi import APIRouter, Depends

from cloudvault.dependencies import Services, get_services
from cloudvault.schemas import LoginRequest, LoginResponse, SignupRequest, SignupResponse, UserOut

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse)
def signup(body: SignupRequest, services: Services = Depends(get_services)):
    user = services.accounts.signup(body.email, body.password, name=body.name)
    return SignupResponse(message="User created successfully", user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, services: Services = Depends(get_services)):
    token = services.accounts.login(body.email, body.password)
    return LoginResponse(message="Login successful", token=token)
