"""Registration and login."""
from __future__ import annotations

from fastapi import APIRouter

from taskhub.api.dependencies import Manager
from taskhub.api.schemas import LoginRequest, RegisterRequest
from taskhub.core.types import LoginResult, RegisterResult

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResult)
async def register(body: RegisterRequest, manager: Manager) -> RegisterResult:
    return await manager.auth.register(body.email, body.password, body.full_name)


@router.post("/login", response_model=LoginResult)
async def login(body: LoginRequest, manager: Manager) -> LoginResult:
    return await manager.auth.login(body.email, body.password)
