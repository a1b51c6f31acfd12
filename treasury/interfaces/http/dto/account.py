from __future__ import annotations

from pydantic import BaseModel, Field

LOGIN_PATTERN = r"^[a-zA-Z0-9][a-zA-Z0-9_.\-]*$"
CLAIM_CODE_PATTERN = r"^[a-zA-Z0-9]+$"
SALT_PATTERN = r"^[a-zA-Z0-9_\-]+$"


class ClaimAccountRequestDTO(BaseModel):
    code: str = Field(min_length=1, max_length=64, pattern=CLAIM_CODE_PATTERN)
    login: str = Field(min_length=3, max_length=64, pattern=LOGIN_PATTERN)
    proof: str = Field(min_length=1, max_length=512)
    salt: str | None = Field(default=None, min_length=8, max_length=128, pattern=SALT_PATTERN)


class CheckClaimCodeRequestDTO(BaseModel):
    code: str = Field(min_length=1, max_length=64)


class GetUserSaltRequestDTO(BaseModel):
    login: str = Field(min_length=1, max_length=64)


class LoginRequestDTO(BaseModel):
    login: str = Field(min_length=1, max_length=64)
    proof: str = Field(min_length=1, max_length=512)


class AuthSuccessDTO(BaseModel):
    ok: bool = True
    login: str


class ClaimCodeStatusDTO(BaseModel):
    valid: bool


class UserSaltDTO(BaseModel):
    salt: str


class SessionInfoDTO(BaseModel):
    account_id: int
    login: str
