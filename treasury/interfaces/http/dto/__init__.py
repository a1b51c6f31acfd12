from .account import (
    AuthSuccessDTO,
    CheckClaimCodeRequestDTO,
    ClaimAccountRequestDTO,
    ClaimCodeStatusDTO,
    GetUserSaltRequestDTO,
    LoginRequestDTO,
    SessionInfoDTO,
    UserSaltDTO,
)
from .filesystem import CreateFolderRequestDTO, GetFilesystemRequestDTO, StorageUsedDTO

__all__ = [
    "AuthSuccessDTO",
    "CheckClaimCodeRequestDTO",
    "ClaimAccountRequestDTO",
    "ClaimCodeStatusDTO",
    "CreateFolderRequestDTO",
    "GetFilesystemRequestDTO",
    "GetUserSaltRequestDTO",
    "LoginRequestDTO",
    "SessionInfoDTO",
    "StorageUsedDTO",
    "UserSaltDTO",
]
