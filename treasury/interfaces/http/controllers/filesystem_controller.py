# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from treasury.application.services.account_service import AccountService
from treasury.application.services.filesystem_service import FilesystemService
from treasury.interfaces.http.dto.filesystem import (
    CreateFolderRequestDTO,
    GetFilesystemRequestDTO,
    StorageUsedDTO,
)
from treasury.interfaces.http.session_guard import session_required
from treasury.shared.errors.validation import raise_validation_error


class FilesystemController:
    def __init__(self, *, accounts: AccountService, filesystem: FilesystemService) -> None:
        self._accounts = accounts
        self._filesystem = filesystem

    def get_storage_used(self) -> tuple[Response, int]:
        usage = self._filesystem.get_storage_used(g.account_id)
        payload = StorageUsedDTO(used_bytes=usage.used_bytes, quota_bytes=usage.quota_bytes)
        return jsonify(payload.model_dump()), 200

    def get_filesystem(self) -> tuple[Response, int]:
        try:
            dto = GetFilesystemRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        entries = self._filesystem.get_filesystem(g.account_id, dto.folder_id)
        return jsonify({"entries": [entry.to_dict() for entry in entries]}), 200

    def create_folder(self) -> tuple[Response, int]:
        try:
            dto = CreateFolderRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        entry = self._filesystem.create_folder(g.account_id, dto.parent_id, dto.name)
        return jsonify({"entry": entry.to_dict()}), 200

    def as_blueprint(self) -> Blueprint:
        guard = session_required(self._accounts)

        bp = Blueprint("filesystem", __name__, url_prefix="/api")
        bp.add_url_rule(
            "/getstorageused", view_func=guard(self.get_storage_used), methods=["GET"]
        )
        bp.add_url_rule(
            "/getfilesystem", view_func=guard(self.get_filesystem), methods=["POST"]
        )
        bp.add_url_rule("/createfolder", view_func=guard(self.create_folder), methods=["POST"])
        return bp
