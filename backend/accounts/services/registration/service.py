"""
UserRegistrationService
=======================

Process-level service that registers a new account:

- Rejects blank fields and already-taken usernames/emails.
- Pushes the avatar (required) and cover image (optional) to the image host.
- Creates the ``User`` in a single transaction and returns its public view.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from accounts.repositories.user import UserRepository
from accounts.services._shared.base import BaseService
from accounts.services._shared.errors import (
    ConflictError,
    InternalServiceError,
    ValidationFailedError,
)
from accounts.services._shared.ports.image_uploader import ImageUploader
from accounts.services.auth.dto import UserPublicOut, to_user_public
from accounts.services.registration.dto import RegistrationFiles, UserRegistrationIn

log = logging.getLogger(__name__)


class UserRegistrationService(BaseService):
    """
    Orchestrates the user registration process.
    """

    def __init__(self, *, uploader: ImageUploader) -> None:
        super().__init__()
        self.uploader = uploader

    def register(self, dto: UserRegistrationIn, files: RegistrationFiles) -> UserPublicOut:
        """
        Register a user from form fields and staged image files.

        :param dto: Registration input.
        :type dto: :class:`UserRegistrationIn`
        :param files: Staged upload paths.
        :type files: :class:`RegistrationFiles`
        :returns: Public projection of the created user.
        :rtype: :class:`UserPublicOut`
        :raises ValidationFailedError: Blank field, or the avatar is missing
            or could not be uploaded.
        :raises ConflictError: Username or email already taken.
        :raises InternalServiceError: The created row cannot be read back.
        """
        fields = (dto.full_name, dto.email, dto.username, dto.password)
        if any(not (value or "").strip() for value in fields):
            raise ValidationFailedError("All fields are required")

        with self.ro_uow() as uow_ro:
            users_ro: UserRepository = uow_ro.users
            if users_ro.exists_by_username_or_email(username=dto.username, email=dto.email):
                raise ConflictError("User already exists")

        if not files.avatar_path:
            raise ValidationFailedError("Avatar file is required")

        avatar = self.uploader.upload(files.avatar_path)
        cover_image = self.uploader.upload(files.cover_image_path)
        if avatar is None:
            raise ValidationFailedError("Avatar file is required")

        try:
            with self.rw_uow() as uow:
                users_rw: UserRepository = uow.users
                user = users_rw.model(
                    full_name=dto.full_name.strip(),
                    email=dto.email,
                    username=dto.username,
                    avatar=avatar.url,
                    cover_image=cover_image.url if cover_image else "",
                )
                user.password = dto.password  # model setter hashes
                users_rw.add(user)
                user_id = user.id
        except IntegrityError as exc:
            # Lost a race against a concurrent registration of the same keys
            raise ConflictError("User already exists") from exc
        except ValueError as exc:
            raise ValidationFailedError(str(exc)) from exc

        with self.ro_uow() as uow_check:
            created = uow_check.users.get(user_id)
            if created is None:
                raise InternalServiceError("Something went wrong while registering the user")
            public = to_user_public(created)

        log.info("user.registered", extra={"event": "user.register", "user_id": public.id})
        return public
