"""
DTOs for UserRegistrationService.

Contracts for the self-registration flow: text fields from the form plus
the local paths of the staged image files.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegistrationIn:
    """
    Input payload for the registration process.

    :param full_name: Display name.
    :type full_name: str
    :param email: Login email (normalized to lowercase+trim by the model).
    :type email: str
    :param username: Public handle (unique, stored lower-cased).
    :type username: str
    :param password: Raw password (the model setter hashes it).
    :type password: str
    """

    full_name: str
    email: str
    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RegistrationFiles:
    """
    Local paths of the staged uploads.

    :param avatar_path: Staged avatar file; required by the flow.
    :type avatar_path: str | None
    :param cover_image_path: Staged cover image, optional.
    :type cover_image_path: str | None
    """

    avatar_path: str | None
    cover_image_path: str | None = None
