"""User account endpoints: register, login, logout and token refresh."""

from __future__ import annotations

from flask import Blueprint, request
from marshmallow import ValidationError

from accounts.api.cookies import REFRESH_COOKIE, clear_auth_cookies, set_auth_cookies
from accounts.api.deps import (
    api_response,
    auth_service,
    cookie_config,
    current_user_id,
    registration_service,
    require_auth,
    timing,
)
from accounts.api.uploads import discard, stage_upload
from accounts.core.errors import BadRequest
from accounts.schemas import (
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from accounts.services._shared.errors import ServiceError
from accounts.services.auth.dto import LoginIn, RefreshIn
from accounts.services.registration.dto import RegistrationFiles, UserRegistrationIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with avatar/cover image files."""

    try:
        payload = register_schema.load(request.form)
    except ValidationError as exc:
        raise BadRequest("All fields are required", details={"errors": exc.messages}) from exc

    staged: list[str | None] = []
    try:
        avatar_path = stage_upload(request.files.get("avatar"), field="avatar")
        staged.append(avatar_path)
        cover_path = stage_upload(request.files.get("coverImage"), field="coverImage")
        staged.append(cover_path)

        service = registration_service()
        try:
            user = service.register(
                UserRegistrationIn(**payload),
                RegistrationFiles(avatar_path=avatar_path, cover_image_path=cover_path),
            )
        except ServiceError as exc:
            raise service.translate_exceptions(exc) from exc
    finally:
        # The uploader removes what it consumed; anything left is an early failure
        discard(staged)

    return api_response(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate and set the ``accessToken``/``refreshToken`` cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = auth_service()
    try:
        out = service.login(
            LoginIn(password=data["password"], username=data["username"], email=data["email"])
        )
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc

    body = login_response_schema.dump(
        {
            "user": out.user,
            "access_token": out.tokens.access_token,
            "refresh_token": out.tokens.refresh_token,
        }
    )
    response = api_response(body, "User logged in successfully")
    return set_auth_cookies(
        response,
        access_token=out.tokens.access_token,
        refresh_token=out.tokens.refresh_token,
        cfg=cookie_config(),
    )


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Forget the caller's refresh token and clear both cookies."""

    service = auth_service()
    try:
        service.logout(current_user_id())
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return clear_auth_cookies(api_response({}, "User logged out successfully"), cfg=cookie_config())


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token (cookie first, JSON body as fallback)."""

    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        token = refresh_schema.load(request.get_json(silent=True) or {})["refresh_token"]

    service = auth_service()
    try:
        pair = service.renew(RefreshIn(refresh_token=token))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc

    response = api_response(token_pair_schema.dump(pair), "Access token refreshed")
    return set_auth_cookies(
        response,
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        cfg=cookie_config(),
    )
