"""
Users blueprint:
- POST /api/users/create
- POST /api/users/login
- GET  /api/users
- PUT  /api/users            (Bearer access token)
- POST /api/users/refresh
- POST /api/users/logout

Tokens travel as httpOnly, SameSite=Strict cookies scoped to "/".
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app, make_response

from api.errors import UnauthorizedError, error_response
from api.sessions import SessionCoordinator
from models.schemas.user import UserCredentialsSchema, UserLoginSchema, UserOutSchema
from utils.decorators import bearer_token_required

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

bp = Blueprint("users", __name__, url_prefix="/api/users")

user_credentials_schema = UserCredentialsSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


def _sessions() -> SessionCoordinator:
    return current_app.extensions["sessions"]


def _set_token_cookie(response, name, value, max_age):
    settings = current_app.extensions["settings"]
    response.set_cookie(
        name,
        value,
        max_age=int(max_age.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="Strict",
    )


def _clear_token_cookie(response, name):
    settings = current_app.extensions["settings"]
    response.delete_cookie(
        name,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="Strict",
    )


@bp.post("/create")
def create_user():
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Missing or malformed fields
      500:
        description: User could not be created
    """
    payload = request.get_json(silent=True) or {}
    data = user_credentials_schema.load(payload)
    user = _sessions().register(data["email"], data["password"])
    return jsonify(user_out_schema.dump(user)), 201


@bp.post("/login")
def login():
    """
    Login: sets accessToken and refreshToken cookies
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (tokens set as cookies)
      400:
        description: Missing fields
      401:
        description: Incorrect email or password
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    result = _sessions().login(data["email"], data["password"])

    settings = current_app.extensions["settings"]
    response = make_response(jsonify(user_out_schema.dump(result.user)), 200)
    _set_token_cookie(response, REFRESH_COOKIE, result.refresh_token, settings.refresh_token_lifetime)
    _set_token_cookie(response, ACCESS_COOKIE, result.access_token, settings.access_cookie_max_age)
    return response


@bp.get("")
def get_current_user():
    """
    Get the user behind the accessToken cookie, or null when anonymous.
    ---
    tags:
      - Users
    responses:
      200:
        description: User projection or null
      401:
        description: Invalid access token
    """
    user = _sessions().current_user(
        request.cookies.get(ACCESS_COOKIE),
        request.cookies.get(REFRESH_COOKIE),
    )
    if user is None:
        return jsonify(None), 200
    return jsonify(user_out_schema.dump(user)), 200


@bp.put("")
@bearer_token_required()
def update_credentials():
    """
    Change the caller's email and password.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: Updated user projection
      400:
        description: Missing fields or bearer token
      401:
        description: Invalid access token
    """
    sessions = _sessions()
    # Authenticate before looking at the body
    sessions.authenticate(g.bearer_token)
    payload = request.get_json(silent=True) or {}
    data = user_credentials_schema.load(payload)
    user = sessions.update_credentials(g.bearer_token, data["email"], data["password"])
    return jsonify(user_out_schema.dump(user)), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange the refreshToken cookie for a new accessToken cookie.
    ---
    tags:
      - Users
    responses:
      200:
        description: New accessToken cookie set
      400:
        description: No refresh token cookie
      401:
        description: Refresh token invalid, expired or revoked (cookie cleared)
    """
    try:
        access_token = _sessions().refresh(request.cookies.get(REFRESH_COOKIE))
    except UnauthorizedError as err:
        response = make_response(error_response(err.error, err.message, err.status))
        _clear_token_cookie(response, REFRESH_COOKIE)
        return response

    settings = current_app.extensions["settings"]
    response = make_response("", 200)
    _set_token_cookie(response, ACCESS_COOKIE, access_token, settings.access_cookie_max_age)
    return response


@bp.post("/logout")
def logout():
    """
    Revoke the refreshToken cookie and clear both token cookies.
    ---
    tags:
      - Users
    responses:
      204:
        description: Logged out
      400:
        description: No refresh token cookie
    """
    _sessions().logout(request.cookies.get(REFRESH_COOKIE))
    response = make_response("", 204)
    _clear_token_cookie(response, REFRESH_COOKIE)
    _clear_token_cookie(response, ACCESS_COOKIE)
    return response
