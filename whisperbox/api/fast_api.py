"""
FastAPI Router: Accounts, Sessions, Inbox and Suggestions API

This module defines the HTTP API endpoints exposed by the backend. It handles:
- Account registration, username availability and email verification
- Sign in / sign out with a JWT session cookie
- The owner's inbox: acceptance flag, listing and deleting messages
- Anonymous message submission to a public inbox
- Message suggestions streamed from an LLM

Each endpoint validates input via Pydantic models and returns structured
responses. Failures are raised as `core.errors` exceptions and rendered by
the handlers installed in `whisperbox.main.create_app`.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from whisperbox.api.models import (
    USERNAME_PATTERN,
    AcceptanceStatus,
    AcceptanceUpdated,
    AcceptMessages,
    ApiResponse,
    MessageList,
    MessageOut,
    NewMessage,
    SessionResponse,
    UserCredentials,
    UserData,
    UserDetails,
    VerifCode,
)
from whisperbox.api.suggestions import build_suggestion_model, generate_suggestions, stream_suggestions
from whisperbox.api.utils import (
    COOKIE_NAME,
    create_access_token,
    get_db,
    get_mailer,
    get_principal,
    get_settings,
    set_session_cookie,
)
from whisperbox.database.config.config import Settings
from whisperbox.database.core.errors import ConflictError
from whisperbox.database.core.funcs import (
    Principal,
    check_create_account,
    check_username_available,
    check_verification_code,
    delete_message,
    get_accepting_status,
    get_account_messages,
    login_account,
    send_message,
    set_accepting_status,
)
from whisperbox.database.core.mailer import VerificationMailer

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


@router.post("/accounts", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register(
    data: UserData,
    db: Session = Depends(get_db),
    mailer: VerificationMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """
    Register a new account and email it a verification code.

    Request Body
    ------------
    UserData {username: str, email: str, password: str}

    Raises
    ------
    ConflictError 400
        If a verified account owns the username or the email.
    InternalError 500
        If the verification email could not be delivered.
    """
    await check_create_account(
        db, mailer, settings, username=data.username, email=data.email, password=data.password
    )
    return ApiResponse(
        success=True,
        message="User registered successfully. Please check your email to verify your account.",
    )


@router.get("/accounts/username-available", response_model=ApiResponse)
def username_available(
    u: str = Query(..., min_length=2, max_length=20, pattern=USERNAME_PATTERN),
    db: Session = Depends(get_db),
):
    """Report whether `u` is free; only verified accounts hold a username."""
    if not check_username_available(db, u.strip()):
        raise ConflictError("Username is already taken")
    return ApiResponse(success=True, message="Username is available")


@router.post("/accounts/verify", response_model=ApiResponse)
def verify(data: VerifCode, db: Session = Depends(get_db)):
    """
    Verify an account with the emailed code.

    Raises
    ------
    NotFoundError 404
        If the username is unknown.
    CodeExpiredError / IncorrectCodeError 400
        If the code expired or does not match.
    """
    check_verification_code(db, username=data.username, code=data.code)
    return ApiResponse(success=True, message="Account verified successfully")


@router.post("/sessions", response_model=SessionResponse)
def login(
    data: UserCredentials,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Authenticate by username or email and set the JWT as cookie.

    Raises
    ------
    NotFoundError 404, ForbiddenError 403, UnauthorizedError 401
        Unknown identifier, unverified account, wrong password.
    """
    principal = login_account(db, identifier=data.identifier.strip(), password=data.password)
    set_session_cookie(response, create_access_token(principal, settings), settings)
    return SessionResponse(
        success=True,
        message="Signed in successfully",
        user_details=UserDetails.model_validate(principal),
    )


@router.delete("/sessions", response_model=ApiResponse)
def logout(response: Response):
    """Sign out by clearing the session cookie."""
    response.delete_cookie(key=COOKIE_NAME)
    return ApiResponse(success=True, message="Signed out successfully")


@router.get("/inbox/acceptance", response_model=AcceptanceStatus)
def get_acceptance(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return AcceptanceStatus(is_accepting_messages=get_accepting_status(db, principal))


@router.post("/inbox/acceptance", response_model=AcceptanceUpdated)
def set_acceptance(
    data: AcceptMessages,
    response: Response,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Toggle acceptance of new messages and refresh the session cookie with the new flag."""
    account = set_accepting_status(db, principal, data.accept_messages)
    refreshed = Principal.from_account(account)
    set_session_cookie(response, create_access_token(refreshed, settings), settings)
    return AcceptanceUpdated(
        success=True,
        message="Message acceptance status updated successfully",
        user=UserDetails.model_validate(account),
    )


@router.get("/inbox/messages", response_model=MessageList)
def list_messages(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    """The signed-in user's messages, newest first."""
    messages = get_account_messages(db, principal)
    return MessageList(messages=[MessageOut.model_validate(m) for m in messages])


@router.post("/inbox/{username}/messages", response_model=ApiResponse)
def submit_message(username: str, data: NewMessage, db: Session = Depends(get_db)):
    """
    Send an anonymous message. No account is needed to send.

    Raises
    ------
    NotFoundError 404
        If no account has this username.
    ForbiddenError 403
        If the account is not accepting messages.
    """
    send_message(db, username=username.strip(), content=data.content)
    return ApiResponse(success=True, message="Message sent successfully")


@router.delete("/inbox/messages/{message_id}", response_model=ApiResponse)
def remove_message(
    message_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    delete_message(db, principal, message_id)
    return ApiResponse(success=True, message="Message deleted successfully")


def get_suggestion_model(request: Request):
    """Build the chat model on first use and keep it on `app.state`."""
    model = getattr(request.app.state, "suggestion_model", None)
    if model is None:
        model = build_suggestion_model(request.app.state.settings)
        request.app.state.suggestion_model = model
    return model


@router.post("/suggestions")
async def suggest_messages(stream: bool = True, model=Depends(get_suggestion_model)):
    """
    Suggest three questions a visitor could send.

    Returns
    -------
    StreamingResponse
        Server-sent events `data: {"response": str, "status": int}` when `stream` is true.
    dict
        `{"success": true, "suggestions": [str, ...]}` otherwise.
    """
    if stream:
        return StreamingResponse(stream_suggestions(model), media_type="text/event-stream")
    return {"success": True, "suggestions": await generate_suggestions(model)}
