"""
The `api` package defines the backend's HTTP interface, along with
supporting utilities and data models.

It integrates FastAPI routing, JWT cookie sessions and LLM-backed message
suggestions. The package ensures clean request/response validation and
owner-only access control.

Contents
--------
- fast_api
    Defines the FastAPI router with endpoints for:
        * Registration, username availability and email verification
        * Sign in and sign out
        * Inbox acceptance flag, listing and deleting messages
        * Anonymous message submission
        * Streaming message suggestions

- models
    Pydantic schemas for request/response validation:
        * Registration, verification and credential payloads
        * Acceptance and message payloads
        * Response envelopes

- utils
    JWT utilities and dependencies:
        * `create_access_token` - issues signed JWTs with expiration
        * `verify_token` - validates JWTs and rebuilds the `Principal`
        * `get_db`, `get_principal`, `get_mailer`, `get_settings`

- suggestions
    Prompt and streaming helpers around LangChain's `ChatOpenAI`.
"""
