import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from auth import router as auth_router
from auth import session
from auth.dependencies import SignInRequired
from core.logs import configure_logging
from todos import router as todos_router
from todos.persistence import TodoNotFoundError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI()

# Signed cookie session holding the username, the signed-in flag and flash messages.
app.add_middleware(
    SessionMiddleware,
    secret_key=session.session_secret(),
    session_cookie=session.session_cookie_name(),
    max_age=session.session_max_age_s(),
    https_only=session.session_https_only(),
    same_site="lax",
)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(todos_router.router, tags=["todos"])


@app.exception_handler(SignInRequired)
async def redirect_to_signin(_: Request, __: SignInRequired) -> RedirectResponse:
    return RedirectResponse(url="/users/signin", status_code=302)


@app.exception_handler(TodoNotFoundError)
async def not_found(request: Request, exc: TodoNotFoundError) -> PlainTextResponse:
    logger.error("not_found path=%s", request.url.path, exc_info=exc)
    return PlainTextResponse(exc.message, status_code=404)


@app.exception_handler(Exception)
async def request_failed(request: Request, exc: Exception) -> PlainTextResponse:
    # Store and other unexpected failures: full detail in the log, only the
    # message for the client.
    logger.error("request_failed path=%s", request.url.path, exc_info=exc)
    return PlainTextResponse(str(exc), status_code=404)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> RedirectResponse:
    return RedirectResponse(url="/lists", status_code=302)
