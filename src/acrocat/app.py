# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from acrocat import api
from acrocat.auth import csrf
from acrocat.auth import session as sessions
from acrocat.auth.session import SessionStore, sign_session, verify_session
from acrocat.auth.users import authenticate, seed_users
from acrocat.config import cookie_name, session_max_age
from acrocat.errors import CsrfMismatch, Forbidden, NotFound, Unauthorized, ValidationFailed
from acrocat.infra.db import SessionLocal, get_db, init_db
from acrocat.infra.models import Acronym, Category, User
from acrocat.infra.queries import (
    acronyms_for_category,
    acronyms_for_user,
    all_acronyms,
    all_categories,
    all_users,
    categories_for_acronym,
    get_or_404,
)
from acrocat.permissions import cookie_settings, current_user_optional, get_session, require_user
from acrocat.services.acronym_service import (
    AcronymForm,
    create_acronym,
    delete_acronym,
    edit_acronym,
    may_modify,
    require_may_modify,
)
from acrocat.services.registration_service import RegisterData, register

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    with SessionLocal() as db:
        seed_users(db)
    yield


app = FastAPI(lifespan=lifespan)
app.state.sessions = SessionStore()

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _load_user(handle: sessions.SessionHandle) -> Optional[User]:
    with SessionLocal() as db:
        return sessions.current_user(db, handle)


@app.middleware("http")
async def _session_middleware(request: Request, call_next):
    path = request.url.path
    if path.startswith("/api") or path.startswith("/static"):
        return await call_next(request)

    store: SessionStore = request.app.state.sessions
    sid = verify_session(request.cookies.get(cookie_name(), ""))
    fresh = not sid or not store.exists(sid)
    if fresh:
        sid = store.create()
    handle = sessions.SessionHandle(store, sid)
    request.state.session = handle
    request.state.user = await run_in_threadpool(_load_user, handle)

    response = await call_next(request)
    if fresh or handle.sid != sid:
        response.set_cookie(cookie_name(), sign_session(handle.sid), max_age=session_max_age(), **cookie_settings())
    return response


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api")


def _render(request: Request, template_name: str, ctx: dict, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the logged-in user.

    Contexts are plain dicts holding fully loaded rows; nothing is queried
    while the template renders.
    """
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _error(request: Request, status_code: int, message: str):
    if _is_api(request):
        return JSONResponse({"detail": message}, status_code=status_code)
    return _render(request, "error.html", {"title": "Error", "status": status_code, "message": message},
                   status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


@app.exception_handler(NotFound)
async def _not_found(request: Request, exc: NotFound):
    return _error(request, 404, "Not found")


@app.exception_handler(Unauthorized)
async def _unauthorized(request: Request, exc: Unauthorized):
    if _is_api(request):
        return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    return _redirect("/login")


@app.exception_handler(Forbidden)
async def _forbidden(request: Request, exc: Forbidden):
    logger.warning("Forbidden: %s", exc)
    return _error(request, 403, "You may only change your own acronyms")


@app.exception_handler(CsrfMismatch)
async def _csrf_mismatch(request: Request, exc: CsrfMismatch):
    return _error(request, 400, "The form has expired, please reload it and try again")


@app.exception_handler(SQLAlchemyError)
async def _storage_failure(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return _error(request, 500, "Internal server error")


# ------------------ Protected pages ------------------

protected = APIRouter(dependencies=[Depends(require_user)])


def _form_context(request: Request, *, title: str, token: str, acronym: Optional[Acronym] = None,
                  categories: Optional[List[Category]] = None) -> dict:
    return {
        "title": title,
        "csrf_token": token,
        "editing": acronym is not None,
        "acronym": acronym,
        "categories": categories or [],
        "message": request.query_params.get("message", ""),
    }


@protected.get("/acronyms/create", response_class=HTMLResponse)
def create_acronym_get(request: Request):
    token = csrf.issue(get_session(request))
    return _render(request, "createAcronym.html", _form_context(request, title="Create An Acronym", token=token))


@protected.post("/acronyms/create")
def create_acronym_post(
    request: Request,
    short: str = Form(""),
    long: str = Form(""),
    categories: List[str] = Form([]),
    csrf_token: str = Form("", alias="csrfToken"),
    db: Session = Depends(get_db),
):
    form = AcronymForm(short=short, long=long, categories=categories, csrf_token=csrf_token)
    try:
        acronym = create_acronym(db, get_session(request), form)
    except ValidationFailed as e:
        return _redirect(f"/acronyms/create?message={quote(e.reason)}")
    return _redirect(f"/acronyms/{acronym.id}")


@protected.get("/acronyms/{acronym_id}/edit", response_class=HTMLResponse)
def edit_acronym_get(
    request: Request,
    acronym_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    acronym = get_or_404(db, Acronym, acronym_id)
    require_may_modify(user, acronym)
    categories = categories_for_acronym(db, acronym.id)
    token = csrf.issue(get_session(request))
    return _render(
        request,
        "createAcronym.html",
        _form_context(request, title="Edit Acronym", token=token, acronym=acronym, categories=categories),
    )


@protected.post("/acronyms/{acronym_id}/edit")
def edit_acronym_post(
    request: Request,
    acronym_id: int,
    short: str = Form(""),
    long: str = Form(""),
    categories: List[str] = Form([]),
    csrf_token: str = Form("", alias="csrfToken"),
    db: Session = Depends(get_db),
):
    form = AcronymForm(short=short, long=long, categories=categories, csrf_token=csrf_token)
    try:
        acronym = edit_acronym(db, get_session(request), acronym_id, form)
    except ValidationFailed as e:
        return _redirect(f"/acronyms/{acronym_id}/edit?message={quote(e.reason)}")
    return _redirect(f"/acronyms/{acronym.id}")


@protected.post("/acronyms/{acronym_id}/delete")
def delete_acronym_post(request: Request, acronym_id: int, db: Session = Depends(get_db)):
    delete_acronym(db, get_session(request), acronym_id)
    return _redirect("/")


# ------------------ Public pages ------------------

pages = APIRouter()


@pages.get("/", response_class=HTMLResponse)
def index(request: Request, user=Depends(current_user_optional), db: Session = Depends(get_db)):
    acronyms = all_acronyms(db)
    return _render(
        request,
        "index.html",
        {
            "title": "Homepage",
            "acronyms": acronyms,
            "user_logged_in": user is not None,
            "show_cookie_message": "cookies-accepted" not in request.cookies,
        },
    )


@pages.get("/acronyms/{acronym_id}", response_class=HTMLResponse)
def acronym_page(request: Request, acronym_id: int, user=Depends(current_user_optional),
                 db: Session = Depends(get_db)):
    acronym = get_or_404(db, Acronym, acronym_id)
    return _render(
        request,
        "acronym.html",
        {
            "title": acronym.short,
            "acronym": acronym,
            "user": acronym.user,
            "categories": categories_for_acronym(db, acronym.id),
            "can_modify": user is not None and may_modify(user, acronym),
        },
    )


@pages.get("/users", response_class=HTMLResponse)
def all_users_page(request: Request, user=Depends(current_user_optional), db: Session = Depends(get_db)):
    return _render(request, "allUsers.html", {"title": "All Users", "users": all_users(db)})


@pages.get("/users/{user_id}", response_class=HTMLResponse)
def user_page(request: Request, user_id: int, user=Depends(current_user_optional), db: Session = Depends(get_db)):
    owner = get_or_404(db, User, user_id)
    return _render(
        request,
        "user.html",
        {"title": owner.name, "user": owner, "acronyms": acronyms_for_user(db, owner.id)},
    )


@pages.get("/categories", response_class=HTMLResponse)
def all_categories_page(request: Request, user=Depends(current_user_optional), db: Session = Depends(get_db)):
    return _render(request, "allCategories.html", {"title": "All Categories", "categories": all_categories(db)})


@pages.get("/categories/{category_id}", response_class=HTMLResponse)
def category_page(request: Request, category_id: int, user=Depends(current_user_optional),
                  db: Session = Depends(get_db)):
    category = get_or_404(db, Category, category_id)
    return _render(
        request,
        "category.html",
        {"title": category.name, "category": category, "acronyms": acronyms_for_category(db, category.id)},
    )


@pages.get("/login", response_class=HTMLResponse)
def login_get(request: Request, user=Depends(current_user_optional)):
    if user is not None:
        return _redirect("/")
    return _render(request, "login.html", {"title": "Log In", "login_error": "error" in request.query_params})


@pages.post("/login")
def login_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    u = authenticate(db, username=username, password=password)
    if not u:
        logger.info("Login failed for %s", username)
        return _redirect("/login?error")
    sessions.login(get_session(request), u)
    logger.info("Login: %s", u.username)
    return _redirect("/")


@pages.post("/logout")
def logout_post(request: Request):
    sessions.logout(get_session(request))
    return _redirect("/")


@pages.get("/register", response_class=HTMLResponse)
def register_get(request: Request, user=Depends(current_user_optional)):
    return _render(request, "register.html", {"title": "Register", "message": request.query_params.get("message", "")})


@pages.post("/register")
def register_post(
    request: Request,
    name: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
    db: Session = Depends(get_db),
):
    data = RegisterData(name=name, username=username, password=password, confirm_password=confirm_password)
    try:
        user = register(db, data)
    except ValidationFailed as e:
        return _redirect(f"/register?message={quote(e.reason)}")
    sessions.login(get_session(request), user)
    return _redirect("/")


app.include_router(api.router)
app.include_router(protected)
app.include_router(pages)
