from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from acadpilot.auth.dependencies import get_optional_user
from acadpilot.auth.schemas import PublicUser
from acadpilot.models.user import ROLE_TUTOR

router = APIRouter(tags=['pages'])

ROLE_LABELS = {ROLE_TUTOR: 'Tutor'}


@router.get('/dashboard')
def dashboard(user: PublicUser | None = Depends(get_optional_user)):
    if user is None:
        return RedirectResponse(url='/login', status_code=302)

    role_label = ROLE_LABELS.get(user.role, 'Student')
    institution = f' · {escape(user.institution)}' if user.institution else ''
    return HTMLResponse(
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        '<title>Dashboard - Acad Co-Pilot</title></head><body>'
        f'<h1>Welcome back, {escape(user.name)}</h1>'
        f'<p><span class="user-badge role-{escape(user.role)}">{role_label}</span>'
        f' {escape(user.email)}{institution}</p>'
        '</body></html>'
    )


@router.get('/login')
def login_page(user: PublicUser | None = Depends(get_optional_user)):
    if user is not None:
        return RedirectResponse(url='/dashboard', status_code=302)

    # The form is submitted as JSON to /api/auth/login by /static/auth.js.
    return HTMLResponse(
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        '<title>Log in - Acad Co-Pilot</title></head><body>'
        '<h1>Welcome back</h1>'
        '<form id="login-form" class="auth-form" autocomplete="off">'
        '<label for="email">Email</label>'
        '<input type="email" id="email" name="email" required autocomplete="email">'
        '<label for="password">Password</label>'
        '<input type="password" id="password" name="password" required autocomplete="current-password">'
        '<button type="submit">Log in</button>'
        '</form>'
        '<script src="/static/auth.js"></script>'
        '</body></html>'
    )
