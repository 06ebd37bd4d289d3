from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from textile_pos.config import Settings
from textile_pos.core.constants import DEFAULT_HOME_PATH
from textile_pos.core.shop_login import check_credentials, login_required, sign_in, sign_out, signed_in_user
from textile_pos.dependencies import get_app_settings

router = APIRouter(tags=["Auth"])


def _login_page(request: Request, settings: Settings, error=None, status_code=200):
    return request.app.state.templates.TemplateResponse(
        "login.html",
        {
            "request": request,
            "shop_title": settings.APP_NAME,
            "error": error,
            "auth_enabled": login_required(settings),
        },
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, settings: Settings = Depends(get_app_settings)):
    if login_required(settings) and signed_in_user(request):
        return RedirectResponse(url=DEFAULT_HOME_PATH, status_code=303)
    return _login_page(request, settings)


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    settings: Settings = Depends(get_app_settings),
):
    if not login_required(settings):
        # Nothing to sign in to; the till is open.
        return RedirectResponse(url=DEFAULT_HOME_PATH, status_code=303)

    try:
        accepted = check_credentials(settings, username, password)
    except ValueError as exc:
        return _login_page(request, settings, error=str(exc), status_code=500)

    if not accepted:
        return _login_page(request, settings, error="Invalid login ID or password.", status_code=401)
    sign_in(request, username)
    return RedirectResponse(url=DEFAULT_HOME_PATH, status_code=303)


@router.post("/logout")
def logout(request: Request):
    sign_out(request)
    return RedirectResponse(url="/login", status_code=303)


__all__ = ["router"]
