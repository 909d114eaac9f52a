import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from . import service
from .schemas import RefreshedToken

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


@router.get("/login")
def login(request: Request):
    settings = request.app.state.settings
    state = service.generate_random_string(service.STATE_LENGTH)
    response = _redirect(service.build_authorization_url(settings, state))
    response.set_cookie(service.STATE_KEY, state)
    return response


@router.get("/callback")
async def callback(
    request: Request,
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
):
    settings = request.app.state.settings
    stored_state = request.cookies.get(service.STATE_KEY)
    if not state or state != stored_state:
        logger.warning("Rejected callback with mismatched state")
        return _redirect(service.frontend_error_url(settings, "state_mismatch"))

    if not code:
        logger.warning("Callback carried a valid state but no authorization code")
        response = _redirect(service.frontend_error_url(settings, "invalid_token"))
    else:
        try:
            tokens = await service.exchange_code_for_tokens(
                settings, code, transport=request.app.state.transport
            )
        except service.TokenEndpointError:
            response = _redirect(service.frontend_error_url(settings, "invalid_token"))
        else:
            response = _redirect(service.frontend_token_url(settings, tokens))
    response.delete_cookie(service.STATE_KEY)
    return response


@router.get("/refresh_token", response_model=RefreshedToken)
async def refresh_token(request: Request, refresh_token: str = Query(...)):
    settings = request.app.state.settings
    try:
        access_token = await service.refresh_access_token(
            settings, refresh_token, transport=request.app.state.transport
        )
    except service.TokenEndpointTimeout as exc:
        raise HTTPException(504, str(exc)) from exc
    except service.TokenEndpointError as exc:
        raise HTTPException(502, str(exc)) from exc
    return RefreshedToken(access_token=access_token)
