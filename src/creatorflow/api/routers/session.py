from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from creatorflow.api import deps
from creatorflow.core.errors import IdentityError
from creatorflow.core.identity import IdentityClient, IdentitySession
from creatorflow.schemas.session import SignUpRequest, SignInRequest, PasswordUpdateRequest, SessionRead
from creatorflow.services.profile import provision_profile

router = APIRouter(prefix="/session", tags=["session"])


def _identity_http_error(e: IdentityError) -> HTTPException:
    code = e.status_code if e.status_code in (400, 401, 403, 422) else http_status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(e))


def _read(session: IdentitySession) -> SessionRead:
    return SessionRead(
        user_id=session.user_id,
        email=session.email,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
    )


@router.post("/signup", response_model=SessionRead, status_code=http_status.HTTP_201_CREATED, summary="Sign up")
async def sign_up(
    payload: SignUpRequest,
    db: AsyncSession = Depends(deps.get_db),
    identity: IdentityClient = Depends(deps.get_identity_client),
):
    try:
        session = await identity.sign_up(payload.email, payload.password, payload.display_name)
    except IdentityError as e:
        raise _identity_http_error(e)
    await provision_profile(db, session.user_id, display_name=payload.display_name)
    await db.commit()
    return _read(session)


@router.post("/signin", response_model=SessionRead, summary="Sign in with email and password")
async def sign_in(
    payload: SignInRequest,
    db: AsyncSession = Depends(deps.get_db),
    identity: IdentityClient = Depends(deps.get_identity_client),
):
    try:
        session = await identity.sign_in(payload.email, payload.password)
    except IdentityError as e:
        raise _identity_http_error(e)
    await provision_profile(db, session.user_id, display_name=session.display_name or "")
    await db.commit()
    return _read(session)


@router.post("/signout", status_code=http_status.HTTP_204_NO_CONTENT, summary="Sign out")
async def sign_out(
    token: str = Depends(deps.bearer_token),
    identity: IdentityClient = Depends(deps.get_identity_client),
):
    try:
        await identity.sign_out(token)
    except IdentityError as e:
        raise _identity_http_error(e)
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)


@router.put("/password", status_code=http_status.HTTP_204_NO_CONTENT, summary="Change password")
async def update_password(
    payload: PasswordUpdateRequest,
    token: str = Depends(deps.bearer_token),
    identity: IdentityClient = Depends(deps.get_identity_client),
):
    try:
        await identity.update_password(token, payload.password)
    except IdentityError as e:
        raise _identity_http_error(e)
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)
