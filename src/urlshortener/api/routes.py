from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from urlshortener.api.deps import app_settings, require_admin_token
from urlshortener.core.config import Settings
from urlshortener.core.url_rules import build_short_url
from urlshortener.db.session import get_db
from urlshortener.schemas.links import ShortenRequest, ShortenResponse, UrlMappingResponse
from urlshortener.services import links

router = APIRouter(prefix="/api")


@router.post("/shorten", response_model=ShortenResponse)
def shorten(
    req: ShortenRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(app_settings),
):
    result = links.shorten_url(
        db,
        req.original_url,
        code_length=settings.short_code_length,
        max_attempts=settings.max_allocation_attempts,
    )
    code = result.mapping.short_code

    return ShortenResponse(
        short_url=build_short_url(settings.base_url, code),
        short_code=code,
    )


@router.get(
    "/admin/urls",
    response_model=list[UrlMappingResponse],
    dependencies=[Depends(require_admin_token)],
)
def list_urls(db: Session = Depends(get_db)):
    return links.list_mappings(db)
