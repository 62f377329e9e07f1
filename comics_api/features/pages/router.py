# comics_api/features/pages/router.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from comics_api.config import config
from comics_api.errors import ComicsError, InternalError
from comics_api.lib.auth import byok_api_key, current_user_id
from comics_api.lib.db import get_db
from comics_api.logger import get_logger

from .gateway import ImageGateway
from .materializer import ResultMaterializer
from .schemas import PageRequest, PageResult
from .service import PageGenerationService, make_quota_gate

router = APIRouter(prefix="/api/v1", tags=["pages"])
log = get_logger(__name__)


def get_image_gateway() -> ImageGateway:
    return ImageGateway(config.image_model)

_materializer: Optional[ResultMaterializer] = None

def get_materializer() -> ResultMaterializer:
    """One per process; its HTTP session is closed on shutdown."""
    global _materializer
    if _materializer is None:
        _materializer = ResultMaterializer()
    return _materializer

def close_materializer() -> None:
    global _materializer
    if _materializer is not None:
        _materializer.close()
        _materializer = None

def get_page_service(
    db: Session = Depends(get_db),
    gateway: ImageGateway = Depends(get_image_gateway),
    materializer: ResultMaterializer = Depends(get_materializer),
) -> PageGenerationService:
    quota = make_quota_gate(db, limit=config.free_tier_limit, window_days=config.free_tier_window_days)
    return PageGenerationService(db, gateway=gateway, materializer=materializer, quota=quota)


@router.post("/pages", response_model=PageResult)
def add_or_redraw_page(
    req: PageRequest,
    user_id: str = Depends(current_user_id),
    api_key: Optional[str] = Depends(byok_api_key),
    service: PageGenerationService = Depends(get_page_service),
):
    """
    Append a new page to a story, or redraw an existing one when `pageId` is
    given. Sync on purpose: FastAPI runs it in the threadpool, and the image
    call can take tens of seconds.
    """
    log.info(f"page request story={req.story_id} page={req.page_id or 'new'} user={user_id}")
    try:
        return service.run(user_id, req, api_key=api_key)
    except ComicsError:
        service.session.rollback()
        raise
    except Exception as e:
        service.session.rollback()
        log.exception("Error in page generation")
        raise InternalError(str(e) or e.__class__.__name__)
