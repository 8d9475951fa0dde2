from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from .config import settings
from .errors import ApiError
from .extractor import extract_links
from .importer import import_links
from .metadata import fetch_meta
from .models import ExtractRequest, FetchMetaRequest, ImportPayload, ImportRequest
from .rules import DomainRules, load_rules
from .storage import LinkStore
from .url_utils import InvalidURLError, validate

app = FastAPI(title="linkharvest")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_rules() -> DomainRules:
    return load_rules(settings.rules_file)


@lru_cache
def get_store() -> LinkStore:
    logger.info(f"Opening link store at {settings.database_path}")
    return LinkStore(settings.database_path)


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Id of the caller, as set by the authenticating proxy in front of this service."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise ApiError("unauthorized", status_code=401)
    return user_id


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "invalid_request"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "internal_error"},
    )


@app.on_event("startup")
def load_static_config():
    get_rules()


@app.get("/")
def health():
    return {"status": "ok"}


@app.post("/extract-links")
def extract(body: Optional[ExtractRequest] = None, rules: DomainRules = Depends(get_rules)):
    try:
        result = extract_links(body.profile_url if body else None, rules)
    except ApiError:
        raise
    except Exception as e:
        logger.exception(f"Link extraction failed: {e}")
        raise ApiError("extraction_failed", status_code=500, details=str(e))

    return {
        "success": True,
        "source": result["source"],
        "links": result["links"].model_dump(by_alias=True),
    }


@app.post("/fetch-meta")
def fetch_meta_endpoint(body: Optional[FetchMetaRequest] = None):
    url = ((body.url if body else None) or "").strip()
    if not url:
        raise ApiError("url_required")
    try:
        url = validate(url)
    except InvalidURLError:
        raise ApiError("invalid_url")

    meta = fetch_meta(url)
    if meta is None:
        return {"success": False, "error": "fetch_failed"}
    return {"success": True, "data": meta.model_dump(by_alias=True)}


@app.post("/import-links")
def import_endpoint(
    body: Optional[ImportRequest] = None,
    user_id: str = Depends(get_user_id),
    store: LinkStore = Depends(get_store),
):
    if body is None or not isinstance(body.links, dict):
        raise ApiError("links_required")
    try:
        links = ImportPayload.model_validate(body.links)
    except ValidationError:
        raise ApiError("links_required")

    try:
        counts = import_links(store, user_id, links)
    except Exception as e:
        logger.exception(f"Import failed for user {user_id}: {e}")
        raise ApiError("import_failed", status_code=500, details=str(e))
    return {"success": True, "imported": counts.model_dump()}


@app.post("/shop-links//click")
def record_click_without_id():
    raise ApiError("link_id_required")


@app.post("/shop-links/{link_id}/click")
def record_click(link_id: str, store: LinkStore = Depends(get_store)):
    link_id = link_id.strip()
    if not link_id:
        raise ApiError("link_id_required")
    if not (link_id.isascii() and link_id.isdigit()):
        raise ApiError("link_not_found", status_code=404)

    clicks = store.record_click(int(link_id))
    if clicks is None:
        raise ApiError("link_not_found", status_code=404)
    return {"success": True, "clicks": clicks}


@app.get("/links")
def list_links(user_id: str = Depends(get_user_id), store: LinkStore = Depends(get_store)):
    return {"success": True, "links": store.list_links(user_id).model_dump(mode="json", by_alias=True)}
