import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from bson import ObjectId
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from config import settings
from database import Store, connect
from filters import Equals, Filter, florist_filter, listing_filter
from logging_config import setup_logging
from schemas import (
    FLORISTS,
    LISTINGS,
    DeleteListingBody,
    Florist,
    Listing,
)
from validators import field_errors, join_messages

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

INTERNAL_ERROR = "We have encountered an internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = connect(settings)
    try:
        yield
    finally:
        app.state.store.close()


app = FastAPI(title=settings.project_name, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error responses
@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = field_errors(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, [e.kind for e in errors])
    return JSONResponse(
        status_code=400,
        content={"detail": join_messages(errors), "errors": [e.to_dict() for e in errors]},
    )


@app.exception_handler(PyMongoError)
def store_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


# Utils
def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return store


def object_id(value: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail="Invalid id")
    return ObjectId(value)


def to_public(doc: dict) -> dict:
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


@app.get("/")
def read_root():
    return {"message": "Flower Stop backend running"}


@app.get("/health")
def health(store: Store = Depends(get_store)):
    return {"status": "ok", "database": store.name, "collections": sorted(store.collection_names())}


# Listings Endpoints
@app.get("/listings")
def list_listings(
    name: Optional[str] = None,
    description: Optional[str] = None,
    flower_type: Optional[str] = None,
    occasion: Optional[str] = None,
    price: Optional[float] = Query(None, allow_inf_nan=False),
    price_greater: Optional[float] = Query(None, allow_inf_nan=False),
    price_lesser: Optional[float] = Query(None, allow_inf_nan=False),
    store: Store = Depends(get_store),
):
    query = listing_filter({
        "name": name,
        "description": description,
        "flower_type": flower_type,
        "occasion": occasion,
        "price": price,
        "price_greater": price_greater,
        "price_lesser": price_lesser,
    })
    return [to_public(d) for d in store.find(LISTINGS, query)]


@app.get("/listings/{listing_id}")
def get_listing(listing_id: str, store: Store = Depends(get_store)):
    doc = store.find_by_id(LISTINGS, object_id(listing_id))
    if not doc:
        raise HTTPException(status_code=404, detail="Listing not found")
    return to_public(doc)


@app.post("/listings")
def create_listing(listing: Listing, store: Store = Depends(get_store)):
    listing_id = store.insert_one(LISTINGS, listing)
    return {"inserted_id": listing_id}


@app.put("/listings/{listing_id}")
def replace_listing(listing_id: str, listing: Listing, store: Store = Depends(get_store)):
    matched, modified = store.replace_one(LISTINGS, object_id(listing_id), listing)
    if matched == 0:
        raise HTTPException(status_code=404, detail="Listing not found")
    return {"matched_count": matched, "modified_count": modified}


@app.delete("/listings/{listing_id}")
def delete_listing(
    listing_id: str,
    body: Optional[DeleteListingBody] = None,
    store: Store = Depends(get_store),
):
    oid = object_id(listing_id)
    if body is None or not (body.florist_id and ObjectId.is_valid(body.florist_id) and body.login_email):
        raise HTTPException(status_code=400, detail="Email or florist ID incorrect.")

    # Any registered florist may delete; the listing's own florist_id is not compared
    owner = Filter([Equals("_id", ObjectId(body.florist_id)), Equals("login_email", body.login_email)])
    if store.count(FLORISTS, owner) != 1:
        logger.info("Refused to delete listing %s for florist %s", listing_id, body.florist_id)
        raise HTTPException(status_code=400, detail="Email or florist ID incorrect.")

    deleted = store.delete_one(LISTINGS, oid)
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Listing not found")
    return {"deleted_count": deleted}


# Florists Endpoints
@app.get("/florists")
def list_florists(
    username: Optional[str] = None,
    login_email: Optional[str] = None,
    store: Store = Depends(get_store),
):
    docs = store.find(FLORISTS, florist_filter({"username": username, "login_email": login_email}))
    if username and login_email and not docs:
        raise HTTPException(status_code=400, detail="Username or login email incorrect.")
    return [to_public(d) for d in docs]


@app.get("/florists/{florist_id}")
def get_florist(florist_id: str, store: Store = Depends(get_store)):
    doc = store.find_by_id(FLORISTS, object_id(florist_id))
    if not doc:
        raise HTTPException(status_code=404, detail="Florist not found")
    return to_public(doc)


@app.post("/florists")
def create_florist(florist: Florist, store: Store = Depends(get_store)):
    florist_id = store.insert_one(FLORISTS, florist)
    return {"inserted_id": florist_id}


@app.put("/florists/{florist_id}")
def replace_florist(florist_id: str, florist: Florist, store: Store = Depends(get_store)):
    matched, modified = store.replace_one(FLORISTS, object_id(florist_id), florist)
    if matched == 0:
        raise HTTPException(status_code=404, detail="Florist not found")
    return {"matched_count": matched, "modified_count": modified}


@app.delete("/florists/{florist_id}")
def delete_florist(florist_id: str, store: Store = Depends(get_store)):
    deleted = store.delete_one(FLORISTS, object_id(florist_id))
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Florist not found")
    return {"deleted_count": deleted}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
