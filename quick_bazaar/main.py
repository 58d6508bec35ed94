# main.py
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config.database import (
    ADDED_PRODUCTS,
    CATEGORIES,
    COMMENTS,
    PRODUCTS,
    SORTS,
    DatabaseManager,
    lifespan,
)
from .config.settings import Settings, get_settings
from .exceptions import NotFoundError, register_exception_handlers, store_operation
from .schemas import DeleteOneResponse, Document, HealthCheckResponse, InsertOneResponse
from .utils.dependencies import get_database, parse_object_id
from .utils.serializers import (
    serialize_delete_result,
    serialize_doc,
    serialize_docs,
    serialize_insert_result,
)

# Setup logging
logging.basicConfig(level=get_settings().log_level)

DISCOUNT_THRESHOLD = 25

router = APIRouter()


# Root routes
@router.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root():
    return "Quick Bazaar Server"


@router.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check(request: Request):
    """Report whether a database session is cached without touching the store"""
    db_manager: DatabaseManager = request.app.state.db_manager
    return {
        "status": "healthy",
        "database": "connected" if db_manager.is_connected() else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": request.app.state.settings.app_version,
    }


# Category related API
@router.get("/category", response_model=List[Document], tags=["Categories"])
@store_operation("Error fetching categories")
async def list_categories(db=Depends(get_database)):
    categories = await db[CATEGORIES].find({}).to_list(length=None)
    return serialize_docs(categories)


# Products related API
@router.post("/products", response_model=InsertOneResponse, tags=["Products"])
@store_operation("Error inserting product")
async def create_product(product: Document = Body(...), db=Depends(get_database)):
    result = await db[PRODUCTS].insert_one(product)
    return serialize_insert_result(result)


@router.get("/products", response_model=List[Document], tags=["Products"])
@store_operation("Error fetching products")
async def list_products(
    category_name: Optional[str] = Query(None, description="Only products in this category"),
    db=Depends(get_database),
):
    filter_query = {}
    if category_name:
        filter_query = {"category_name": category_name}

    products = await db[PRODUCTS].find(filter_query).to_list(length=None)
    return serialize_docs(products)


# Must stay above /products/{product_id}
@router.get("/products/discount", response_model=List[Document], tags=["Products"])
@store_operation("Error fetching products with discount")
async def list_discounted_products(db=Depends(get_database)):
    products = await db[PRODUCTS].find({"discount": {"$gt": DISCOUNT_THRESHOLD}}).to_list(length=None)
    return serialize_docs(products)


@router.get("/products/{product_id}", response_model=Document, tags=["Products"])
@store_operation("Error fetching product by ID")
async def get_product(product_id: str, db=Depends(get_database)):
    product = await db[PRODUCTS].find_one({"_id": parse_object_id(product_id)})
    if not product:
        raise NotFoundError("Product not found")
    return serialize_doc(product)


# Comment related API
@router.get("/comment", response_model=List[Document], tags=["Comments"])
@store_operation("Error fetching comments")
async def list_comments(
    product_id: Optional[str] = Query(None, description="Only comments on this product"),
    db=Depends(get_database),
):
    filter_query = {}
    if product_id:
        filter_query = {"product_id": product_id}

    comments = await db[COMMENTS].find(filter_query).to_list(length=None)
    return serialize_docs(comments)


@router.post("/comment", response_model=InsertOneResponse, tags=["Comments"])
@store_operation("Error adding comment")
async def create_comment(comment: Document = Body(...), db=Depends(get_database)):
    result = await db[COMMENTS].insert_one(comment)
    return serialize_insert_result(result)


# Added products related API
@router.get("/addProducts", response_model=List[Document], tags=["Added Products"])
@store_operation("Error fetching added products")
async def list_added_products(
    email: Optional[str] = Query(None, description="Only products added by this user"),
    db=Depends(get_database),
):
    filter_query = {}
    if email:
        filter_query = {"email": email}

    products = await db[ADDED_PRODUCTS].find(filter_query).to_list(length=None)
    return serialize_docs(products)


@router.post("/addProducts", response_model=InsertOneResponse, tags=["Added Products"])
@store_operation("Error adding product")
async def create_added_product(product: Document = Body(...), db=Depends(get_database)):
    result = await db[ADDED_PRODUCTS].insert_one(product)
    return serialize_insert_result(result)


@router.delete("/addProducts/{product_id}", response_model=DeleteOneResponse, tags=["Added Products"])
@store_operation("Error deleting product")
async def delete_added_product(product_id: str, db=Depends(get_database)):
    result = await db[ADDED_PRODUCTS].delete_one({"_id": parse_object_id(product_id)})
    response = serialize_delete_result(result)
    if response["deletedCount"] != 1:
        raise NotFoundError("Product not found")
    return response


# Sort related API
@router.get("/sorts", response_model=List[Document], tags=["Sorts"])
@store_operation("Error fetching sorts")
async def list_sorts(db=Depends(get_database)):
    sorts = await db[SORTS].find({}).to_list(length=None)
    return serialize_docs(sorts)


def create_app(settings: Optional[Settings] = None, db_manager: Optional[DatabaseManager] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The database manager is stored on app.state and reached by routes through
    the get_database dependency, so tests can hand in their own.
    """
    settings = settings or get_settings()
    db_manager = db_manager or DatabaseManager(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_manager = db_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
