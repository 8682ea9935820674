import logging
from contextlib import asynccontextmanager
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from catalog import Catalog
from config import Settings
from database import DocumentStore, connect, serialize_doc
from errors import ShopError, StoreFailure
from orders import OrderWorkflow
from ratings import RatingAggregator
from schemas import OrderCreate, OrderStatusUpdate, ProductCreate, ProductUpdate, ReviewCreate
from validation import validate_order_status_update

logger = logging.getLogger(__name__)


def envelope(status_code: int, message: str, **payload) -> JSONResponse:
    body = {"status": status_code, "message": message, **payload}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body, custom_encoder={ObjectId: str}))


# Dependencies
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_catalog(store: DocumentStore = Depends(get_store)) -> Catalog:
    return Catalog(store)


def get_ratings(store: DocumentStore = Depends(get_store)) -> RatingAggregator:
    return RatingAggregator(store)


def get_orders(
    store: DocumentStore = Depends(get_store), settings: Settings = Depends(get_settings)
) -> OrderWorkflow:
    return OrderWorkflow(store, settings)


# User routes
user_router = APIRouter(prefix="/api/user", tags=["user"])


@user_router.get("/products")
def list_products(catalog: Catalog = Depends(get_catalog)):
    products = [serialize_doc(p) for p in catalog.list_products()]
    return envelope(200, "Products retrieved successfully", products=products)


@user_router.get("/products/{product_id}")
def get_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    logger.info("Fetching product %s", product_id)
    product = serialize_doc(catalog.get_product(product_id))
    return envelope(200, "Product retrieved successfully", product=product)


@user_router.post("/review/{product_id}")
def add_review(product_id: str, body: ReviewCreate, ratings: RatingAggregator = Depends(get_ratings)):
    result = ratings.add_comment(product_id, body.model_dump(exclude_unset=True))
    return envelope(
        201,
        "Comment added successfully",
        comment=serialize_doc(result["comment"]),
        updatedRating=result["updatedRating"],
    )


@user_router.get("/review/{product_id}")
def list_reviews(product_id: str, ratings: RatingAggregator = Depends(get_ratings)):
    comments = [serialize_doc(c) for c in ratings.list_comments(product_id)]
    return envelope(200, "Comments retrieved successfully", comments=comments)


@user_router.post("/buy")
def buy(body: OrderCreate, orders: OrderWorkflow = Depends(get_orders)):
    result = orders.place_order(body.model_dump())
    return envelope(
        201,
        "Order placed successfully",
        orderId=str(result["orderId"]),
        order=serialize_doc(result["order"]),
    )


@user_router.get("/orders/{user_id}")
def user_orders(user_id: str, orders: OrderWorkflow = Depends(get_orders)):
    logger.info("Fetching orders for user %s", user_id)
    found = [serialize_doc(o) for o in orders.list_orders_for_user(user_id)]
    return envelope(200, "Orders retrieved successfully", orders=found)


# Admin routes
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_router.post("/add-product")
def add_product(body: ProductCreate, catalog: Catalog = Depends(get_catalog)):
    result = catalog.add_product(body.model_dump(exclude_unset=True))
    return envelope(201, "Product added successfully", productId=str(result["productId"]))


@admin_router.get("/products")
def admin_list_products(catalog: Catalog = Depends(get_catalog)):
    products = [serialize_doc(p) for p in catalog.list_products()]
    return envelope(200, "Products retrieved successfully", products=products)


@admin_router.get("/products/{product_id}")
def admin_get_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    product = serialize_doc(catalog.get_product(product_id))
    return envelope(200, "Product retrieved successfully", product=product)


@admin_router.put("/products/{product_id}")
def edit_product(product_id: str, body: ProductUpdate, catalog: Catalog = Depends(get_catalog)):
    logger.info("Updating product %s", product_id)
    result = catalog.edit_product(product_id, body.model_dump(exclude_unset=True))
    return envelope(200, "Product updated successfully", **result)


@admin_router.delete("/products/{product_id}")
def delete_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    result = catalog.delete_product(product_id)
    return envelope(200, "Product deleted successfully", **result)


@admin_router.get("/orders")
def admin_list_orders(orders: OrderWorkflow = Depends(get_orders)):
    found = [serialize_doc(o) for o in orders.list_all_orders()]
    return envelope(200, "Orders retrieved successfully", orders=found)


@admin_router.get("/stats")
def stats(orders: OrderWorkflow = Depends(get_orders)):
    return envelope(200, "Dashboard stats retrieved successfully", **orders.compute_dashboard_stats())


@admin_router.patch("/orders/{order_id}")
def patch_order(
    order_id: str,
    body: OrderStatusUpdate,
    orders: OrderWorkflow = Depends(get_orders),
    settings: Settings = Depends(get_settings),
):
    logger.info("Updating order %s status to %s", order_id, body.status)
    # The PATCH list is narrower than the one edit_order applies.
    validate_order_status_update(body.status, settings.patch_statuses)
    result = orders.edit_order(order_id, {"status": body.status})
    return envelope(200, "Order status updated successfully", **result)


# Error handlers
def handle_shop_error(request: Request, exc: ShopError) -> JSONResponse:
    if isinstance(exc, StoreFailure):
        return envelope(exc.status_code, "Store operation failed", error=exc.message)
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return envelope(exc.status_code, exc.message, error=exc.message)


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, detail)
    return envelope(400, "Invalid request body", error=detail)


def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return envelope(500, "Internal server error", error=str(exc))


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = connect(settings)
        logger.info("E-commerce backend started")
        yield
        if owns_store:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(title="E-commerce API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShopError, handle_shop_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Server is running"

    @app.get("/index", response_class=PlainTextResponse)
    def index():
        return "index Server is running"

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "service": "ecommerce-backend"}

    @app.get("/test")
    def test_database(request: Request):
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_name": settings.database_name,
            "collections": [],
        }
        current = request.app.state.store
        try:
            if current is not None:
                response["collections"] = current.list_collection_names()[:10]
                response["database"] = "✅ Connected & Working"
        except StoreFailure as e:
            response["database"] = f"❌ Error: {e.message[:80]}"
        return response

    app.include_router(user_router)
    app.include_router(admin_router)
    return app


settings = Settings.from_env()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
