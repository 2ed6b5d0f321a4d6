"""Shop router: sellers, categories, products and orders."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession, RequiredAuth, SellerAuth
from ..core.exceptions import InternalServerError, NotFoundError, ProblemDetailsException
from ..schemas.shop import (
    ApplySellerRequest,
    CreateCategoryRequest,
    CreateOrderRequest,
    CreateProductRequest,
    ListOrdersRequest,
    ListProductsRequest,
    ListSellersRequest,
    OrderIdRequest,
    ProductIdRequest,
    ReviewSellerRequest,
    SellerStats,
    SellerStatsRequest,
    ShopCategory,
    ShopCategoryList,
    ShopDashboard,
    ShopOrder,
    ShopOrderList,
    ShopProduct,
    ShopProductList,
    ShopSeller,
    ShopSellerList,
    UpdateCategoryRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
    UploadPaymentProofRequest,
)
from ..services.shop_order_service import ShopOrderService
from ..services.shop_service import ShopService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/shop", tags=["shop"])


def _seller_response(seller) -> JSONResponse:
    return JSONResponse(status_code=200, content=ShopSeller.model_validate(seller).model_dump(mode="json"))


def _product_response(product) -> JSONResponse:
    return JSONResponse(status_code=200, content=ShopProduct.model_validate(product).model_dump(mode="json"))


def _order_response(order) -> JSONResponse:
    return JSONResponse(status_code=200, content=ShopOrder.model_validate(order).model_dump(mode="json"))


def _order_list_response(orders, total: int, request: ListOrdersRequest) -> JSONResponse:
    response_data = ShopOrderList(
        items=[ShopOrder.model_validate(o) for o in orders],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


# Sellers

@router.post("/seller/apply", response_model=ShopSeller)
async def apply_seller(
    request: ApplySellerRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Open a shop; it stays pending until an admin approves it."""
    seller = await ShopService(db).apply_seller(user, request)
    return _seller_response(seller)


@router.post("/seller/mine", response_model=ShopSeller)
async def get_my_seller(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    seller = await ShopService(db).get_seller_by_user(user.user_id)
    if seller is None:
        raise NotFoundError(resource_type="shop_seller", resource_id=user.user_id)
    return _seller_response(seller)


@router.post("/seller/review", response_model=ShopSeller)
async def review_seller(
    request: ReviewSellerRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    seller = await ShopService(db).review_seller(request)
    return _seller_response(seller)


@router.post("/seller/list", response_model=ShopSellerList)
async def list_sellers(
    request: ListSellersRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    sellers, total = await ShopService(db).list_sellers(
        status=request.status.value if request.status else None,
        limit=request.limit,
        offset=request.offset,
    )
    response_data = ShopSellerList(
        items=[ShopSeller.model_validate(s) for s in sellers],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/seller/stats", response_model=SellerStats)
async def seller_stats(
    request: SellerStatsRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    order_service = ShopOrderService(db)
    seller_id = await order_service.get_seller_id_for(user, request.seller_id)
    stats = await order_service.seller_stats(seller_id)
    return JSONResponse(status_code=200, content=SellerStats.model_validate(stats).model_dump(mode="json"))


# Categories

@router.post("/category/list", response_model=ShopCategoryList)
async def list_categories(db: AsyncSession = DatabaseSession) -> JSONResponse:
    categories = await ShopService(db).list_categories()
    response_data = ShopCategoryList(items=[ShopCategory.model_validate(c) for c in categories])
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/category/create", response_model=ShopCategory)
async def create_category(
    request: CreateCategoryRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    category = await ShopService(db).create_category(request)
    return JSONResponse(status_code=200, content=ShopCategory.model_validate(category).model_dump(mode="json"))


@router.post("/category/update", response_model=ShopCategory)
async def update_category(
    request: UpdateCategoryRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    category = await ShopService(db).update_category(request)
    return JSONResponse(status_code=200, content=ShopCategory.model_validate(category).model_dump(mode="json"))


# Products

@router.post("/product/create", response_model=ShopProduct)
async def create_product(
    request: CreateProductRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    product = await ShopService(db).create_product(user, request)
    return _product_response(product)


@router.post("/product/update", response_model=ShopProduct)
async def update_product(
    request: UpdateProductRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    product = await ShopService(db).update_product(user, request)
    return _product_response(product)


@router.post("/product/deactivate", response_model=ShopProduct)
async def deactivate_product(
    request: ProductIdRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    product = await ShopService(db).deactivate_product(user, request.product_id)
    return _product_response(product)


@router.post("/product/get", response_model=ShopProduct)
async def get_product(
    request: ProductIdRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    product = await ShopService(db).get_public_product(request.product_id)
    return _product_response(product)


@router.post("/product/list", response_model=ShopProductList)
async def list_products(
    request: ListProductsRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Public catalogue of active products from approved sellers."""
    products, total = await ShopService(db).list_products(request)
    response_data = ShopProductList(
        items=[ShopProduct.model_validate(p) for p in products],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/product/mine", response_model=list[ShopProduct])
async def list_my_products(
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    products = await ShopService(db).list_seller_products(user)
    return JSONResponse(
        status_code=200,
        content=[ShopProduct.model_validate(p).model_dump(mode="json") for p in products]
    )


# Orders

@router.post("/order/create", response_model=ShopOrder)
async def create_order(
    request: CreateOrderRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Check out a cart.

    Prices are taken from the products at checkout and stock is reserved
    in the same transaction.
    """
    try:
        order = await ShopOrderService(db).create_order(user, request)
        return _order_response(order)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in order creation",
            extra={"user_id": user.user_id, "items": len(request.items), "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/order/upload-payment", response_model=ShopOrder)
async def upload_payment_proof(
    request: UploadPaymentProofRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    order = await ShopOrderService(db).upload_payment_proof(user, request)
    return _order_response(order)


@router.post("/order/update-status", response_model=ShopOrder)
async def update_order_status(
    request: UpdateOrderStatusRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    order = await ShopOrderService(db).update_order_status(user, request)
    return _order_response(order)


@router.post("/order/get", response_model=ShopOrder)
async def get_order(
    request: OrderIdRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    order = await ShopOrderService(db).get_order(user, request.order_id)
    return _order_response(order)


@router.post("/order/mine", response_model=ShopOrderList)
async def list_my_orders(
    request: ListOrdersRequest,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    orders, total = await ShopOrderService(db).list_my_orders(user, request)
    return _order_list_response(orders, total, request)


@router.post("/order/list-seller", response_model=ShopOrderList)
async def list_seller_orders(
    request: ListOrdersRequest,
    user: CurrentUser = SellerAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    orders, total = await ShopOrderService(db).list_seller_orders(user, request)
    return _order_list_response(orders, total, request)


@router.post("/dashboard", response_model=ShopDashboard)
async def shop_dashboard(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    dashboard = await ShopOrderService(db).shop_dashboard()
    return JSONResponse(status_code=200, content=ShopDashboard.model_validate(dashboard).model_dump(mode="json"))
