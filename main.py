import os
import logging
from typing import List, Optional

from fastapi import FastAPI, Form, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from pymongo.errors import PyMongoError

import database
import presenters
from database import create_document, get_document, get_documents
from schemas import (
    CheckoutRequest,
    CustomOrder,
    CustomOrderIn,
    CustomOrderRequest,
    Order,
    OrderHistory,
    OrderIn,
    OrderStatus,
    Product,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="DesignHub Storefront")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates"))
presenters.install(templates.env)

ORDER_FAILED = "Failed to place order. Please try again."
CUSTOM_ORDER_FAILED = "Failed to submit request. Please try again."
OUT_OF_STOCK = "This item is out of stock."

FIELD_MESSAGES = {
    "name": "Please enter your full name.",
    "email": "Please enter a valid email address.",
    "description": "Please describe what you need.",
    "notes": "Notes must be text.",
}


class QuantityOutOfRange(ValueError):
    def __init__(self, stock: int):
        if stock < 1:
            super().__init__(OUT_OF_STOCK)
        else:
            super().__init__(f"Quantity must be between 1 and {stock}.")
        self.stock = stock


# ---------- Helpers ----------

def compute_total(price: float, quantity: int) -> float:
    return price * quantity


def form_error(exc: ValidationError, stock: Optional[int] = None) -> str:
    field = exc.errors()[0]["loc"][0]
    if field == "quantity":
        return str(QuantityOutOfRange(stock)) if stock is not None else "Please enter a valid quantity."
    return FIELD_MESSAGES.get(field, "Please check the form and try again.")


def find_product(product_id: str) -> Product:
    doc = get_document("products", product_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    return Product(**doc)


def load_products() -> List[Product]:
    try:
        return [Product(**d) for d in get_documents("products")]
    except (PyMongoError, ValidationError):
        # Shown to the customer as an empty catalog.
        logger.exception("Error fetching products")
        return []


def search_history(email: str) -> OrderHistory:
    orders = get_documents("orders", {"customer_email": email})
    custom_orders = get_documents("custom_orders", {"customer_email": email})
    return OrderHistory(
        email=email,
        orders=[Order(**d) for d in orders],
        custom_orders=[CustomOrder(**d) for d in custom_orders],
    )


def place_order(product: Product, checkout: CheckoutRequest) -> Order:
    """Insert a pending order for ``product``. Raises before writing if the quantity exceeds stock."""
    if checkout.quantity > product.stock:
        raise QuantityOutOfRange(product.stock)
    order = OrderIn(
        customer_name=checkout.name,
        customer_email=checkout.email,
        product_id=product.id,
        product_name=product.name,
        product_price=product.price,
        quantity=checkout.quantity,
        total_amount=compute_total(product.price, checkout.quantity),
        notes=checkout.notes,
        status=OrderStatus.PENDING.value,
    )
    order_id = create_document("orders", order)
    logger.info("Order %s placed for product %s", order_id, product.id)
    return Order(id=order_id, **order.model_dump())


def submit_custom_order(request: CustomOrderRequest) -> CustomOrder:
    custom_order = CustomOrderIn(
        customer_name=request.name,
        customer_email=request.email,
        description=request.description,
        status=OrderStatus.PENDING.value,
    )
    order_id = create_document("custom_orders", custom_order)
    logger.info("Custom order %s submitted", order_id)
    return CustomOrder(id=order_id, **custom_order.model_dump())


def render_catalog(request: Request, status_code: int = 200, **context):
    context.setdefault("placed", False)
    return templates.TemplateResponse(
        request,
        "catalog.html",
        {"current_page": "products", "products": load_products(), **context},
        status_code=status_code,
    )


# ---------- Catalog ----------

@app.get("/")
def catalog(request: Request, placed: bool = False):
    return render_catalog(request, placed=placed)


# ---------- Checkout ----------

@app.get("/products/{product_id}/checkout")
def checkout_form(request: Request, product_id: str, quantity: int = 1):
    product = find_product(product_id)
    form = {"name": "", "email": "", "quantity": max(1, min(quantity, product.stock)), "notes": ""}
    error = OUT_OF_STOCK if product.stock < 1 else None
    return render_catalog(request, checkout=product, form=form, error=error)


@app.post("/products/{product_id}/checkout")
def checkout_submit(
    request: Request,
    product_id: str,
    name: str = Form(""),
    email: str = Form(""),
    quantity: str = Form("1"),
    notes: str = Form(""),
):
    product = find_product(product_id)
    form = {"name": name, "email": email, "quantity": quantity, "notes": notes}
    try:
        checkout = CheckoutRequest(product_id=product.id, name=name, email=email, quantity=quantity, notes=notes)
        place_order(product, checkout)
    except ValidationError as e:
        return render_catalog(request, 422, checkout=product, form=form, error=form_error(e, product.stock))
    except QuantityOutOfRange as e:
        return render_catalog(request, 422, checkout=product, form=form, error=str(e))
    except PyMongoError:
        logger.exception("Error placing order for product %s", product.id)
        return render_catalog(request, 502, checkout=product, form=form, error=ORDER_FAILED)
    return RedirectResponse("/?placed=1", status_code=303)


# ---------- Custom Orders ----------

@app.get("/custom-order")
def custom_order_form(request: Request):
    form = {"name": "", "email": "", "description": ""}
    return render_catalog(request, custom_order=True, form=form)


@app.post("/custom-order")
def custom_order_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    description: str = Form(""),
):
    form = {"name": name, "email": email, "description": description}
    try:
        submit_custom_order(CustomOrderRequest(name=name, email=email, description=description))
    except ValidationError as e:
        return render_catalog(request, 422, custom_order=True, form=form, error=form_error(e))
    except PyMongoError:
        logger.exception("Error submitting custom order")
        return render_catalog(request, 502, custom_order=True, form=form, error=CUSTOM_ORDER_FAILED)
    return RedirectResponse("/?placed=1", status_code=303)


# ---------- Order History ----------

@app.get("/orders")
def order_history(request: Request, email: Optional[str] = None):
    searched = bool(email)
    history = OrderHistory(email=email or "")
    if searched:
        try:
            history = search_history(email)
        except (PyMongoError, ValidationError):
            # Either query failing discards both result sets.
            logger.exception("Error fetching orders")
    return templates.TemplateResponse(
        request,
        "orders.html",
        {"current_page": "orders", "searched": searched, "history": history, "placed": False},
    )


# ---------- JSON API ----------

@app.get("/api/products", response_model=List[Product])
def api_list_products():
    try:
        return [Product(**d) for d in get_documents("products")]
    except (PyMongoError, ValidationError):
        logger.exception("Error fetching products")
        raise HTTPException(status_code=502, detail="Failed to load products")


@app.get("/api/products/{product_id}", response_model=Product)
def api_get_product(product_id: str):
    try:
        return find_product(product_id)
    except PyMongoError:
        logger.exception("Error fetching product %s", product_id)
        raise HTTPException(status_code=502, detail="Failed to load product")


@app.post("/api/orders", response_model=Order, status_code=201)
def api_create_order(checkout: CheckoutRequest):
    try:
        product = find_product(checkout.product_id)
        return place_order(product, checkout)
    except QuantityOutOfRange as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PyMongoError:
        logger.exception("Error placing order for product %s", checkout.product_id)
        raise HTTPException(status_code=502, detail=ORDER_FAILED)


@app.post("/api/custom-orders", response_model=CustomOrder, status_code=201)
def api_create_custom_order(payload: CustomOrderRequest):
    try:
        return submit_custom_order(payload)
    except PyMongoError:
        logger.exception("Error submitting custom order")
        raise HTTPException(status_code=502, detail=CUSTOM_ORDER_FAILED)


@app.get("/api/orders", response_model=OrderHistory)
def api_order_history(email: str = Query(..., min_length=1)):
    try:
        return search_history(email)
    except (PyMongoError, ValidationError):
        logger.exception("Error fetching orders")
        raise HTTPException(status_code=502, detail="Failed to load orders")


# ---------- Diagnostics ----------

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }

    try:
        collections = database.db.list_collection_names()
        response["collections"] = collections[:10]
        response["connection_status"] = "Connected"
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["database_name"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"

    return response


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
