from typing import Any, Dict, Optional
from fastapi import APIRouter, BackgroundTasks, Body, Depends

from storefront.api.deps import (
    get_current_user,
    get_cart_store,
    get_checkout,
    get_order_store,
    get_products,
)
from storefront.api.schemas.cart import (
    AddItemRequest,
    CartAddedOut,
    CartOut,
    CartRemovedOut,
    DecreaseItemRequest,
    MessageOut,
    PlaceOrderOut,
    UpdateItemRequest,
)
from storefront.api.schemas.order import OrderListOut
from storefront.models.cart import Cart
from storefront.services.cart_store import CartStore
from storefront.services.checkout import CheckoutService
from storefront.services.order_store import OrderStore
from storefront.services.products import ProductLookup

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _cart_out(cart: Cart, products: ProductLookup, message: Optional[str] = None, with_id: bool = False) -> Dict[str, Any]:
    """Cart lines with their current catalog entry attached (None once a product is gone)."""
    catalog = products.get_many(it.product_id for it in cart.items)
    items = []
    for it in cart.items:
        product = catalog.get(it.product_id)
        items.append({
            "productId": it.product_id,
            "quantity": it.quantity,
            "product": product.to_dict() if product else None,
        })
    out: Dict[str, Any] = {"items": items}
    if message:
        out["message"] = message
    if with_id:
        out["cartId"] = cart.id
    return out


@router.get("", response_model=CartOut)
def get_cart(
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
    products: ProductLookup = Depends(get_products),
):
    """
    The current user's cart. A user without a cart gets an empty item list.
    """
    return _cart_out(carts.get(current_user["id"]), products)


@router.post("/add", response_model=CartAddedOut)
def add_item(
    payload: AddItemRequest = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
    products: ProductLookup = Depends(get_products),
):
    """
    Add a product, or increase its quantity if it is already in the cart.
    Creates the cart on first use.
    """
    cart = carts.add(current_user["id"], payload.product_id, payload.quantity)
    return _cart_out(cart, products, message="Item added to cart", with_id=True)


@router.put("/update", response_model=CartOut)
def update_quantity(
    payload: UpdateItemRequest = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
    products: ProductLookup = Depends(get_products),
):
    """
    Overwrite a line's quantity. Quantity 0 removes the line.
    """
    cart = carts.set_quantity(current_user["id"], payload.product_id, payload.quantity)
    return _cart_out(cart, products)


@router.post("/decrease", response_model=CartOut)
def decrease_item(
    payload: DecreaseItemRequest = Body(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
    products: ProductLookup = Depends(get_products),
):
    cart = carts.decrement(current_user["id"], payload.product_id)
    return _cart_out(cart, products)


@router.delete("/remove/{product_id}", response_model=CartRemovedOut)
def remove_item(
    product_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
    products: ProductLookup = Depends(get_products),
):
    """
    Drop a line. Removing a product that is not in the cart is a no-op.
    """
    cart = carts.remove(current_user["id"], product_id)
    return _cart_out(cart, products, message="Item removed")


@router.post("/clear", response_model=MessageOut)
def clear_cart(
    current_user: Dict[str, Any] = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    carts.clear(current_user["id"])
    return {"message": "Cart cleared"}


@router.post("/place-order", response_model=PlaceOrderOut)
def place_order(
    background_tasks: BackgroundTasks,
    current_user: Dict[str, Any] = Depends(get_current_user),
    checkout: CheckoutService = Depends(get_checkout),
):
    """
    Checkout: store an order from the cart, clear the cart and send the
    confirmation email after the response has gone out.
    """
    receipt = checkout.place_order(current_user, schedule=background_tasks.add_task)
    return {
        "message": "Order placed successfully!",
        "orderId": receipt.order_id,
        "totalAmount": receipt.total_amount,
    }


@router.get("/orders", response_model=OrderListOut)
def list_orders(
    current_user: Dict[str, Any] = Depends(get_current_user),
    orders: OrderStore = Depends(get_order_store),
):
    """
    Order history of the current user, most recent first.
    """
    return {"orders": [o.to_public() for o in orders.list_by_user(current_user["id"])]}
