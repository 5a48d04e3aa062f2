from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging
from sqlalchemy import text

from app.config import get_settings
from app.routers import auth, products
from app.routers import cart
from app.routers import coupons
from app.routers import orders
from app.routers import wishlist
from app.routers import addresses
from app.routers import reviews

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def create_tables():
    from app.models.user import Base, engine  # Base/engine single source
    import app.models.product  # register Product model
    import app.models.cart  # register Cart/CartItem models
    import app.models.order  # register Order/OrderItem models
    import app.models.wishlist  # register Wishlist models
    import app.models.coupon  # register Coupon model
    import app.models.address  # register Address model
    import app.models.review  # register Review model
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure all DB tables exist after all models are imported
    create_tables()
    logger.info("Database tables ready")
    yield


app = FastAPI(title="StyleHub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(orders.admin_router, prefix="/api/admin/orders", tags=["admin-orders"])
app.include_router(coupons.router, prefix="/api/coupons", tags=["coupons"])
app.include_router(wishlist.router, prefix="/api/wishlist", tags=["wishlist"])
app.include_router(addresses.router, prefix="/api/addresses", tags=["addresses"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])


@app.get("/api/health")
def health():
    from app.models.user import engine
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ok", "database": "ok"}


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=False)
