"""
Storefront API
FastAPI application entry point

- Catalog browsing with search, filters, sorting and pagination
- Cart ledger and checkout (no payment processing)
- Profile, addresses, order history and reviews
- Thin admin panel for products and users
- Rate limiting with SlowAPI on auth and checkout
- Error sanitization middleware
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from storefront.api.routes import admin, auth, cart, checkout, orders, products, reviews, users
from storefront.core.config import settings
from storefront.core.database import engine
from storefront.core.error_handler import ErrorSanitizationMiddleware, register_exception_handlers
from storefront.core.exceptions import GatewayError
from storefront.core.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.services.gateway import DataGateway, get_gateway

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} starting ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
Backend for the storefront client.

- **Products**: catalog page, facets, search suggestions, featured products, reviews
- **Cart & Checkout**: cart ledger, price quote, order placement
- **Account**: sign-up, login, password reset, profile, addresses, order history
- **Admin**: product management and user directory

Protected endpoints answer 401 with a `Location` header pointing at the login page.
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Authentication", "description": "Sign-up, login, logout and password reset"},
        {"name": "Users", "description": "Profile and saved addresses"},
        {"name": "Products", "description": "Catalog browsing"},
        {"name": "Reviews", "description": "Product reviews and helpful votes"},
        {"name": "Cart", "description": "Shopping cart operations"},
        {"name": "Checkout", "description": "Price quote and order placement"},
        {"name": "Orders", "description": "Order history"},
        {"name": "Admin", "description": "Product and user management"},
    ],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(ErrorSanitizationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(reviews.router, prefix="/api/products", tags=["Reviews"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/api/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": settings.APP_NAME,
        "version": VERSION,
        "status": "operational"
    }


@app.get("/health", tags=["Health"])
async def health_check(gateway: DataGateway = Depends(get_gateway)):
    """Health check with a database ping. Returns 503 if the database is unreachable."""
    health_status = {
        "status": "healthy",
        "database": "connected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        await gateway.ping()
    except GatewayError:
        health_status["database"] = "unreachable"
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
