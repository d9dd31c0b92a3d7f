from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Depends, APIRouter, Request, status, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import models, crud, database
from .routers import products, stock, orders

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first; the first matching class wins.
ERROR_STATUS = (
    (crud.InvalidInputError, 422),
    (crud.NotFoundError, 404),
    (crud.InsufficientStockError, 409),
    (crud.OrderFinalizedError, 423),
    (crud.InvalidTransitionError, 400),
    (crud.ForbiddenError, 403),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    models.Base.metadata.create_all(bind=database.engine)
    yield
    logger.info("Shutting down application...")


app = FastAPI(title="Orders Inventory Service", lifespan=lifespan)

app.include_router(products.router)
app.include_router(stock.router)
app.include_router(orders.router)


@app.exception_handler(crud.ServiceError)
async def service_error_handler(request: Request, exc: crud.ServiceError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    content = {"detail": str(exc)}
    if isinstance(exc, crud.InsufficientStockError):
        content.update(product_id=exc.product_id, requested=exc.requested, available=exc.available)
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "orders-inventory-service"}


# Test routes, only mounted for load tests
router = APIRouter(prefix="/test", tags=["test"])


@router.post("/reset-db", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
def reset_database(db: Session = Depends(database.get_db)):
    """
    Clear all data from database tables. For testing purposes only.
    """
    try:
        # Delete all data from tables (order matters due to foreign key constraints)
        db.query(models.OrderLine).delete()
        db.query(models.Order).delete()
        db.query(models.Stock).delete()
        db.query(models.Product).delete()
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Failed to reset database: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to reset database: {str(e)}")


if os.getenv("ENABLE_TEST_ROUTES") == "1":
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("orders_inventory.main:app", host="0.0.0.0", port=8000)
