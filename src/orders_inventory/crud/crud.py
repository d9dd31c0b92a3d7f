from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError

from .. import models, schemas
from .exceptions import ProductNotFoundError


def get_product(db: Session, product_id: int):
    return (
        db.query(models.Product)
        .options(selectinload(models.Product.stock))
        .filter(models.Product.id == product_id)
        .first()
    )


def get_products(db: Session, skip: int = 0, limit: int = 100):
    return (
        db.query(models.Product)
        .options(selectinload(models.Product.stock))
        .order_by(models.Product.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_products(db: Session):
    return db.query(models.Product).count()


def create_product(db: Session, product: schemas.ProductCreate):
    """Create a product, and its stock record in the same commit when an initial quantity is given."""
    db_product = models.Product(
        name=product.name, flavor=product.flavor, size=product.size, price=product.price
    )
    if product.stock is not None:
        db_product.stock = models.Stock(quantity=product.stock)
    db.add(db_product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(db_product)
    return db_product


def update_product(db: Session, product_id: int, product: schemas.ProductBase):
    db_product = get_product(db, product_id)
    if not db_product:
        return None
    db_product.name = product.name
    db_product.flavor = product.flavor
    db_product.size = product.size
    db_product.price = product.price
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(db_product)
    return db_product


def update_product_partial(db: Session, product_id: int, product: schemas.ProductUpdate):
    db_product = get_product(db, product_id)
    if not db_product:
        return None
    # Only update provided fields
    for field, value in product.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_product, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(db_product)
    return db_product


def delete_product(db: Session, product_id: int):
    """Delete a product and its stock record.

    Raises IntegrityError if order lines still reference the product.
    """
    db_product = get_product(db, product_id)
    if not db_product:
        return None
    db.delete(db_product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    return db_product


def get_stock(db: Session, product_id: int):
    return db.query(models.Stock).filter(models.Stock.product_id == product_id).first()


def get_stocks(db: Session, skip: int = 0, limit: int = 100):
    return db.query(models.Stock).order_by(models.Stock.product_id).offset(skip).limit(limit).all()


def create_stock(db: Session, stock: schemas.StockCreate):
    """Create the stock record of a product.

    Raises ProductNotFoundError for an unknown product and IntegrityError when
    the product already has a stock record.
    """
    if db.get(models.Product, stock.product_id) is None:
        raise ProductNotFoundError(stock.product_id)
    db_stock = models.Stock(product_id=stock.product_id, quantity=stock.quantity)
    db.add(db_stock)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(db_stock)
    return db_stock


def delete_stock(db: Session, product_id: int):
    db_stock = get_stock(db, product_id)
    if not db_stock:
        return None
    db.delete(db_stock)
    db.commit()
    return db_stock
