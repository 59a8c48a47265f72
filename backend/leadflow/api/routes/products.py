from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leadflow.core.security import require_admin
from leadflow.db.models import Product, ProductType
from leadflow.db.session import get_db

router = APIRouter(dependencies=[Depends(require_admin)])


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price_in_cents: int = Field(ge=0)
    type: ProductType


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    price_in_cents: Optional[int] = Field(default=None, ge=0)
    type: Optional[ProductType] = None
    active: Optional[bool] = None


def product_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price_in_cents": product.price_in_cents,
        "type": product.type.value,
        "active": product.active,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _commit_unique_slug(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A product with this slug already exists")


@router.get("/admin/products")
def list_products(db: Session = Depends(get_db)):
    products = db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()
    return [product_dict(p) for p in products]


@router.get("/admin/products/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_dict(_get_product(db, product_id))


@router.post("/admin/products")
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    db_product = Product(**product.model_dump(), active=True)
    db.add(db_product)
    _commit_unique_slug(db)
    db.refresh(db_product)
    return {"id": db_product.id}


@router.patch("/admin/products/{product_id}")
def update_product(product_id: int, update: ProductUpdate, db: Session = Depends(get_db)):
    product = _get_product(db, product_id)
    fields = update.model_dump(exclude_none=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    for key, value in fields.items():
        setattr(product, key, value)
    _commit_unique_slug(db)
    return {"success": True}


@router.post("/admin/products/{product_id}/toggle-active")
def toggle_product_active(product_id: int, db: Session = Depends(get_db)):
    product = _get_product(db, product_id)
    product.active = not product.active
    db.commit()
    return {"active": product.active}
