"""SQLAlchemy models for database tables.

Provides ORM models for the catalog snapshot (products, variations,
coupons), carts, wishlists and user addresses.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.infrastructure.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")

LIVE_ROWS = text("deleted_at IS NULL")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid4())


# ============================================================================
# Catalog Models
# ============================================================================


class ProductModel(Base):
    """Product snapshot read by the cart engine.

    Attributes:
        id: Unique product identifier (UUID string).
        name: Display name.
        sku: Stock Keeping Unit.
        regular_price: Catalog price; NULL for configurable products priced per variation.
        sale_price: Discounted price, effective only when greater than zero.
        sale_price_start_at: Optional start of the sale window.
        sale_price_end_at: Optional end of the sale window.
        delivery_types: List of delivery type labels.
        tax_class: Tax classification.
        tax_status: Tax status label.
        shipping_class: Shipping classification.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    regular_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sale_price_start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sale_price_end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_types: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    tax_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tax_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    shipping_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    weight_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    length: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    dimension_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    variations: Mapped[list["ProductVariationModel"]] = relationship(
        "ProductVariationModel",
        back_populates="product",
        cascade="all, delete-orphan",
    )


class ProductVariationModel(Base):
    """Concrete SKU of a configurable product."""

    __tablename__ = "product_variations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    regular_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sale_price_start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sale_price_end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_types: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    tax_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tax_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    shipping_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    weight_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    length: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    dimension_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped["ProductModel"] = relationship("ProductModel", back_populates="variations")


class CouponModel(Base):
    """Coupon rule and usage counter."""

    __tablename__ = "coupons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    minimum_spend: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    maximum_spend: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    free_shipping: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_usage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    allowed_emails: Mapped[list[str] | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ============================================================================
# Cart Models
# ============================================================================


cart_coupons = Table(
    "cart_coupons",
    Base.metadata,
    Column("cart_id", String(36), ForeignKey("carts.id", ondelete="CASCADE"), primary_key=True),
    Column("coupon_id", String(36), ForeignKey("coupons.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)


class CartModel(Base):
    """Shopping cart owned by a user.

    At most one live cart per user, enforced by a partial unique index.
    """

    __tablename__ = "carts"
    __table_args__ = (
        Index(
            "uq_carts_live_owner",
            "created_by",
            unique=True,
            postgresql_where=LIVE_ROWS,
            sqlite_where=LIVE_ROWS,
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    items: Mapped[list["CartItemModel"]] = relationship(
        "CartItemModel",
        primaryjoin="and_(CartModel.id == CartItemModel.cart_id, CartItemModel.deleted_at.is_(None))",
        order_by="CartItemModel.created_at",
        viewonly=True,
    )
    coupons: Mapped[list["CouponModel"]] = relationship(
        "CouponModel",
        secondary=cart_coupons,
        secondaryjoin="and_(CouponModel.id == cart_coupons.c.coupon_id, CouponModel.deleted_at.is_(None))",
        order_by="CouponModel.code",
        viewonly=True,
    )


class CartItemModel(Base):
    """Line of a cart. Removed lines are soft-deleted."""

    __tablename__ = "cart_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    cart_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)
    variation_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("product_variations.id"),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped[ProductModel] = relationship("ProductModel")
    variation: Mapped[ProductVariationModel | None] = relationship("ProductVariationModel")


# NULL variations fold into '' so two live base-product lines collide.
Index(
    "uq_cart_items_live_identity",
    CartItemModel.cart_id,
    CartItemModel.product_id,
    func.coalesce(CartItemModel.variation_id, ""),
    unique=True,
    postgresql_where=LIVE_ROWS,
    sqlite_where=LIVE_ROWS,
)


# ============================================================================
# Wishlist Models
# ============================================================================


class WishlistModel(Base):
    """Per-user wishlist."""

    __tablename__ = "wishlists"
    __table_args__ = (
        Index(
            "uq_wishlists_live_owner",
            "created_by",
            unique=True,
            postgresql_where=LIVE_ROWS,
            sqlite_where=LIVE_ROWS,
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    items: Mapped[list["WishlistItemModel"]] = relationship(
        "WishlistItemModel",
        primaryjoin="and_(WishlistModel.id == WishlistItemModel.wishlist_id, "
        "WishlistItemModel.deleted_at.is_(None))",
        order_by="WishlistItemModel.created_at",
        viewonly=True,
    )


class WishlistItemModel(Base):
    """Entry of a wishlist."""

    __tablename__ = "wishlist_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    wishlist_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("wishlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)
    variation_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("product_variations.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped[ProductModel] = relationship("ProductModel")
    variation: Mapped[ProductVariationModel | None] = relationship("ProductVariationModel")


Index(
    "uq_wishlist_items_live_identity",
    WishlistItemModel.wishlist_id,
    WishlistItemModel.product_id,
    func.coalesce(WishlistItemModel.variation_id, ""),
    unique=True,
    postgresql_where=LIVE_ROWS,
    sqlite_where=LIVE_ROWS,
)


# ============================================================================
# Address Model
# ============================================================================


class AddressModel(Base):
    """Billing or shipping address owned by a user."""

    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    line1: Mapped[str] = mapped_column(String(255), nullable=False)
    line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

