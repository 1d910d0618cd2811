"""Import every model so they are all registered with Base.metadata.

Foreign keys are declared by table name, so the unit of work can only
order inserts and deletes once every referenced table is known. Entry
points that do not go through the API (worker, CLI, tests) import
this module first.
"""

from storefront.modules.catalog.models import Image, Product, ProductImage, ReviewStatus
from storefront.modules.categories.models import (
    Category,
    CategoryName,
    CategoryRequest,
    CategoryRequestStatus,
    CategorySynonym,
)
from storefront.modules.orders.models import CartItem, Order, OrderItem, OrderStatus
from storefront.modules.tenants.models import (
    Membership,
    MembershipRole,
    ShopStatus,
    Tenant,
)
from storefront.modules.users.models import User


__all__ = [
    "CartItem",
    "Category",
    "CategoryName",
    "CategoryRequest",
    "CategoryRequestStatus",
    "CategorySynonym",
    "Image",
    "Membership",
    "MembershipRole",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductImage",
    "ReviewStatus",
    "ShopStatus",
    "Tenant",
    "User",
]
