"""Pricing pipeline.

Pure computation over an already loaded cart snapshot:
items -> coupons -> shipping -> tax -> totals.
"""

from storefront.pricing.aggregator import CartAggregator, CartCalculationResult
from storefront.pricing.config import PricingConfig
from storefront.pricing.coupons import AppliedCoupon, CouponEngine, CouponResult, RejectedCoupon
from storefront.pricing.items import CartItemCalculation, ItemPricingPipeline, ItemsResult
from storefront.pricing.prices import PriceResolver, ResolvedPrice
from storefront.pricing.shipping import ShippingDetails, ShippingMethod, ShippingResolver
from storefront.pricing.tax import TaxCalculator, TaxDetails, TaxLine

__all__ = [
    "AppliedCoupon",
    "CartAggregator",
    "CartCalculationResult",
    "CartItemCalculation",
    "CouponEngine",
    "CouponResult",
    "ItemPricingPipeline",
    "ItemsResult",
    "PriceResolver",
    "PricingConfig",
    "RejectedCoupon",
    "ResolvedPrice",
    "ShippingDetails",
    "ShippingMethod",
    "ShippingResolver",
    "TaxCalculator",
    "TaxDetails",
    "TaxLine",
]
