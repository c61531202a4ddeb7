"""Tests for the tax stage."""

from decimal import Decimal

from storefront.domain import AddressInfo, TaxBasis
from storefront.pricing import PricingConfig, TaxCalculator
from storefront.pricing.tax import DEFAULT_TAX_LINE_ID

AUSTIN = AddressInfo(line1="1 Congress Ave", city="Austin", state="TX", postal_code="78701")


class TestTaxCalculator:
    """Tests for TaxCalculator."""

    def test_default_rate_on_subtotal_and_shipping(self, config, ny_address) -> None:
        """Tax applies to the discounted subtotal plus shipping."""
        details = TaxCalculator(config).calculate(Decimal("100.00"), Decimal("9.99"), None, ny_address)

        assert details.total == Decimal("9.35")
        line = details.breakdown[0]
        assert line.id == DEFAULT_TAX_LINE_ID
        assert line.label == "Sales Tax"
        assert line.taxable_amount == Decimal("109.99")
        assert details.address == ny_address

    def test_no_address_no_tax(self, config) -> None:
        details = TaxCalculator(config).calculate(Decimal("100.00"), Decimal("0"), None, None)

        assert details.total == Decimal("0")
        assert details.breakdown == ()

    def test_billing_basis(self, ny_address) -> None:
        """Billing basis ignores the shipping address."""
        config = PricingConfig(tax_based_on=TaxBasis.BILLING_ADDRESS)

        details = TaxCalculator(config).calculate(Decimal("100.00"), Decimal("0"), None, ny_address)

        assert details.total == Decimal("0")
        assert details.address is None

    def test_store_basis(self) -> None:
        config = PricingConfig(tax_based_on=TaxBasis.STORE_ADDRESS, store_address=AUSTIN)

        details = TaxCalculator(config).calculate(Decimal("100.00"), Decimal("0"), None, None)

        assert details.address == AUSTIN
        assert details.total == Decimal("8.50")

    def test_regional_rate_most_specific_wins(self, ny_address) -> None:
        """Country-state rates beat country rates, which beat the default."""
        config = PricingConfig(
            regional_tax_rates={"US-NY": Decimal("8.875"), "US": Decimal("5")},
        )
        calculator = TaxCalculator(config)

        ny = calculator.calculate(Decimal("100.00"), Decimal("0"), None, ny_address)
        tx = calculator.calculate(Decimal("100.00"), Decimal("0"), None, AUSTIN)

        assert ny.total == Decimal("8.88")
        assert ny.breakdown[0].rate == Decimal("8.875")
        assert tx.total == Decimal("5.00")

    def test_rounding_half_up(self, config, ny_address) -> None:
        """8.5% of 0.30 is 0.0255 and rounds to 0.03."""
        details = TaxCalculator(config).calculate(Decimal("0.30"), Decimal("0"), None, ny_address)
        assert details.total == Decimal("0.03")
