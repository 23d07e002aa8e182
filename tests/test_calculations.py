"""Tests for the quote calculator and tax resolver."""

import pytest

from archifinance.calculations.money import round_half_up
from archifinance.calculations.quote import (
    add_category,
    add_item,
    add_note,
    add_term,
    base_sum,
    contract_total,
    find_term,
    move_category,
    move_item,
    move_note,
    remove_category,
    remove_item,
    remove_note,
    remove_term,
    rename_category,
    select_bank_account,
    set_custom_total,
    term_amount,
    term_amounts,
    terms_percentage_sum,
    update_item,
    update_note,
    update_term,
)
from archifinance.calculations.tax import (
    amount_due,
    invoice_amount_due,
    net_service_due,
    resolve_tax,
    tax_component,
)
from archifinance.models.project import (
    Invoice,
    PaymentTerm,
    QuoteCategory,
    QuoteData,
    QuoteItem,
    TaxMode,
)


def make_quote(*amounts, terms=(30, 40, 30), custom=None):
    return QuoteData(
        categories=[
            QuoteCategory(
                id="c1",
                name="Design",
                items=[QuoteItem(id=f"i{n}", amount=a) for n, a in enumerate(amounts)],
            ),
        ],
        payment_terms=[PaymentTerm(id=f"t{n}", percentage=p) for n, p in enumerate(terms)],
        custom_real_total=custom,
    )


class TestRounding:
    """Tests for half-up currency rounding."""

    def test_halves_round_up(self):
        """Test that .5 rounds toward +infinity, not to even."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2

    def test_below_half_rounds_down(self):
        """Test ordinary rounding."""
        assert round_half_up(17142.857) == 17143
        assert round_half_up(0.49) == 0


class TestContractTotal:
    """Tests for contract total derivation."""

    def test_base_sum_over_categories(self):
        """Test that every item in every category is summed."""
        quote = make_quote(50000, 25000)
        quote = add_category(quote, "Permits")
        quote = add_item(quote, quote.categories[1].id, "Fees", 5000)
        assert base_sum(quote) == 80000
        assert contract_total(quote) == 80000

    def test_custom_total_overrides(self):
        """Test that a set override replaces the base sum."""
        quote = make_quote(50000, custom=1200000)
        assert contract_total(quote) == 1200000

    def test_zero_override_is_respected(self):
        """Test that an override of 0 still counts as set."""
        quote = make_quote(50000, custom=0)
        assert contract_total(quote) == 0

    def test_clearing_override(self):
        """Test that clearing the override goes back to the base sum."""
        quote = set_custom_total(make_quote(50000, custom=1200000), None)
        assert contract_total(quote) == 50000

    def test_empty_quote(self):
        """Test that an empty quote totals 0."""
        assert contract_total(QuoteData()) == 0


class TestTermAmounts:
    """Tests for per-term billing amounts."""

    def test_thirty_percent_of_contract(self):
        """Test the 1,200,000 contract / 30% term example."""
        quote = make_quote(custom=1200000)
        assert term_amount(quote, quote.payment_terms[0]) == 360000

    def test_rounding_residue_not_redistributed(self):
        """Test that each term rounds on its own."""
        quote = make_quote(100, terms=(33.333, 33.333, 33.334))
        amounts = [amount for _, amount in term_amounts(quote)]
        assert amounts == [33, 33, 33]
        assert sum(amounts) != contract_total(quote)

    def test_percentages_not_normalized(self):
        """Test that a schedule not adding up to 100 is kept as is."""
        quote = make_quote(1000, terms=(30, 40))
        assert terms_percentage_sum(quote) == 70
        assert [amount for _, amount in term_amounts(quote)] == [300, 400]

    def test_find_term(self):
        """Test term lookup by id."""
        quote = make_quote(1000)
        assert find_term(quote, "t1").percentage == 40
        assert find_term(quote, "missing") is None
        assert find_term(quote, None) is None


class TestQuoteEdits:
    """Tests for the pure quote editor operations."""

    def test_edits_do_not_mutate_input(self):
        """Test that edits return a new quote."""
        quote = make_quote(1000)
        edited = update_item(quote, "c1", "i0", amount=2000)
        assert quote.categories[0].items[0].amount == 1000
        assert edited.categories[0].items[0].amount == 2000

    def test_update_item_coerces_amount(self):
        """Test that typed amounts are normalized."""
        quote = update_item(make_quote(1000), "c1", "i0", amount="")
        assert quote.categories[0].items[0].amount == 0.0

    def test_remove_item_and_category(self):
        """Test removal by id."""
        quote = remove_item(make_quote(1000, 2000), "c1", "i0")
        assert [i.id for i in quote.categories[0].items] == ["i1"]
        assert remove_category(quote, "c1").categories == []

    def test_unknown_category_is_noop(self):
        """Test that item edits on a missing category change nothing."""
        quote = make_quote(1000)
        assert add_item(quote, "nope", "X", 1) == quote

    def test_rename_and_move_category(self):
        """Test category rename and reorder."""
        quote = add_category(make_quote(1000), "Permits")
        quote = rename_category(quote, "c1", "Basic design")
        quote = move_category(quote, 0, 1)
        assert [c.name for c in quote.categories] == ["Permits", "Basic design"]

    def test_move_item_down_within_category(self):
        """Test that a downward drop lands one slot before the drop index."""
        quote = make_quote(1, 2, 3)
        moved = move_item(quote, "c1", 0, "c1", 2)
        assert [i.id for i in moved.categories[0].items] == ["i1", "i0", "i2"]

    def test_move_item_past_end_appends(self):
        """Test that drop indexes beyond the list append."""
        quote = make_quote(1, 2, 3)
        moved = move_item(quote, "c1", 0, "c1", 3)
        assert [i.id for i in moved.categories[0].items] == ["i1", "i2", "i0"]

    def test_move_item_up_within_category(self):
        """Test an upward move."""
        quote = make_quote(1, 2, 3)
        moved = move_item(quote, "c1", 2, "c1", 0)
        assert [i.id for i in moved.categories[0].items] == ["i2", "i0", "i1"]

    def test_move_item_across_categories(self):
        """Test moving an item into another category."""
        quote = add_category(make_quote(1, 2), "Other")
        other_id = quote.categories[1].id
        moved = move_item(quote, "c1", 1, other_id, 0)
        assert [i.id for i in moved.categories[0].items] == ["i0"]
        assert [i.id for i in moved.categories[1].items] == ["i1"]
        assert base_sum(moved) == base_sum(quote)

    def test_term_edits(self):
        """Test add, update, remove of payment terms."""
        quote = add_term(make_quote(1000, terms=()), "Deposit", 30)
        term_id = quote.payment_terms[0].id
        quote = update_term(quote, term_id, percentage="50")
        assert quote.payment_terms[0].percentage == 50
        assert remove_term(quote, term_id).payment_terms == []

    def test_note_edits(self):
        """Test note add, update, move, remove."""
        quote = add_note(add_note(QuoteData(), "first"), "second")
        quote = update_note(quote, 0, "1st")
        quote = move_note(quote, 1, 0)
        assert quote.notes == ["second", "1st"]
        assert remove_note(quote, 0).notes == ["1st"]

    def test_select_bank_account(self):
        """Test that the account id is stored on the quote."""
        assert select_bank_account(QuoteData(), "acc-2").bank_account == "acc-2"


class TestTaxResolver:
    """Tests for the three tax modes."""

    def test_none_mode(self):
        """Test that untaxed gross is due in full with no tax line."""
        breakdown = resolve_tax(360000, TaxMode.NONE)
        assert breakdown.tax_component == 0
        assert breakdown.net_service_due == 360000
        assert not breakdown.shows_tax_line

    def test_vat_is_informational(self):
        """Test that included VAT does not reduce the amount due."""
        breakdown = resolve_tax(105000, TaxMode.VAT5)
        assert breakdown.tax_component == 5000
        assert breakdown.net_service_due == 105000
        assert breakdown.shows_tax_line
        assert not breakdown.is_withheld

    def test_vat_rounding(self):
        """Test that the VAT line is rounded half up."""
        assert tax_component(360000, TaxMode.VAT5) == 17143

    def test_withholding_scenario(self):
        """Test the 360,000 / wht10 example."""
        breakdown = resolve_tax(360000, TaxMode.WHT10)
        assert breakdown.tax_component == 36000
        assert breakdown.net_service_due == 324000
        assert breakdown.is_withheld

    @pytest.mark.parametrize("gross", [0, 1, 999, 1234, 123457, 360000])
    def test_withholding_has_no_residue(self, gross):
        """Test that net plus withheld tax equals the gross when 10% has no half."""
        assert net_service_due(gross, TaxMode.WHT10) + tax_component(gross, TaxMode.WHT10) == gross

    def test_withholding_rounds_net_after_subtracting(self):
        """Test that a half withholding rounds both the tax and the net line up."""
        assert tax_component(15, TaxMode.WHT10) == 2
        assert net_service_due(15, TaxMode.WHT10) == 14
        assert net_service_due(25, TaxMode.WHT10) == 23

    def test_zero_gross(self):
        """Test that a zero gross yields zero everywhere."""
        for mode in TaxMode:
            assert tax_component(0, mode) == 0
            assert net_service_due(0, mode) == 0

    def test_amount_due_adds_expenses_at_face_value(self):
        """Test that reimbursables are outside tax treatment."""
        assert amount_due(360000, 5000, TaxMode.WHT10) == 329000
        assert amount_due(360000, 5000, TaxMode.VAT5) == 365000

    def test_invoice_amount_due_defaults_to_none_mode(self):
        """Test that a missing tax mode is treated as untaxed."""
        invoice = Invoice(total_service=1000, total_expense=50)
        assert invoice_amount_due(invoice, None) == 1050


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
