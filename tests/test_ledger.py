# Ticket ledger: creation, payments, edits, status derivation

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from core.errors import NegativeRemainingWarning, PaymentOutOfRangeError, ValidationError
from core.services import ledger


@pytest.fixture
def ticket():
    return ledger.create("Test Client", 10.5, 50.5, "Cuivre", 85.5)


class TestCreate:
    def test_gross_amount_is_exact_product(self, ticket):
        assert ticket.gross_amount == (Decimal("50.5") - Decimal("10.5")) * Decimal("85.5")
        assert ticket.gross_amount == Decimal("3420")

    def test_new_ticket_is_unpaid(self, ticket):
        assert ticket.status == "UNPAID"
        assert ticket.payments == []
        assert ticket.paid_amount == 0
        assert ticket.remaining_amount == ticket.gross_amount

    def test_accepts_raw_form_strings(self):
        t = ledger.create("  Ali  ", "10,5", "50.5", " Fer ", "2,25")
        assert t.client_name == "Ali"
        assert t.material == "Fer"
        assert t.weight_empty == Decimal("10.5")
        assert t.gross_amount == Decimal("90.000")

    def test_fresh_ids(self):
        a = ledger.create("A", 0, 1, "Fer", 1)
        b = ledger.create("A", 0, 1, "Fer", 1)
        assert a.id != b.id

    def test_zero_weights_fail_on_weight_full(self):
        with pytest.raises(ValidationError) as exc:
            ledger.create("Client", 0, 0, "Cuivre", 10)
        assert set(exc.value.errors) == {"weight_full"}
        assert "poids vide" in exc.value.errors["weight_full"]

    def test_all_errors_reported_together(self):
        with pytest.raises(ValidationError) as exc:
            ledger.create("", -1, "", "  ", 0)
        assert set(exc.value.errors) == {
            "client_name", "weight_empty", "weight_full", "material", "unit_price",
        }

    def test_unparsable_number(self):
        with pytest.raises(ValidationError) as exc:
            ledger.create("Client", "abc", 10, "Fer", "x")
        assert set(exc.value.errors) == {"weight_empty", "unit_price"}


class TestApplyPayment:
    def test_end_to_end_settlement(self, ticket):
        t1 = ledger.apply_payment(ticket, 1000)
        assert t1.paid_amount == 1000
        assert t1.remaining_amount == 2420
        assert t1.status == "PARTIAL"

        t2 = ledger.apply_payment(t1, 2420)
        assert t2.paid_amount == 3420
        assert t2.remaining_amount == 0
        assert t2.status == "PAID"

        with pytest.raises(PaymentOutOfRangeError) as exc:
            ledger.apply_payment(t2, 1)
        assert exc.value.valid_range == (0, 0)

    def test_payments_accumulate(self, ticket):
        t = ledger.apply_payment(ticket, "100,10", note="acompte")
        t = ledger.apply_payment(t, "200.20")
        assert t.paid_amount == Decimal("300.30")
        assert t.remaining_amount == t.gross_amount - t.paid_amount
        assert [p.note for p in t.payments] == ["acompte", None]

    def test_many_small_payments_reach_exact_zero(self):
        t = ledger.create("C", 0, 1, "Fer", "1")
        for _ in range(10):
            t = ledger.apply_payment(t, "0.1")
        assert t.remaining_amount == 0
        assert t.status == "PAID"

    def test_over_payment_leaves_ticket_unchanged(self, ticket):
        with pytest.raises(PaymentOutOfRangeError) as exc:
            ledger.apply_payment(ticket, 5000)
        assert exc.value.remaining == ticket.gross_amount
        assert ticket.payments == []
        assert ticket.status == "UNPAID"

    @pytest.mark.parametrize("amount", [0, -5, "", "abc", None])
    def test_non_positive_or_invalid_amount(self, ticket, amount):
        with pytest.raises(PaymentOutOfRangeError):
            ledger.apply_payment(ticket, amount)

    @pytest.mark.parametrize("price", ["12.345", "12.355"])
    def test_suggested_payment_settles_exactly(self, price):
        t = ledger.create("C", 0, 1, "Fer", price)
        suggested = ledger.suggested_payment(t)
        assert suggested == Decimal(price)
        t = ledger.apply_payment(t, str(suggested))
        assert t.remaining_amount == 0
        assert t.status == "PAID"
        assert ledger.suggested_payment(t) == 0

    def test_suggested_payment_never_negative(self, ticket):
        paid = ledger.apply_payment(ticket, 3420)
        with pytest.warns(NegativeRemainingWarning):
            overpaid = ledger.edit(paid, "Test Client", 10.5, 20.5, "Cuivre", 85.5)
        assert ledger.suggested_payment(overpaid) == 0

    def test_input_ticket_not_mutated(self, ticket):
        paid = ledger.apply_payment(ticket, 10)
        assert len(paid.payments) == 1
        assert ticket.payments == []
        assert paid.id == ticket.id
        assert paid.date == ticket.date


class TestEdit:
    def test_preserves_payments_and_recomputes(self, ticket):
        t = ledger.apply_payment(ticket, 1000)
        edited = ledger.edit(t, "Autre", 10.5, 60.5, "Laiton", 85.5)
        assert edited.id == t.id
        assert edited.date == t.date
        assert edited.paid_amount == 1000
        assert len(edited.payments) == len(t.payments)
        assert all(a is b for a, b in zip(edited.payments, t.payments))
        assert edited.gross_amount == Decimal("4275")
        assert edited.remaining_amount == Decimal("3275")
        assert edited.status == "PARTIAL"

    def test_idempotent_with_own_values(self, ticket):
        t = ledger.apply_payment(ticket, 1000)
        same = ledger.edit(t, t.client_name, t.weight_empty, t.weight_full, t.material, t.unit_price)
        assert same.gross_amount == t.gross_amount
        assert same.remaining_amount == t.remaining_amount
        assert same.status == t.status
        assert same.paid_amount == t.paid_amount
        assert same.payments == t.payments

    def test_edit_to_exact_paid_amount_settles(self, ticket):
        t = ledger.apply_payment(ticket, 1000)
        edited = ledger.edit(t, "C", 0, 10, "Fer", 100)
        assert edited.remaining_amount == 0
        assert edited.status == "PAID"

    def test_negative_remaining_is_flagged_not_clamped(self, ticket):
        t = ledger.apply_payment(ticket, 3000)
        with pytest.warns(NegativeRemainingWarning):
            edited = ledger.edit(t, "C", 0, 10, "Fer", 100)
        assert edited.remaining_amount == Decimal("-2000")
        assert edited.is_overpaid

    def test_same_validation_as_create(self, ticket):
        with pytest.raises(ValidationError) as exc:
            ledger.edit(ticket, "", 10, 5, "Fer", 1)
        assert set(exc.value.errors) == {"client_name", "weight_full"}


class TestDerivedFields:
    def test_status_is_not_settable(self, ticket):
        with pytest.raises((AttributeError, PydanticValidationError)):
            ticket.status = "PAID"

    def test_delete_returns_id(self, ticket):
        assert ledger.delete(ticket.id) == ticket.id
