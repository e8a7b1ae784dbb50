# Expenses: validation and CRUD

from decimal import Decimal

import pytest

from core.errors import NotFoundError, ValidationError
from core.services.expense_service import ExpenseService, create_expense, validate_expense
from tests.conftest import FailingStore


class TestValidation:
    def test_all_errors_together(self):
        with pytest.raises(ValidationError) as exc:
            validate_expense("  ", "0")
        assert set(exc.value.errors) == {"description", "price"}

    def test_missing_price(self):
        with pytest.raises(ValidationError) as exc:
            validate_expense("Gasoil", "")
        assert "obligatoire" in exc.value.errors["price"]

    def test_create(self):
        e = create_expense(" Gasoil ", "12,5")
        assert e.description == "Gasoil"
        assert e.price == Decimal("12.5")


class TestExpenseService:
    def test_add_load_delete(self, store, admin):
        svc = ExpenseService(store)
        e = svc.add("Gasoil", 100)
        svc.add("Repas", "40,5")
        assert svc.total() == Decimal("140.5")

        fresh = ExpenseService(store)
        fresh.load()
        assert {x.description for x in fresh.expenses} == {"Gasoil", "Repas"}

        fresh.delete(e.id, admin)
        assert [x.description for x in fresh.expenses] == ["Repas"]
        assert len(store.list("frais")) == 1

    def test_delete_rules(self, store, admin, agent):
        svc = ExpenseService(store)
        e = svc.add("Gasoil", 100)
        with pytest.raises(PermissionError):
            svc.delete(e.id, agent)
        with pytest.raises(NotFoundError):
            svc.delete("inconnu", admin)

    def test_sync_error_keeps_expense(self):
        svc = ExpenseService(FailingStore())
        svc.add("Gasoil", 100)
        assert len(svc.expenses) == 1
        assert not svc.sync_status.ok
