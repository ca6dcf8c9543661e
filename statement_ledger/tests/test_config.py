"""
Tests for YAML settings.
"""
from decimal import Decimal

import pytest

from ..core.config import Settings, load_settings
from ..core.layout import LayoutReconstructor
from ..core.ledger import LedgerAggregator
from ..core.loader import TextRun
from ..core.store import InMemoryTransactionStore


class TestLoadSettings:

    def test_packaged_defaults_match_code_defaults(self):
        assert load_settings() == Settings()

    def test_default_values(self):
        settings = load_settings()
        assert settings.layout.line_tolerance == 5
        assert settings.layout.paragraph_break_factor == 1.5
        assert settings.ledger.initial_balance == Decimal("1000")
        assert list(settings.categories)[0] == "Food/Dining"

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("layout:\n  space_gap: 30\nledger:\n  initial_balance: '250.50'\n")
        settings = load_settings(path)
        assert settings.layout.space_gap == 30
        assert settings.layout.line_tolerance == 5
        assert settings.ledger.initial_balance == Decimal("250.50")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("layout:\n  default_line_height: -1\n")
        with pytest.raises(ValueError):
            load_settings(path)


class TestFromSettings:

    def test_reconstructor_uses_layout_and_categories(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("layout:\n  space_gap: 30\ncategories:\n  Pets: [Petco]\n")
        reconstructor = LayoutReconstructor.from_settings(load_settings(path))
        page = reconstructor.reconstruct([TextRun("Petco", 0, 0), TextRun("$8.00", 20, 0)])
        assert page.text == "Petco$8.00"
        assert page.identified_data.categories == ["Petco"]

    def test_aggregator_uses_initial_balance(self):
        settings = Settings.model_validate({"ledger": {"initial_balance": "0"}})
        aggregator = LedgerAggregator.from_settings(InMemoryTransactionStore(), "alice", settings)
        assert aggregator.initial_balance == Decimal("0")


def test_empty_categories_in_settings(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("categories: {}\n")
    reconstructor = LayoutReconstructor.from_settings(load_settings(path))
    page = reconstructor.reconstruct([TextRun("Grocery $4.50", 0, 0)])
    assert page.identified_data.categories == []
