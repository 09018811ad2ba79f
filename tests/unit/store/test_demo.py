# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

import pytest

from elitekpi.core.primitives import Collection, DealSide, DealStage, KPISettings
from elitekpi.deal import Deal
from elitekpi.store import DemoAwareStore, DemoMode, demo_dataset, load_settings, save_settings
from elitekpi.store.demo import DEMO_MODE_ENV_VAR
from elitekpi.store.seed import BUYER_LEAD_COUNT
from tests.conftest import START


class TestDemoMode:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv(DEMO_MODE_ENV_VAR, "true")
        assert DemoMode().is_active
        monkeypatch.setenv(DEMO_MODE_ENV_VAR, "false")
        assert not DemoMode().is_active
        monkeypatch.delenv(DEMO_MODE_ENV_VAR)
        assert not DemoMode().is_active

    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv(DEMO_MODE_ENV_VAR, "true")
        assert not DemoMode(active=False)

    def test_toggle(self, caplog):
        mode = DemoMode(active=False)
        with caplog.at_level(logging.INFO, logger="elitekpi.store.demo"):
            mode.enable()
        assert mode.is_active
        assert "Demo mode enabled" in caplog.text
        mode.disable()
        assert not bool(mode)


class TestDemoAwareStore:
    @pytest.fixture
    def demo(self, store, clock):
        return DemoAwareStore(store, DemoMode(active=True), clock=clock)

    def test_serves_seed_while_active(self, demo, store):
        store.save(Collection.DEALS, [])
        deals = demo.load(Collection.DEALS)
        assert len(deals) == len(demo_dataset(START)[Collection.DEALS.value])

    def test_writes_are_skipped_with_warning(self, demo, store, caplog):
        with caplog.at_level(logging.WARNING, logger="elitekpi.store.demo"):
            demo.save(Collection.DEALS, [])
        assert "skipped in demo mode" in caplog.text
        assert Collection.DEALS not in store
        assert demo.load(Collection.DEALS) != []

    def test_seed_is_not_shared(self, demo):
        demo.load(Collection.DEALS)[0]["name"] = "Changed"
        assert demo.load(Collection.DEALS)[0]["name"] != "Changed"

    def test_settings_pass_through(self, demo, store):
        save_settings(demo, KPISettings(annual_gci_goal=200_000))
        assert load_settings(store).annual_gci_goal == 200_000
        assert load_settings(demo).annual_gci_goal == 200_000

    def test_mixed_batch_only_writes_settings(self, demo, store):
        demo.save_many({Collection.DEALS: [], Collection.SETTINGS: [KPISettings().model_dump(mode="json")]})
        assert Collection.SETTINGS in store
        assert Collection.DEALS not in store

    def test_inactive_store_is_transparent(self, demo, store):
        demo.demo_mode.disable()
        demo.save(Collection.DEALS, [{"id": "real"}])
        assert demo.load(Collection.DEALS) == [{"id": "real"}]
        assert store.load(Collection.DEALS) == [{"id": "real"}]


class TestSeed:
    def test_seed_records_are_valid_deals(self):
        deals = [Deal.model_validate(d) for d in demo_dataset(START)["deals"]]
        assert len(deals) == BUYER_LEAD_COUNT + 6
        assert len({d.id for d in deals}) == len(deals)

    def test_seed_contents(self):
        dataset = demo_dataset(START)
        deals = {d["id"]: Deal.model_validate(d) for d in dataset["deals"]}

        closed_seller = deals["demo-closed-2"]
        assert closed_seller.side == DealSide.SELLER
        assert closed_seller.stage == DealStage.CLOSED
        assert closed_seller.price_variance == 16_000
        assert closed_seller.days_on_market == 105

        active = deals["demo-seller-1"]
        assert active.expected_commission == 28_500
        assert len(dataset["expenses"]) == 2
        assert len(dataset["activities"]) == 1
        assert "settings" not in dataset

    def test_seed_dates_follow_now(self):
        dataset = demo_dataset(START)
        closed = Deal.model_validate(
            next(d for d in dataset["deals"] if d["id"] == "demo-closed-1")
        )
        assert (START - closed.closed_at).days == 45
