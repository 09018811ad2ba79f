# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import timedelta

import pytest

from elitekpi.core.primitives import DealStage, RecordValidationError
from elitekpi.deal import (
    prepare_for_save,
    record_closing,
    set_stage,
    update_listing_terms,
    validate_for_save,
)
from tests.conftest import START, make_buyer_deal, make_seller_deal


class TestSetStage:
    def test_transition_stamps_time_and_resets_probability(self, clock):
        deal = make_buyer_deal(clock, close_probability_bps=3_333)
        clock.advance(days=3)
        moved = set_stage(deal, DealStage.UNDER_CONTRACT, clock)
        assert moved.stage == DealStage.UNDER_CONTRACT
        assert moved.stage_entered_at == START + timedelta(days=3)
        assert moved.close_probability_bps == 9_000

    def test_same_stage_is_a_no_op(self, clock):
        deal = make_buyer_deal(clock, close_probability_bps=3_333)
        clock.advance(days=3)
        assert set_stage(deal, DealStage.LEAD, clock) is deal

    def test_probability_override_survives_until_next_transition(self, clock):
        deal = set_stage(make_buyer_deal(clock), DealStage.SHOWING_OR_ACTIVE, clock)
        deal = deal.revise(close_probability_bps=7_000)
        assert deal.close_probability_bps == 7_000
        clock.advance(hours=1)
        assert set_stage(deal, DealStage.UNDER_CONTRACT, clock).close_probability_bps == 9_000

    def test_stages_may_be_skipped_and_reversed(self, clock):
        deal = make_buyer_deal(clock)
        deal = set_stage(deal, DealStage.PENDING_CLOSE, clock)
        deal = set_stage(deal, DealStage.INITIAL_CONTACT, clock)
        assert deal.stage == DealStage.INITIAL_CONTACT
        assert deal.close_probability_bps == 2_000


class TestClosedAt:
    def test_closed_at_set_on_first_close(self, clock):
        clock.advance(days=10)
        deal = set_stage(make_buyer_deal(clock), DealStage.CLOSED, clock)
        assert deal.closed_at == START + timedelta(days=10)

    def test_closed_at_is_set_exactly_once(self, clock):
        deal = record_closing(make_buyer_deal(clock), 9_000, clock=clock)
        first_close = deal.closed_at

        clock.advance(days=5)
        reopened = set_stage(deal, DealStage.UNDER_CONTRACT, clock)
        assert reopened.closed_at == first_close

        clock.advance(days=5)
        closed_again = set_stage(reopened, DealStage.CLOSED, clock)
        assert closed_again.closed_at == first_close

    def test_leaving_closed_clears_closing_figures(self, clock):
        deal = set_stage(make_seller_deal(clock), DealStage.SHOWING_OR_ACTIVE, clock)
        clock.advance(days=20)
        deal = record_closing(deal, 15_000, closed_price=510_000, clock=clock)
        assert deal.days_on_market == 20

        reopened = set_stage(deal, DealStage.PENDING_CLOSE, clock)
        assert reopened.realized_commission is None
        assert reopened.days_on_market is None
        assert reopened.price_variance is None
        assert reopened.closed_price == 510_000


class TestSellerEffects:
    def test_going_active_stamps_listing_date_once(self, clock):
        deal = set_stage(make_seller_deal(clock), DealStage.SHOWING_OR_ACTIVE, clock)
        assert deal.listing_date == START

        clock.advance(days=7)
        deal = set_stage(deal, DealStage.INITIAL_CONTACT, clock)
        deal = set_stage(deal, DealStage.SHOWING_OR_ACTIVE, clock)
        assert deal.listing_date == START

    def test_buyer_gets_no_listing_date(self, clock):
        deal = set_stage(make_buyer_deal(clock), DealStage.SHOWING_OR_ACTIVE, clock)
        assert deal.listing_date is None

    def test_close_without_listing_date_leaves_dom_unset(self, clock):
        deal = record_closing(make_seller_deal(clock), 15_000, closed_price=505_000, clock=clock)
        assert deal.days_on_market is None
        assert deal.price_variance == 5_000

    def test_update_listing_terms(self, clock):
        deal = update_listing_terms(make_seller_deal(clock), list_price=400_000, commission_rate_pct=2.5)
        assert deal.expected_commission == 10_000

    def test_update_listing_terms_rejects_buyers(self, clock):
        with pytest.raises(RecordValidationError, match="only apply to SELLER"):
            update_listing_terms(make_buyer_deal(clock), list_price=400_000)


class TestValidateForSave:
    def test_closed_without_realized_commission_rejected(self, clock):
        deal = set_stage(make_buyer_deal(clock), DealStage.CLOSED, clock)
        with pytest.raises(RecordValidationError) as exc_info:
            validate_for_save(deal)
        assert exc_info.value.errors == ["Realized commission is required"]

    def test_closed_with_zero_commission_rejected(self, clock):
        deal = set_stage(make_buyer_deal(clock), DealStage.CLOSED, clock).revise(realized_commission=0)
        with pytest.raises(RecordValidationError, match="greater than 0"):
            validate_for_save(deal)

    def test_closed_seller_requires_closed_price(self, clock):
        deal = record_closing(make_seller_deal(clock), 15_000, clock=clock)
        with pytest.raises(RecordValidationError) as exc_info:
            validate_for_save(deal)
        assert exc_info.value.errors == ["Closed price is required"]

    def test_blank_name_and_address_reported_together(self, clock):
        deal = make_buyer_deal(clock, name=" ", property_address="")
        with pytest.raises(RecordValidationError) as exc_info:
            validate_for_save(deal)
        assert exc_info.value.errors == [
            "Client name is required",
            "Property address is required",
        ]

    def test_open_deal_passes(self, clock):
        validate_for_save(make_buyer_deal(clock))


class TestPrepareForSave:
    def test_new_seller_created_active_gets_listing_date(self, clock):
        deal = make_seller_deal(clock, stage=DealStage.SHOWING_OR_ACTIVE)
        assert deal.listing_date is None
        assert prepare_for_save(deal, None, clock).listing_date == START

    def test_resaving_unchanged_deal_keeps_stage_timestamp(self, clock):
        stored = prepare_for_save(make_buyer_deal(clock), None, clock)
        clock.advance(days=2)
        resaved = prepare_for_save(stored.revise(notes="called back"), stored, clock)
        assert resaved.stage_entered_at == stored.stage_entered_at
        assert resaved.notes == "called back"

    def test_direct_stage_edit_gets_transition_bookkeeping(self, clock):
        stored = make_buyer_deal(clock, close_probability_bps=1_000)
        clock.advance(days=4)
        edited = stored.revise(stage=DealStage.UNDER_CONTRACT)
        saved = prepare_for_save(edited, stored, clock)
        assert saved.stage_entered_at == START + timedelta(days=4)
        assert saved.close_probability_bps == 9_000

    def test_already_transitioned_deal_is_not_stamped_twice(self, clock):
        stored = make_buyer_deal(clock)
        clock.advance(days=1)
        moved = set_stage(stored, DealStage.SHOWING_OR_ACTIVE, clock).revise(close_probability_bps=6_500)
        clock.advance(days=1)
        saved = prepare_for_save(moved, stored, clock)
        assert saved.stage_entered_at == START + timedelta(days=1)
        assert saved.close_probability_bps == 6_500

    def test_side_cannot_change(self, clock):
        stored = make_buyer_deal(clock)
        seller = make_seller_deal(clock).model_copy(update={"id": stored.id})
        with pytest.raises(RecordValidationError, match="side cannot change"):
            prepare_for_save(seller, stored, clock)

    def test_closed_at_cannot_be_rewritten(self, clock):
        stored = record_closing(make_buyer_deal(clock), 9_000, clock=clock)
        clock.advance(days=3)
        tampered = stored.revise(closed_at=clock.now())
        assert prepare_for_save(tampered, stored, clock).closed_at == START

    def test_closing_metrics_refreeze_on_price_edit(self, clock):
        deal = set_stage(make_seller_deal(clock), DealStage.SHOWING_OR_ACTIVE, clock)
        clock.advance(days=30)
        stored = record_closing(deal, 15_000, closed_price=500_000, clock=clock)
        saved = prepare_for_save(stored.revise(closed_price=530_000), stored, clock)
        assert saved.price_variance == 30_000
        assert saved.days_on_market == 30

    def test_rejects_invalid_closed_deal(self, clock):
        stored = make_buyer_deal(clock)
        clock.advance(days=1)
        with pytest.raises(RecordValidationError):
            prepare_for_save(stored.revise(stage=DealStage.CLOSED), stored, clock)
