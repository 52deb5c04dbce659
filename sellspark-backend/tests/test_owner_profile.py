"""Tests for owner profile extraction."""

from sellspark.services.owner_profile import (
    BusinessModel,
    OwnerProfile,
    TechComfort,
    extract_owner_profile,
)


def test_defaults_without_signals():
    profile = extract_owner_profile(["Jane", "I want to automate follow-ups"], "")

    assert profile.monthly_revenue == 10000
    assert profile.hourly_rate == 500
    assert profile.client_count == 15
    assert profile.business_model == BusinessModel.SOLO
    assert profile.tech_comfort == TechComfort.MEDIUM


def test_summary_keywords_set_revenue_band():
    assert extract_owner_profile([], "Enterprise leadership coaching").monthly_revenue == 25000
    assert extract_owner_profile([], "Premium wellness retreats").monthly_revenue == 18000
    assert extract_owner_profile([], "A startup coaching practice").monthly_revenue == 5000


def test_hourly_rate_is_clamped():
    profile = extract_owner_profile([], "A startup coaching practice")
    assert profile.hourly_rate == 250

    low = extract_owner_profile(["I bring in $800/month"], "")
    assert low.monthly_revenue == 800
    assert low.hourly_rate == 50


def test_explicit_figures_override_keywords():
    profile = extract_owner_profile(
        ["We make about $12k/month", "I charge $150 per hour", "I have 22 active clients"],
        "Enterprise coaching",
    )
    assert profile.monthly_revenue == 12000
    assert profile.hourly_rate == 150
    assert profile.client_count == 22


def test_bare_monthly_counts_are_not_revenue():
    assert extract_owner_profile(["I post 4 a month"]).monthly_revenue == 10000
    assert extract_owner_profile(["I get about 10/month"], "Premium coaching").monthly_revenue == 18000


def test_bare_figure_counts_as_revenue_after_a_revenue_word():
    assert extract_owner_profile(["We make 9000 a month"]).monthly_revenue == 9000
    profile = extract_owner_profile(["I run 6 a month and earn $7,500/month"])
    assert profile.monthly_revenue == 7500


def test_client_count_keywords():
    assert extract_owner_profile(["I coach dozens of people"]).client_count == 25
    assert extract_owner_profile(["Just a few people right now"]).client_count == 8


def test_business_model_and_tech_comfort():
    team = extract_owner_profile(["My staff handle scheduling", "We use scheduling software"])
    assert team.business_model == BusinessModel.TEAM
    assert team.tech_comfort == TechComfort.HIGH

    agency = extract_owner_profile(["We run an agency", "I struggle with tech"])
    assert agency.business_model == BusinessModel.AGENCY
    assert agency.tech_comfort == TechComfort.LOW


def test_extraction_is_deterministic_and_round_trips():
    answers = ["Jane", "Automate onboarding", "Our team of 4 has 30 clients"]
    first = extract_owner_profile(answers, "Premium coaching")
    assert first == extract_owner_profile(answers, "Premium coaching")
    assert OwnerProfile.from_dict(first.to_dict()) == first
