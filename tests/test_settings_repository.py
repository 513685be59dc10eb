from dataclasses import replace

from tailorbook.data import settings_repository


def test_defaults():
    settings = settings_repository.get_app_settings()
    assert settings.business_name == "Nizy Tailors"
    assert settings.business_tagline == "Professional Tailoring Services"
    assert settings.business_phone == "9876543210"
    assert settings.currency_symbol == "₹"
    assert settings.default_due_days == 7
    assert settings.invoice_terms == [
        "1. No refunds on custom stitched items.",
        "2. Please collect items within 30 days of due date.",
    ]


def test_update_round_trip():
    current = settings_repository.get_app_settings()
    updated = settings_repository.update_app_settings(
        replace(
            current,
            business_name=" Stitch Co ",
            currency_symbol="$",
            default_due_days=3,
            invoice_terms=["Pay on pickup.", "  "],
        )
    )
    assert updated.business_name == "Stitch Co"
    assert updated.currency_symbol == "$"
    assert updated.default_due_days == 3
    assert updated.invoice_terms == ["Pay on pickup."]
    assert settings_repository.get_app_settings() == updated


def test_malformed_values_fall_back():
    settings_repository.set_setting("default_due_days", "soon")
    settings_repository.set_setting("invoice_terms", "{not json")
    settings_repository.set_setting("business_name", "   ")

    settings = settings_repository.get_app_settings()
    assert settings.default_due_days == 7
    assert len(settings.invoice_terms) == 2
    assert settings.business_name == "Nizy Tailors"


def test_unknown_key_is_blank():
    assert settings_repository.get_setting("no_such_key") == ""
