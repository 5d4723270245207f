from core.i18n import t


def test_spanish_translation_loaded():
    assert t("save_ok", "es") == "Crédito guardado exitosamente"
    assert t("UnknownKey", "es") == "UnknownKey"


def test_english_and_fallback():
    assert t("save_ok", "en") == "Loan saved successfully"
    assert t("save_ok", "qu") == "Crédito guardado exitosamente"


def test_placeholders():
    assert t("generate_ok_detail", tcea="9.87%") == "TCEA: 9.87%"
    assert t("rate_out_of_range", min_rate=6) == "La tasa debe estar entre 6% y {max_rate}%"
