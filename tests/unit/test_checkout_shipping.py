from storefront.checkout.shipping import detect_country, normalize_country, select_shipping_rates, to_shipping_options
from storefront.config import ShippingRates


def test_normalize_country():
    assert normalize_country("gb") == "GB"
    assert normalize_country(" fr ") == "FR"
    assert normalize_country("XX") is None
    assert normalize_country("T1") is None
    assert normalize_country("GBR") is None
    assert normalize_country(None) is None
    assert normalize_country(44) is None


def test_detect_country_priority():
    headers = {"x-country": "FR", "cf-ipcountry": "DE"}
    assert detect_country(headers, "US") == "FR"
    assert detect_country({"cf-ipcountry": "DE"}, "US") == "DE"
    assert detect_country({}, "us") == "US"
    # en-têtes inexploitables -> indice client
    assert detect_country({"x-country": "XX", "cf-ipcountry": ""}, "GB") == "GB"
    assert detect_country({}, None) is None


def test_home_country_below_threshold(settings):
    assert select_shipping_rates("GB", 7499, settings) == ["shr_standard", "shr_express"]


def test_home_country_free_shipping_once(settings):
    rates = select_shipping_rates("GB", 7500, settings)
    assert rates == ["shr_standard", "shr_express", "shr_free"]
    assert rates.count("shr_free") == 1


def test_regional_and_international(settings):
    assert select_shipping_rates("FR", 100000, settings) == ["shr_regional"]
    assert select_shipping_rates("US", 100000, settings) == ["shr_international"]


def test_unresolved_country_offers_every_category(settings):
    assert select_shipping_rates(None, 100, settings) == [
        "shr_standard", "shr_express", "shr_regional", "shr_international",
    ]
    assert select_shipping_rates(None, 9998, settings) == [
        "shr_standard", "shr_express", "shr_free", "shr_regional", "shr_international",
    ]


def test_unconfigured_and_duplicate_rates_are_skipped(settings):
    partial = settings.model_copy(update={"shipping_rates": ShippingRates(standard="shr_same", express="shr_same")})
    assert select_shipping_rates("GB", 10000, partial) == ["shr_same"]
    assert select_shipping_rates("FR", 10000, partial) == []


def test_to_shipping_options():
    assert to_shipping_options(["shr_a", "shr_b"]) == [{"shipping_rate": "shr_a"}, {"shipping_rate": "shr_b"}]
