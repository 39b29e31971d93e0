from whereis.models import ApiError, ErrorPayload, LocationRecord, LookupOutcome


def test_lat_lng_uses_two_decimals(mountain_view):
    assert mountain_view.lat_lng == "37.40, -122.08"


def test_lat_lng_rounds():
    record = LocationRecord("AU", "Sydney", -33.86785, 151.20732, "Australia/Sydney")
    assert record.lat_lng == "-33.87, 151.21"


def test_lat_lng_at_origin():
    record = LocationRecord("", "", 0.0, 0.0, "")
    assert record.lat_lng == "0.00, 0.00"


def test_display_fields_order(mountain_view):
    assert mountain_view.display_fields() == (
        "US",
        "Mountain View",
        "37.40, -122.08",
        "America/Los_Angeles",
    )


def test_api_error_message():
    assert ApiError(500, ErrorPayload("rate limited")).message == "rate limited"
    assert ApiError(502).message == "unparseable error response"


def test_lookup_outcome_ok(mountain_view):
    assert LookupOutcome(record=mountain_view).ok
    assert not LookupOutcome(error=ApiError(404)).ok
