from widget_pipeline.services.broker.envelope import (
    failure_message,
    is_business_failure,
    is_rate_limit_message,
    unwrap_envelope,
)


def test_success_response_envelope():
    assert unwrap_envelope({"success": True, "response": [1, 2]}) == [1, 2]


def test_data_envelope_unwraps_one_level_only():
    assert unwrap_envelope({"data": {"data": 1}}) == {"data": 1}


def test_data_with_sibling_value_is_not_an_envelope():
    payload = {"data": [1], "value": 3}
    assert unwrap_envelope(payload) == payload


def test_results_envelope():
    assert unwrap_envelope({"results": [{"a": 1}]}) == [{"a": 1}]


def test_unknown_shapes_pass_through_unchanged():
    payload = {"count": 4, "items": []}
    assert unwrap_envelope(payload) is payload
    assert unwrap_envelope([1, 2]) == [1, 2]
    assert unwrap_envelope(7) == 7


def test_business_failure_requires_explicit_false():
    assert is_business_failure({"success": False})
    assert not is_business_failure({"success": None})
    assert not is_business_failure({"data": []})


def test_failure_message_probe_order_and_default():
    assert failure_message({"success": False, "message": "Bad JQL"}) == "Bad JQL"
    assert failure_message({"success": False, "error": {"message": "Nope"}}) == "Nope"
    assert failure_message({"success": False}) == "Failed to fetch data"


def test_rate_limit_signatures_are_case_insensitive():
    assert is_rate_limit_message("Rate Limit exceeded")
    assert is_rate_limit_message("HTTP 429: slow down")
    assert is_rate_limit_message("Too Many Requests")
    assert not is_rate_limit_message("Unauthorized")
    assert not is_rate_limit_message(None)
