from package_pricing import parse_package_array


def test_none_and_empty_values_give_empty_list():
    assert parse_package_array(None) == []
    assert parse_package_array("") == []
    assert parse_package_array([]) == []


def test_native_list_is_returned_unchanged():
    rooms = [{"name": "Nile View", "price": 1000}]
    assert parse_package_array(rooms) == rooms


def test_json_string_is_decoded():
    assert parse_package_array('[6, 7, "8"]') == [6, 7, "8"]


def test_malformed_json_is_swallowed_and_reported():
    warnings = []
    assert parse_package_array("{not valid json", warnings) == []
    assert len(warnings) == 1
    assert "Malformed JSON" in warnings[0]


def test_json_object_is_not_an_array():
    warnings = []
    assert parse_package_array('{"id": 3}', warnings) == []
    assert warnings
