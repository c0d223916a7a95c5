from widget_pipeline.models.widget import FieldSelection
from widget_pipeline.services.transform import transform
from widget_pipeline.services.transform.fields import (
    first_record,
    prettify_field_name,
    select_fields,
)

RECORD = {"name": "ACME", "domain": "acme.io", "tier": None, "notes": "", "owner": "kim"}


def test_selection_disabled_keeps_everything():
    assert select_fields(RECORD, FieldSelection(enabled=False)) == RECORD
    assert select_fields(RECORD, None) == RECORD


def test_selected_fields_and_null_exclusion():
    selection = FieldSelection(enabled=True, selected_fields=["name", "tier", "notes", "missing"])
    assert select_fields(RECORD, selection) == {"name": "ACME"}


def test_null_fields_kept_when_exclusion_is_off():
    selection = FieldSelection(
        enabled=True, selected_fields=["name", "tier"], exclude_null_fields=False,
    )
    assert select_fields(RECORD, selection) == {"name": "ACME", "tier": None}


def test_empty_selection_keeps_all_non_null_fields():
    selection = FieldSelection(enabled=True)
    assert select_fields(RECORD, selection) == {"name": "ACME", "domain": "acme.io", "owner": "kim"}


def test_first_record_of_a_list():
    assert first_record([1, {"a": 1}, {"b": 2}]) == {"a": 1}
    assert first_record({"a": 1}) == {"a": 1}
    assert first_record([]) is None


def test_prettify_field_name():
    assert prettify_field_name("created_at") == "Created At"
    assert prettify_field_name("issueCount") == "Issue Count"
    assert prettify_field_name("customfield_10010") == "Custom Field 10010"


def test_cards_transform_selects_from_first_record(make_config):
    config = make_config(
        displayType="cards",
        fieldSelection={"enabled": True, "selectedFields": ["name", "owner"]},
    )
    assert transform(config, [RECORD, {"name": "Other"}]) == {"name": "ACME", "owner": "kim"}
