from widget_pipeline.models.widget import GroupByConfig
from widget_pipeline.services.transform import transform
from widget_pipeline.services.transform.grouping import coerce_chart_data, group_records


def test_average_per_group_sorted_descending():
    rows = [{"k": "a", "v": 1}, {"k": "a", "v": 3}, {"k": "b", "v": 5}]
    group_by = GroupByConfig(field="k", value_field="v", aggregation_function="avg")

    result = group_records(rows, group_by)

    assert [r["k"] for r in result] == ["b", "a"]
    assert result[0] == {"k": "b", "name": "b", "value": 5, "v": 5, "count": 1}
    assert result[1]["value"] == 2
    assert result[1]["count"] == 2


def test_non_numeric_values_are_dropped_from_sum():
    rows = [{"k": "x", "v": 1}, {"k": "x", "v": "x"}, {"k": "x", "v": 3}]
    group_by = GroupByConfig(field="k", value_field="v", aggregation_function="sum")

    result = group_records(rows, group_by)

    assert result[0]["value"] == 4
    assert result[0]["count"] == 3


def test_group_with_no_numeric_values_aggregates_to_zero():
    rows = [{"k": "x", "v": "n/a"}]
    group_by = GroupByConfig(field="k", value_field="v", aggregation_function="max")
    assert group_records(rows, group_by)[0]["value"] == 0


def test_count_without_value_field():
    rows = [{"status": "Open"}, {"status": "Open"}, {"status": "Done"}, {"status": None}]
    result = group_records(rows, GroupByConfig(field="status"))
    assert [(r["name"], r["value"]) for r in result] == [("Open", 2), ("Done", 1), ("Unknown", 1)]


def test_limit_keeps_the_largest_groups():
    rows = []
    for key, size in (("a", 1), ("b", 5), ("c", 3), ("d", 4), ("e", 2)):
        rows.extend({"team": key} for _ in range(size))

    result = group_records(rows, GroupByConfig(field="team", limit=2))

    assert len(result) == 2
    assert [r["team"] for r in result] == ["b", "d"]


def test_ascending_sort_and_default_limit():
    rows = [{"n": str(i)} for i in range(15)]
    result = group_records(rows, GroupByConfig(field="n", sort_by="asc", limit=None))
    assert len(result) == 10


def test_nested_group_value_uses_its_name():
    rows = [{"status": {"name": "In Progress"}}, {"status": {"name": "In Progress"}}]
    result = group_records(rows, GroupByConfig(field="status"))
    assert result[0]["name"] == "In Progress"
    assert result[0]["value"] == 2


def test_non_list_input_is_coerced_instead_of_grouped():
    assert group_records({"open": 3}, GroupByConfig(field="x")) == [{"name": "open", "value": 3}]
    assert group_records([], GroupByConfig(field="x")) == []


def test_generic_chart_coercion():
    assert coerce_chart_data([4, 5]) == [
        {"name": "Item 1", "value": 4},
        {"name": "Item 2", "value": 5},
    ]
    points = [{"name": "a", "value": 1}]
    assert coerce_chart_data(points) is points


def test_transform_only_reshapes_chart_and_cards(make_config):
    rows = [{"status": "Open"}, {"status": "Open"}]
    chart = make_config(displayType="chart", chartType="bar", groupBy={"field": "status"})
    table = make_config(displayType="table", groupBy={"field": "status"})

    assert transform(chart, rows)[0]["value"] == 2
    assert transform(table, rows) is rows
    assert transform(chart, None) is None
