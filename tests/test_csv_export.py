from datetime import datetime, timezone

from gymdesk.app.utils.csv_export import (
    CSVColumn,
    array_to_csv,
    export_filename,
    format_array_for_csv,
    format_object_for_csv,
    get_nested_value,
)


class Plan:
    name = "Premium Monthly"


class Subscription:
    plan = Plan()
    member = None


def test_nested_values_from_mappings_and_attributes():
    assert get_nested_value({"member": {"first_name": "Jane"}}, "member.first_name") == "Jane"
    assert get_nested_value(Subscription(), "plan.name") == "Premium Monthly"
    assert get_nested_value(Subscription(), "member.first_name") is None


def test_array_to_csv_quotes_everything():
    rows = [
        {"name": 'Jane "JD" Doe', "tags": ["morning", "evening"], "joined": datetime(2030, 1, 2, 8, 0, tzinfo=timezone.utc)},
        {"name": "Mark", "tags": [], "joined": None},
    ]
    columns = [
        CSVColumn("name", "Name"),
        CSVColumn("tags", "Tags", format_array_for_csv),
        CSVColumn("joined", "Joined"),
    ]
    content = array_to_csv(rows, columns)
    assert content.split("\n") == [
        '"Name","Tags","Joined"',
        '"Jane ""JD"" Doe","morning; evening","2030-01-02 08:00:00+00:00"',
        '"Mark","",""',
    ]


def test_empty_rows_give_empty_csv():
    assert array_to_csv([], [CSVColumn("name", "Name")]) == ""


def test_format_helpers():
    assert format_array_for_csv(None) == ""
    assert format_object_for_csv({"name": "John", "phone": "555", "relationship": "Brother"}) == "John (Brother) - 555"
    assert format_object_for_csv({"note": "x"}) == "note: x"
    assert format_object_for_csv(None) == ""


def test_export_filename():
    assert export_filename("members", datetime(2030, 5, 6).date()) == "members-export-2030-05-06.csv"
