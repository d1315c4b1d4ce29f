import csv
import io

from pointart_api.services.exports import convert_to_csv


def test_empty_input_gives_empty_string():
    assert convert_to_csv([]) == ""


def test_columns_are_union_in_first_seen_order():
    text = convert_to_csv([{"a": 1, "b": 2}, {"b": 3, "c": 4}])
    assert text.split("\n") == ["a,b,c", "1,2,", ",3,4"]


def test_none_becomes_empty_and_no_trailing_newline():
    text = convert_to_csv([{"item": "Pen", "note": None}])
    assert text == "item,note\nPen,"


def test_special_values_are_quoted():
    text = convert_to_csv([{"name": 'He said "hi"', "desc": "a,b", "multi": "x\ny"}])
    header, _ = text.split("\n", 1)
    assert header == "name,desc,multi"
    assert '"He said ""hi"""' in text
    assert '"a,b"' in text
    assert '"x\ny"' in text


def test_header_mapping():
    text = convert_to_csv([{"selling_price": 500}], headers={"selling_price": "Selling Price"})
    assert text == "Selling Price\n500"


def test_round_trip_through_csv_reader():
    records = [
        {"item": "Glue, white", "qty": 3, "note": 'size "L"'},
        {"item": "Card\nBirthday", "qty": 1, "note": None},
    ]
    rows = list(csv.reader(io.StringIO(convert_to_csv(records))))
    assert rows == [
        ["item", "qty", "note"],
        ["Glue, white", "3", 'size "L"'],
        ["Card\nBirthday", "1", ""],
    ]
