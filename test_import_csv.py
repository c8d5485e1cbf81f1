"""
CSV parsing for the bulk reading import script.
"""

from import_readings_csv import parse_readings_csv


def test_rows_become_payloads():
    lines = [
        "unit,equipment,date,V1,GV1,notes\n",
        "DRI1,GB-cp48A,2024-03-01,5.5,0.25,ok\n",
        "DRI2,FN-fnMAB,2024-03-02,7,,\n",
    ]

    payloads, problems = parse_readings_csv(lines)

    assert problems == []
    assert payloads[0] == {
        "unit": "DRI1",
        "equipment": "GB-cp48A",
        "date": "2024-03-01",
        "parameters": {"V1": 5.5, "GV1": 0.25},
        "notes": "ok",
    }
    assert payloads[1]["parameters"] == {"V1": 7.0}


def test_missing_required_columns():
    payloads, problems = parse_readings_csv(["unit,date,V1\n", "DRI1,2024-03-01,1\n"])

    assert payloads == []
    assert problems == ["Missing columns: equipment"]


def test_bad_rows_are_reported_not_fatal():
    lines = [
        "unit,equipment,date,V1\n",
        "DRI1,,2024-03-01,1\n",
        "DRI1,GB-cp48A,2024-03-01,\n",
        "DRI1,GB-cp48A,2024-03-02,fast\n",
    ]

    payloads, problems = parse_readings_csv(lines)

    assert problems == [
        "Row 2: missing unit, equipment or date",
        "Row 3: no parameter values",
    ]
    assert payloads[0]["parameters"] == {"V1": "fast"}
