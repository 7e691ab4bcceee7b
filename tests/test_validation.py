from __future__ import annotations

import unittest
from datetime import date

from services.errors import ValidationError
from services.models import RESULT_STROKES, SESSION_STROKES
from services.validation import (
    canonical_stroke,
    clamp_rpe,
    normalize_result_draft,
    normalize_session_draft,
    parse_date,
)


class SessionDraftTests(unittest.TestCase):
    def test_fields_are_clamped_and_cleaned(self) -> None:
        fields = normalize_session_draft(
            {"date": "2024-05-01", "distance_m": "-5", "duration_min": "abc", "stroke": "FREE", "rpe": "0", "notes": "  "}
        )
        self.assertEqual(
            fields,
            {
                "date": date(2024, 5, 1),
                "distance_m": 0,
                "duration_min": 0.0,
                "stroke": "Free",
                "rpe": None,
                "notes": None,
            },
        )

    def test_rpe_is_rounded_into_range(self) -> None:
        self.assertEqual(clamp_rpe(0.4), 1)
        self.assertEqual(clamp_rpe("7.6"), 8)
        self.assertEqual(clamp_rpe(42), 10)
        self.assertIsNone(clamp_rpe(None))
        self.assertIsNone(clamp_rpe("n/a"))

    def test_drill_is_a_training_stroke_only(self) -> None:
        self.assertEqual(normalize_session_draft({"date": "2024-05-01", "stroke": "drill"})["stroke"], "Drill")
        self.assertIsNone(canonical_stroke("Drill", RESULT_STROKES))
        self.assertEqual(canonical_stroke(" im ", SESSION_STROKES), "IM")

    def test_unknown_stroke_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            normalize_session_draft({"date": "2024-05-01", "stroke": "Doggy paddle"})

    def test_validation_error_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            normalize_session_draft({"stroke": "Free"})


class ParseDateTests(unittest.TestCase):
    def test_accepts_dates_and_timestamps(self) -> None:
        self.assertEqual(parse_date(date(2024, 2, 29)), date(2024, 2, 29))
        self.assertEqual(parse_date("2024-05-01T10:00:00+00:00"), date(2024, 5, 1))

    def test_rejects_blank_and_garbage(self) -> None:
        for value in (None, "", "   ", "01/05/2024", "2024-02-30"):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    parse_date(value)


class ResultDraftTests(unittest.TestCase):
    def test_race_time_text_is_parsed(self) -> None:
        fields = normalize_result_draft(
            {"date": "2024-03-01", "meet": "County", "distance_m": 100, "stroke": "back", "time_sec": "1:05.23"}
        )
        self.assertEqual(fields["stroke"], "Back")
        self.assertEqual(fields["distance_m"], 100)
        self.assertAlmostEqual(fields["time_sec"], 65.23)
        self.assertIsNone(fields["location"])

    def test_defaults_apply_to_missing_numbers(self) -> None:
        fields = normalize_result_draft({"date": "2024-03-01", "meet": "County", "stroke": "Free"})
        self.assertEqual(fields["distance_m"], 50)
        self.assertEqual(fields["time_sec"], 40.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
