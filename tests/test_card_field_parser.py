"""Tests for single-frame card field parsing."""

from __future__ import annotations

import json

import pytest

from conftest import det, fullCardFrame
from core.interfaces.card_parser_interface import ParsedCardFields
from core.interfaces.ocr_extractor_interface import OcrDetection
from core.processor.card_field_parser import CardFieldParser, parseCardFromDetections


@pytest.fixture
def parser() -> CardFieldParser:
    return CardFieldParser()


# ââ Card number: single detection ââââââââââââââââââââââââââââââââ


class TestSingleDetectionNumber:
    def test_spaced_number(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111")])
        assert fields.cardNumber == "4111111111111111"

    def test_hyphenated_number(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("5500-0000-0000-0004")])
        assert fields.cardNumber == "5500000000000004"

    @pytest.mark.parametrize("length", [13, 16, 19])
    def test_accepted_lengths(self, parser: CardFieldParser, length: int) -> None:
        fields = parser.parse([det("4" * length)])
        assert fields.cardNumber == "4" * length

    @pytest.mark.parametrize("length", [12, 20])
    def test_rejected_lengths(self, parser: CardFieldParser, length: int) -> None:
        fields = parser.parse([det("4" * length)])
        assert fields.cardNumber is None

    def test_first_qualifying_detection_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("4111 1111 1111 1111", y=0),
            det("5500 0000 0000 0004", y=100),
        ])
        assert fields.cardNumber == "4111111111111111"

    def test_no_number_means_no_other_fields(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("CHASE"), det("12/25"), det("JOHN SMITH")])
        assert fields == ParsedCardFields()

    def test_empty_input(self, parser: CardFieldParser) -> None:
        assert parser.parse([]) == ParsedCardFields()


# ââ Card number: same-line reassembly ââââââââââââââââââââââââââââ


class TestMultiDetectionNumber:
    def test_groups_on_one_line(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("4111", x=0, y=100),
            det("1111", x=100, y=102),
            det("1111", x=200, y=98),
            det("1111", x=300, y=101),
        ])
        assert fields.cardNumber == "4111111111111111"

    def test_groups_sorted_left_to_right(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("5678", x=200, y=100),
            det("4000", x=0, y=100),
            det("9010", x=300, y=100),
            det("1234", x=100, y=100),
        ])
        assert fields.cardNumber == "4000123456789010"

    def test_groups_on_different_lines_not_joined(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("4111", x=0, y=0),
            det("1111", x=100, y=0),
            det("1111", x=0, y=100),
            det("1111", x=100, y=100),
        ])
        assert fields.cardNumber is None

    def test_short_groups_ignored(self, parser: CardFieldParser) -> None:
        # "12" carries fewer than three digits and never joins the line
        fields = parser.parse([
            det("4111 1111", x=0, y=0),
            det("12", x=150, y=0),
            det("1111 1111", x=200, y=0),
        ])
        assert fields.cardNumber == "4111111111111111"

    def test_longest_line_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("1111", x=0, y=0),
            det("2222", x=100, y=0),
            det("3333", x=200, y=0),
            det("4444", x=300, y=0),
            det("5555", x=0, y=100),
            det("6666", x=100, y=100),
            det("7777", x=200, y=100),
            det("8888", x=300, y=100),
            det("999", x=400, y=100),
        ])
        assert fields.cardNumber == "5555666677778888999"

    def test_equal_length_topmost_line_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("5555", x=0, y=200),
            det("6666", x=100, y=200),
            det("7777", x=200, y=200),
            det("8888", x=300, y=200),
            det("1111", x=0, y=100),
            det("2222", x=100, y=100),
            det("3333", x=200, y=100),
            det("4444", x=300, y=100),
        ])
        assert fields.cardNumber == "1111222233334444"

    def test_missing_bbox_keeps_engine_order(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            OcrDetection(text="4111"),
            OcrDetection(text="2222"),
            OcrDetection(text="3333"),
            OcrDetection(text="4444"),
        ])
        assert fields.cardNumber == "4111222233334444"

    @pytest.mark.parametrize("bbox", [[], [[]], [["a", "b"]], [[1]], [{"x": 1}]])
    def test_malformed_bbox_falls_back(self, parser: CardFieldParser, bbox: list) -> None:
        fields = parser.parse([
            OcrDetection(text="4111", bbox=bbox),
            OcrDetection(text="2222", bbox=bbox),
            OcrDetection(text="3333", bbox=bbox),
            OcrDetection(text="4444", bbox=bbox),
        ])
        assert fields.cardNumber == "4111222233334444"

    def test_dict_points(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            OcrDetection(text="3333", bbox=[{"x": 200, "y": 50}]),
            OcrDetection(text="4111", bbox=[{"x": 0, "y": 50}]),
            OcrDetection(text="2222", bbox=[{"x": 100, "y": 50}]),
            OcrDetection(text="4444", bbox=[{"x": 300, "y": 50}]),
        ])
        assert fields.cardNumber == "4111222233334444"

    def test_fields_after_reassembled_number(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("CHASE", x=0, y=0),
            det("4111", x=0, y=100),
            det("1111", x=100, y=100),
            det("1111", x=200, y=100),
            det("1111", x=300, y=100),
            det("12/25", x=150, y=150),
            det("JOHN SMITH", x=0, y=200),
        ])
        assert fields == ParsedCardFields(
            bankName="CHASE",
            cardNumber="4111111111111111",
            expiry="12/25",
            holderName="JOHN SMITH",
        )


# ââ Bank name ââââââââââââââââââââââââââââââââââââââââââââââââââââ


class TestBankName:
    def test_lines_above_number_joined(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("CHASE"),
            det("7"),
            det("SAPPHIRE"),
            det("4111 1111 1111 1111"),
        ])
        assert fields.bankName == "CHASE SAPPHIRE"

    def test_single_letter_lines_dropped(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("K 9"), det("4111 1111 1111 1111")])
        assert fields.bankName is None

    def test_number_first_has_no_bank(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("CHASE")])
        assert fields.bankName is None

    def test_date_above_number_is_not_expiry(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("12/25"), det("4111 1111 1111 1111")])
        assert fields.expiry is None
        assert fields.bankName is None


# ââ Expiry âââââââââââââââââââââââââââââââââââââââââââââââââââââââ


class TestExpiry:
    def test_plain_date(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("12/25")])
        assert fields.expiry == "12/25"

    def test_confusable_characters_corrected(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("O8/2S")])
        assert fields.expiry == "08/25"

    def test_non_ascii_digits_not_a_date(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("١٢-٢٥")])
        assert fields.expiry is None

    def test_window_keeps_nearby_digits_only(self, parser: CardFieldParser) -> None:
        # The window before "/" is "U 12"; "U" reads as a 4
        fields = parser.parse([det("4111 1111 1111 1111"), det("VALID THRU 12/25")])
        assert fields.expiry == "412/25"

    def test_latest_year_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("4111 1111 1111 1111"),
            det("01/24"),
            det("05/29"),
            det("03/27"),
        ])
        assert fields.expiry == "05/29"

    def test_year_tie_first_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("01/26"), det("02/26")])
        assert fields.expiry == "01/26"

    def test_hyphen_date_with_long_year(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("12-2027")])
        assert fields.expiry == "12/27"

    def test_single_digit_month_zero_filled(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("3 - 26")])
        assert fields.expiry == "03/26"

    def test_partial_date(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("1/25")])
        assert fields.expiry == "1/25"

    def test_no_expiry(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN SMITH")])
        assert fields.expiry is None


# ââ Holder name ââââââââââââââââââââââââââââââââââââââââââââââââââ


class TestHolderName:
    def test_two_words(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN SMITH")])
        assert fields.holderName == "JOHN SMITH"

    def test_three_words(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("MARY ANN JONES")])
        assert fields.holderName == "MARY ANN JONES"

    def test_single_letter_words_dropped(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN A SMITH")])
        assert fields.holderName == "JOHN SMITH"

    def test_four_words_rejected(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN PAUL GEORGE RINGO")])
        assert fields.holderName is None

    def test_one_word_rejected(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN")])
        assert fields.holderName is None

    def test_banned_word_rejects_detection(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN CARDHOLDER")])
        assert fields.holderName is None

    def test_banned_word_discards_remaining_words(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("VALID JOHN SMITH")])
        assert fields.holderName is None

    def test_banned_word_is_case_insensitive(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("Titular Juan")])
        assert fields.holderName is None

    def test_first_acceptable_line_wins(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("4111 1111 1111 1111"),
            det("VALID THRU"),
            det("JOHN SMITH"),
            det("JANE DOE"),
        ])
        assert fields.holderName == "JOHN SMITH"

    def test_date_line_not_read_as_holder(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("4111 1111 1111 1111"), det("JOHN SMITH 12/25")])
        assert fields.expiry == "12/25"
        assert fields.holderName is None

    def test_line_above_number_ignored(self, parser: CardFieldParser) -> None:
        fields = parser.parse([det("JOHN SMITH"), det("4111 1111 1111 1111")])
        assert fields.holderName is None
        assert fields.bankName == "JOHN SMITH"


# ââ Configuration ââââââââââââââââââââââââââââââââââââââââââââââââ


class TestParserConfiguration:
    @pytest.mark.parametrize("tolerance", [0, -5])
    def test_tolerance_must_be_positive(self, tolerance: int) -> None:
        with pytest.raises(ValueError):
            CardFieldParser(sameLineTolerance=tolerance)

    def test_wider_tolerance_joins_lines(self) -> None:
        detections = [
            det("4111", x=0, y=0),
            det("1111", x=100, y=0),
            det("1111", x=200, y=40),
            det("1111", x=300, y=40),
        ]
        assert CardFieldParser(sameLineTolerance=30).parse(detections).cardNumber is None
        assert CardFieldParser(sameLineTolerance=50).parse(detections).cardNumber == "4111111111111111"

    def test_custom_banned_words_replace_defaults(self) -> None:
        parser = CardFieldParser(bannedWords=["smith"])
        detections = [det("4111 1111 1111 1111"), det("JOHN SMITH"), det("CARD HOLDER")]
        assert parser.parse(detections).holderName == "CARD HOLDER"

    def test_banned_words_from_json(self, tmp_path) -> None:
        path = tmp_path / "banned.json"
        path.write_text(json.dumps([{"word": "Smith"}, "doe"]), encoding="utf-8")
        parser = CardFieldParser(bannedWordsJsonPath=str(path))

        assert "smith" in parser.bannedWords
        assert "doe" in parser.bannedWords
        assert "card" in parser.bannedWords
        assert parser.parse([det("4111 1111 1111 1111"), det("JOHN SMITH")]).holderName is None

    def test_missing_banned_words_file_keeps_defaults(self, tmp_path) -> None:
        parser = CardFieldParser(bannedWordsJsonPath=str(tmp_path / "missing.json"))
        assert parser.bannedWords == CardFieldParser().bannedWords

    def test_invalid_banned_words_file_keeps_defaults(self, tmp_path) -> None:
        path = tmp_path / "banned.json"
        path.write_text("{not json", encoding="utf-8")
        parser = CardFieldParser(bannedWordsJsonPath=str(path))
        assert parser.bannedWords == CardFieldParser().bannedWords


# ââ Normalization ââââââââââââââââââââââââââââââââââââââââââââââââ


class TestNormalization:
    def test_blank_detections_dropped(self, parser: CardFieldParser) -> None:
        fields = parser.parse([
            det("   "),
            det("  CHASE "),
            det(""),
            det("4111 1111 1111 1111"),
            det("\t"),
            det(" JOHN SMITH "),
        ])
        assert fields.bankName == "CHASE"
        assert fields.holderName == "JOHN SMITH"

    def test_full_card(self, parser: CardFieldParser) -> None:
        assert parser.parse(fullCardFrame()) == ParsedCardFields(
            bankName="CHASE",
            cardNumber="4111111111111111",
            expiry="12/25",
            holderName="JOHN SMITH",
        )

    def test_module_function_uses_default_parser(self) -> None:
        assert parseCardFromDetections(fullCardFrame()) == CardFieldParser().parse(fullCardFrame())

    def test_same_input_same_output(self, parser: CardFieldParser) -> None:
        detections = fullCardFrame()
        assert parser.parse(detections) == parser.parse(detections)
