from __future__ import annotations

import csv
import unittest

from app.parsers.file_intake import (
    FileIntakeError,
    detect_delimiter,
    parse_delimited_file,
)


class TestDetectDelimiter(unittest.TestCase):
    def test_picks_most_frequent_candidate(self) -> None:
        self.assertEqual(detect_delimiter("Ad;Soyad;Eposta"), ";")
        self.assertEqual(detect_delimiter("Ad\tSoyad\tEposta"), "\t")
        self.assertEqual(detect_delimiter("Ad|Soyad|Eposta"), "|")

    def test_defaults_to_comma_without_candidates(self) -> None:
        self.assertEqual(detect_delimiter("Ad"), ",")
        self.assertEqual(detect_delimiter(""), ",")


class TestParseDelimitedFile(unittest.TestCase):
    def test_parses_comma_file_with_bom(self) -> None:
        parsed = parse_delimited_file("\ufeffAd,Soyad\nAli,Veli\n".encode("utf-8"))

        self.assertEqual(parsed.headers, ("Ad", "Soyad"))
        self.assertEqual(parsed.delimiter, ",")
        self.assertEqual(parsed.rows, ({"Ad": "Ali", "Soyad": "Veli"},))

    def test_auto_detects_semicolon(self) -> None:
        parsed = parse_delimited_file("Ad;Soyad;Şehir\nAyşe;Yılmaz;İzmir\n".encode("utf-8"))

        self.assertEqual(parsed.delimiter, ";")
        self.assertEqual(parsed.rows[0]["Şehir"], "İzmir")

    def test_explicit_delimiter_overrides_detection(self) -> None:
        parsed = parse_delimited_file(b"Ad|Soyad,Not\nAli|Veli,x\n", delimiter_hint="|")

        self.assertEqual(parsed.headers, ("Ad", "Soyad,Not"))
        self.assertEqual(parsed.rows[0]["Soyad,Not"], "Veli,x")

    def test_quoted_cells_keep_delimiter(self) -> None:
        parsed = parse_delimited_file(b'Ad,Adres\nAli,"Cumhuriyet Cd. 5, Kadikoy"\n')

        self.assertEqual(parsed.rows[0]["Adres"], "Cumhuriyet Cd. 5, Kadikoy")

    def test_blank_rows_are_dropped(self) -> None:
        parsed = parse_delimited_file(b"Ad,Soyad\n\nAli,Veli\n , \nAyse,Kaya\n")

        self.assertEqual(parsed.row_count, 2)
        self.assertEqual([row["Ad"] for row in parsed.rows], ["Ali", "Ayse"])

    def test_short_rows_are_padded_and_extra_cells_ignored(self) -> None:
        parsed = parse_delimited_file(b"Ad,Soyad,Eposta\nAli\nAyse,Kaya,a@b.com,extra\n")

        self.assertEqual(parsed.rows[0], {"Ad": "Ali", "Soyad": "", "Eposta": ""})
        self.assertEqual(parsed.rows[1], {"Ad": "Ayse", "Soyad": "Kaya", "Eposta": "a@b.com"})

    def test_first_duplicate_header_supplies_value(self) -> None:
        parsed = parse_delimited_file(b"Ad,Ad,Soyad\nAli,Mehmet,Veli\n")

        self.assertEqual(parsed.headers, ("Ad", "Ad", "Soyad"))
        self.assertEqual(parsed.rows[0]["Ad"], "Ali")

    def test_headers_are_trimmed(self) -> None:
        parsed = parse_delimited_file(b" Ad , Soyad \nAli,Veli\n")

        self.assertEqual(parsed.headers, ("Ad", "Soyad"))

    def test_header_only_file_has_no_rows(self) -> None:
        parsed = parse_delimited_file(b"Ad,Soyad\n")

        self.assertEqual(parsed.row_count, 0)

    def test_empty_file_raises(self) -> None:
        with self.assertRaises(FileIntakeError):
            parse_delimited_file(b"")

    def test_non_utf8_bytes_raise(self) -> None:
        with self.assertRaises(FileIntakeError):
            parse_delimited_file("Ad,Soyad\nŞule,Öz\n".encode("cp1254"))

    def test_oversized_cell_is_a_structural_failure(self) -> None:
        oversized = "x" * (csv.field_size_limit() + 1)

        with self.assertRaises(FileIntakeError) as ctx:
            parse_delimited_file(f"Ad,Adres\nAli,{oversized}\n".encode("utf-8"))

        self.assertIn("field limit", str(ctx.exception))

    def test_multi_character_delimiter_raises(self) -> None:
        with self.assertRaises(FileIntakeError):
            parse_delimited_file(b"Ad,Soyad\n", delimiter_hint=";;")


if __name__ == "__main__":
    unittest.main()
