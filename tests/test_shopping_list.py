"""Tests for quantity/unit extraction and the shopping list parser."""

import pytest

from pricefeed.parsing import (
    ShoppingListParser,
    extract_glyph_fraction,
    extract_quantity,
    extract_unit,
    normalize_unit,
)


class TestExtractQuantity:
    def test_whole_number(self):
        rest, qty = extract_quantity("2 cups flour")
        assert qty == 2.0
        assert rest == "cups flour"

    def test_mixed_number(self):
        rest, qty = extract_quantity("1 1/2 cups sugar")
        assert qty == 1.5
        assert rest == "cups sugar"

    def test_range_uses_midpoint(self):
        rest, qty = extract_quantity("2.5 - 3 lbs chicken")
        assert qty == pytest.approx(2.75)
        assert rest == "lbs chicken"

    def test_vulgar_fraction(self):
        rest, qty = extract_quantity("½ gallon milk")
        assert qty == 0.5
        assert rest == "gallon milk"

    def test_whole_plus_vulgar_fraction(self):
        rest, qty = extract_quantity("1 ½ cups milk")
        assert qty == 1.5
        assert rest == "cups milk"

    def test_superscript_fraction(self):
        rest, qty = extract_quantity("¹⁄₂ tsp salt")
        assert qty == 0.5
        assert rest == "tsp salt"

    def test_superscript_fraction_ascii_slash(self):
        _, qty = extract_quantity("³/₄ cup oats")
        assert qty == 0.75

    def test_ascii_fraction(self):
        rest, qty = extract_quantity("3/4 cup sugar")
        assert qty == 0.75
        assert rest == "cup sugar"

    def test_decimal(self):
        rest, qty = extract_quantity("1.25 lb ground beef")
        assert qty == 1.25
        assert rest == "lb ground beef"

    def test_zero_denominator_defaults_to_one(self):
        rest, qty = extract_quantity("1/0 cup water")
        assert qty == 1.0
        assert rest == "cup water"

    def test_no_quantity(self):
        rest, qty = extract_quantity("eggs")
        assert qty == 1.0
        assert rest == "eggs"


class TestExtractGlyphFraction:
    def test_no_fraction(self):
        rest, value = extract_glyph_fraction("cups flour")
        assert value == 0.0
        assert rest == "cups flour"

    def test_superscript_without_slash(self):
        _, value = extract_glyph_fraction("² eggs")
        assert value == 0.0

    def test_third(self):
        _, value = extract_glyph_fraction("⅓ cup")
        assert value == pytest.approx(1 / 3)


class TestUnits:
    @pytest.mark.parametrize(
        "spelling,canonical",
        [
            ("cups", "cup"),
            ("Tbsp", "tablespoon"),
            ("lbs", "pound"),
            ("fl oz", "fluid ounce"),
            ("ea", "each"),
            ("furlong", ""),
        ],
    )
    def test_normalize_unit(self, spelling, canonical):
        assert normalize_unit(spelling) == canonical

    def test_extract_unit(self):
        rest, unit = extract_unit("gallon milk")
        assert unit == "gallon"
        assert rest == "milk"

    def test_multi_word_unit(self):
        rest, unit = extract_unit("fl oz heavy cream")
        assert unit == "fluid ounce"
        assert rest == "heavy cream"

    def test_abbreviation_with_period(self):
        rest, unit = extract_unit("oz. cheddar")
        assert unit == "ounce"
        assert rest == "cheddar"

    def test_unit_must_be_whole_word(self):
        rest, unit = extract_unit("carrots")
        assert unit == ""
        assert rest == "carrots"


class TestShoppingListParser:
    def setup_method(self):
        self.parser = ShoppingListParser()

    def test_simple_line(self):
        [line] = self.parser.parse("- [ ] 2 cups flour")
        assert line.quantity == 2.0
        assert line.unit == "cup"
        assert line.name == "flour"
        assert line.notes == ""
        assert line.line_number == 0
        assert line.raw_text == "- [ ] 2 cups flour"

    def test_range_line(self):
        [line] = self.parser.parse("- [ ] 2.5 - 3 lbs chicken")
        assert line.quantity == pytest.approx(2.75)
        assert line.unit == "pound"
        assert line.name == "chicken"

    def test_fraction_line(self):
        [line] = self.parser.parse("- [ ] ½ gallon milk")
        assert line.quantity == 0.5
        assert line.unit == "gallon"
        assert line.name == "milk"

    def test_notes_after_comma(self):
        [line] = self.parser.parse("- [ ] 3 cloves garlic, minced")
        assert line.quantity == 3.0
        assert line.unit == "clove"
        assert line.name == "garlic"
        assert line.notes == "minced"

    def test_parenthetical_and_comma_notes(self):
        [line] = self.parser.parse("- [ ] 2 cups flour (sifted), divided")
        assert line.name == "flour"
        assert line.notes == "sifted; divided"

    def test_no_unit(self):
        [line] = self.parser.parse("- [ ] 2 large eggs")
        assert line.quantity == 2.0
        assert line.unit == ""
        assert line.name == "large eggs"

    def test_no_quantity(self):
        [line] = self.parser.parse("- [ ] bananas")
        assert line.quantity == 1.0
        assert line.unit == ""
        assert line.name == "bananas"

    def test_trailing_punctuation_stripped(self):
        [line] = self.parser.parse("- [ ] 1 can   black  beans.")
        assert line.unit == "can"
        assert line.name == "black beans"

    def test_empty_name_falls_back_to_line(self):
        [line] = self.parser.parse("- [ ] 2 cups")
        assert line.name == "2 cups"

    def test_checked_and_empty_boxes(self):
        lines = self.parser.parse("- [x] milk\n- [X] bread\n- [] eggs")
        assert [l.name for l in lines] == ["milk", "bread", "eggs"]

    def test_skips_non_checkbox_lines_and_numbers_contiguously(self):
        content = """\
# Groceries

- [ ] 2 cups flour
Some note about the list
* [ ] not a checkbox line

- [ ] 1 1/2 cups sugar
- plain bullet
  - [ ] 3 cloves garlic, minced
"""
        lines = self.parser.parse(content)
        assert [l.name for l in lines] == ["flour", "sugar", "garlic"]
        assert [l.line_number for l in lines] == [0, 1, 2]
        assert lines[1].quantity == 1.5
        assert lines[2].raw_text == "- [ ] 3 cloves garlic, minced"

    def test_empty_content(self):
        assert self.parser.parse("") == []
        assert self.parser.parse("\n\n   \n") == []

    def test_parse_line_directly(self):
        line = self.parser.parse_line("4 oz cream cheese", 7)
        assert line.line_number == 7
        assert line.quantity == 4.0
        assert line.unit == "ounce"
        assert line.name == "cream cheese"
        assert line.raw_text == "4 oz cream cheese"

    def test_to_dict(self):
        [line] = self.parser.parse("- [ ] 2 cups flour")
        d = line.to_dict()
        assert d["name"] == "flour"
        assert d["unit"] == "cup"
        assert d["quantity"] == 2.0
