import json

import pytest
from rod_tickler.errors import InvalidPrice, ProblemError
from rod_tickler.presets import DEFAULT_PRESET, PRESETS, PRESETS_BY_ID, get_preset
from rod_tickler.solver import solve
from rod_tickler.utils import fit_prices, load_prices, parse_prices


class TestParsePrices:
    """Test suite for price parsing"""

    @pytest.mark.parametrize("text", ["1,5,8,9", "1, 5, 8, 9", " 1 5 8 9 ", "1,5,8,9,", "1\t5\n8 9"])
    def test_separators(self, text):
        assert parse_prices(text) == [1, 5, 8, 9]

    def test_empty(self):
        assert parse_prices("") == []
        assert parse_prices("  ,") == []

    def test_blank_field_is_zero(self):
        assert parse_prices("1,,3") == [1, 0, 3]

    def test_not_a_number(self):
        with pytest.raises(InvalidPrice) as e:
            parse_prices("1, five, 8")
        assert e.value.piece_length == 2
        assert e.value.value == "five"
        assert "not a whole number" in str(e.value)

    def test_negative(self):
        with pytest.raises(InvalidPrice, match="cannot be negative"):
            parse_prices("1,-5")

    def test_decimal_rejected(self):
        with pytest.raises(InvalidPrice):
            parse_prices("1.5, 2")


class TestLoadPrices:
    """Test suite for reading price tables from files"""

    def test_csv(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("1,5,8\n9,10\n")
        assert load_prices(str(path), "csv") == [1, 5, 8, 9, 10]

    def test_lines(self, tmp_path):
        path = tmp_path / "prices.txt"
        path.write_text("1\n5\n\n8\n")
        assert load_prices(str(path), "lines") == [1, 5, 8]

    def test_json_list(self, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text(json.dumps([1, 5, 8, 9]))
        assert load_prices(str(path), "json") == [1, 5, 8, 9]

    def test_json_object(self, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text(json.dumps({"prices": [2, 4]}))
        assert load_prices(str(path), "json") == [2, 4]

    def test_json_wrong_shape(self, tmp_path):
        path = tmp_path / "prices.json"
        path.write_text(json.dumps({"values": [2, 4]}))
        with pytest.raises(ProblemError, match="Expected a JSON list"):
            load_prices(str(path), "json")

    def test_unknown_format(self, tmp_path):
        path = tmp_path / "prices.xml"
        path.write_text("<prices/>")
        with pytest.raises(ValueError, match="Invalid price format"):
            load_prices(str(path), "xml")


class TestFitPrices:
    def test_pad(self):
        assert fit_prices([1, 5], 4) == [1, 5, 0, 0]

    def test_truncate(self):
        assert fit_prices([1, 5, 8, 9], 2) == [1, 5]

    def test_exact(self):
        assert fit_prices((1, 5), 2) == [1, 5]


class TestPresets:
    """Test suite for the built-in demo problems"""

    def test_ids_are_unique(self):
        assert len(PRESETS_BY_ID) == len(PRESETS)
        assert DEFAULT_PRESET in PRESETS_BY_ID

    @pytest.mark.parametrize("preset", PRESETS, ids=[p.id for p in PRESETS])
    def test_every_preset_is_valid(self, preset):
        problem = preset.problem()
        assert problem.rod_length == len(preset.prices)
        sequence = solve(problem)
        assert sum(sequence.pieces) == preset.rod_length

    def test_classic_answer(self):
        sequence = solve(get_preset("classic").problem())
        assert sequence.max_profit == 22

    def test_unknown(self):
        with pytest.raises(KeyError, match="Unknown preset: nope"):
            get_preset("nope")
