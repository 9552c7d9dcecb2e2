import unittest

from app.services.forms.options import (
    NO_OPTIONS,
    Choice,
    LabeledPairOptions,
    MalformedOptions,
    StringListOptions,
    normalize_options,
    options_as_dicts,
)


class OptionNormalizationTests(unittest.TestCase):
    def test_string_list_becomes_label_value_pairs(self):
        options = normalize_options(["A", "B"])
        self.assertIsInstance(options, StringListOptions)
        self.assertEqual(
            options_as_dicts(options),
            [{"label": "A", "value": "A"}, {"label": "B", "value": "B"}],
        )

    def test_labeled_pairs_are_kept_unchanged(self):
        options = normalize_options([{"label": "X", "value": "x"}])
        self.assertIsInstance(options, LabeledPairOptions)
        self.assertEqual(options_as_dicts(options), [{"label": "X", "value": "x"}])

    def test_missing_or_non_list_options_render_nothing(self):
        for raw in (None, "A,B", {"label": "X", "value": "x"}, 42):
            with self.subTest(raw=raw):
                options = normalize_options(raw)
                self.assertIsInstance(options, MalformedOptions)
                self.assertEqual(options_as_dicts(options), [])
        self.assertIs(normalize_options(None), NO_OPTIONS)

    def test_list_with_unusable_item_is_malformed(self):
        options = normalize_options([{"label": "X", "value": "x"}, {"label": "Y"}])
        self.assertIsInstance(options, MalformedOptions)
        self.assertEqual(options.choices, ())

    def test_mixed_strings_and_pairs(self):
        options = normalize_options(["plain", {"label": "Pretty", "value": "pretty"}])
        self.assertEqual(options.choices, (Choice("plain", "plain"), Choice("Pretty", "pretty")))

    def test_empty_list_has_no_choices(self):
        options = normalize_options([])
        self.assertIsInstance(options, StringListOptions)
        self.assertEqual(options_as_dicts(options), [])

    def test_already_normalized_value_passes_through(self):
        options = normalize_options(["A"])
        self.assertIs(normalize_options(options), options)
