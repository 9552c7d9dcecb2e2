import unittest

from app.services.forms.descriptors import FieldDescriptor
from app.services.forms.schema import synthesize_validator


def _field(key, label, field_type="text", **extra):
    return FieldDescriptor(field_key=key, label=label, field_type=field_type, **extra)


class RequiredTextTests(unittest.TestCase):
    def setUp(self):
        self.validator = synthesize_validator([_field("serial_number", "Serial Number", is_required=True)])

    def test_empty_required_text_fails(self):
        outcome = self.validator.validate({"serial_number": ""})
        self.assertFalse(outcome.is_valid)
        self.assertEqual(outcome.errors, {"serial_number": "Serial Number is required"})

    def test_whitespace_and_missing_fail_the_same_way(self):
        self.assertEqual(self.validator.validate({"serial_number": "   "}).errors["serial_number"], "Serial Number is required")
        self.assertEqual(self.validator.validate({}).errors["serial_number"], "Serial Number is required")

    def test_non_empty_text_passes(self):
        outcome = self.validator.validate({"serial_number": "ok"})
        self.assertTrue(outcome.is_valid)
        self.assertEqual(outcome.values, {"serial_number": "ok"})


class ToggleTests(unittest.TestCase):
    def test_required_toggle_is_never_rejected(self):
        validator = synthesize_validator([_field("explosion_proof", "Explosion Proof", "toggle", is_required=True)])
        self.assertEqual(validator.validate({}).values, {"explosion_proof": False})
        self.assertEqual(validator.validate({"explosion_proof": False}).values, {"explosion_proof": False})
        self.assertEqual(validator.validate({"explosion_proof": "true"}).values, {"explosion_proof": True})

    def test_garbage_toggle_value_is_rejected(self):
        validator = synthesize_validator([_field("explosion_proof", "Explosion Proof", "toggle")])
        outcome = validator.validate({"explosion_proof": "maybe"})
        self.assertEqual(outcome.errors, {"explosion_proof": "Explosion Proof must be true or false"})


class NumberTests(unittest.TestCase):
    def test_numeric_strings_are_coerced(self):
        validator = synthesize_validator([_field("rpm", "RPM", "number"), _field("ratio", "Ratio", "number")])
        outcome = validator.validate({"rpm": "1450", "ratio": "3,5"})
        self.assertEqual(outcome.values, {"rpm": 1450, "ratio": 3.5})

    def test_required_number(self):
        validator = synthesize_validator([_field("rated_power", "Rated Power", "number", is_required=True)])
        self.assertEqual(validator.validate({"rated_power": ""}).errors, {"rated_power": "Rated Power is required"})
        self.assertEqual(validator.validate({"rated_power": "abc"}).errors, {"rated_power": "Rated Power is required"})
        self.assertEqual(validator.validate({"rated_power": 7.5}).values, {"rated_power": 7.5})

    def test_optional_number(self):
        validator = synthesize_validator([_field("rpm", "RPM", "number")])
        self.assertEqual(validator.validate({"rpm": ""}).values, {"rpm": None})
        self.assertEqual(validator.validate({"rpm": "fast"}).errors, {"rpm": "RPM must be a number"})
        self.assertEqual(validator.validate({"rpm": True}).errors, {"rpm": "RPM must be a number"})


class DateTests(unittest.TestCase):
    def setUp(self):
        self.validator = synthesize_validator([_field("install_date", "Install Date", "date", is_required=True)])

    def test_iso_dates_are_kept_verbatim(self):
        self.assertEqual(self.validator.validate({"install_date": "2024-05-01"}).values, {"install_date": "2024-05-01"})
        stamp = "2024-05-01T08:30:00Z"
        self.assertEqual(self.validator.validate({"install_date": stamp}).values, {"install_date": stamp})

    def test_invalid_date(self):
        outcome = self.validator.validate({"install_date": "01/05/2024"})
        self.assertEqual(outcome.errors, {"install_date": "Install Date must be a valid date"})

    def test_missing_required_date(self):
        self.assertEqual(self.validator.validate({}).errors, {"install_date": "Install Date is required"})


class GeneralBehaviourTests(unittest.TestCase):
    def test_unknown_keys_are_ignored_and_input_untouched(self):
        validator = synthesize_validator([_field("rpm", "RPM", "number")])
        payload = {"rpm": "10", "stray": "value"}
        outcome = validator.validate(payload)
        self.assertEqual(outcome.values, {"rpm": 10})
        self.assertEqual(payload, {"rpm": "10", "stray": "value"})

    def test_numbers_in_text_fields_are_stringified(self):
        validator = synthesize_validator([_field("code", "Code"), _field("tags", "Tags")])
        self.assertEqual(validator.validate({"code": 42}).values["code"], "42")
        self.assertEqual(validator.validate({"tags": ["a"]}).errors, {"tags": "Tags must be text"})

    def test_unknown_field_type_validates_as_text(self):
        validator = synthesize_validator([_field("colour", "Colour", "color", is_required=True)])
        self.assertEqual(validator.validate({"colour": ""}).errors, {"colour": "Colour is required"})
        self.assertTrue(validator.validate({"colour": "red"}).is_valid)

    def test_keys_shadowing_model_attributes_are_accepted(self):
        validator = synthesize_validator([_field("model_config", "Config"), _field("schema", "Schema", is_required=True)])
        outcome = validator.validate({"model_config": "x", "schema": "y"})
        self.assertEqual(outcome.values, {"model_config": "x", "schema": "y"})

    def test_every_failing_field_is_reported(self):
        validator = synthesize_validator(
            [_field("a", "A", is_required=True), _field("b", "B", "number", is_required=True), _field("c", "C")]
        )
        outcome = validator.validate({"c": "fine"})
        self.assertEqual(set(outcome.errors), {"a", "b"})
        self.assertEqual(outcome.values, {})

    def test_missing_values_are_reported_under_their_field_key(self):
        validator = synthesize_validator(
            [_field("field_1", "Second", is_required=True), _field("field_0", "First", "number", is_required=True)]
        )
        outcome = validator.validate({})
        self.assertEqual(outcome.errors, {"field_1": "Second is required", "field_0": "First is required"})

    def test_duplicate_keys_keep_first_descriptor(self):
        validator = synthesize_validator([_field("a", "First", is_required=True), _field("a", "Second")])
        self.assertEqual(validator.keys, ["a"])
        self.assertEqual(validator.validate({}).errors, {"a": "First is required"})

    def test_validation_is_deterministic(self):
        validator = synthesize_validator([_field("rpm", "RPM", "number", is_required=True)])
        first = validator.validate({"rpm": "x"})
        second = validator.validate({"rpm": "x"})
        self.assertEqual(first.errors, second.errors)
