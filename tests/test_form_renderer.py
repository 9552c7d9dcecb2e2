import unittest

from app.services.forms.descriptors import FieldDescriptor
from app.services.forms.options import normalize_options
from app.services.forms.renderer import FormState, coerce_default, render_field
from app.services.forms.schema import synthesize_validator


def _field(key, label, field_type="text", **extra):
    if "options" in extra:
        extra["options"] = normalize_options(extra["options"])
    return FieldDescriptor(field_key=key, label=label, field_type=field_type, **extra)


class RenderFieldTests(unittest.TestCase):
    def test_widget_per_field_type(self):
        expected = {
            "text": ("input", "Enter serial number..."),
            "number": ("number", "0"),
            "date": ("date", ""),
            "textarea": ("textarea", "Enter serial number..."),
            "dropdown": ("select", "Select..."),
            "lookup": ("input", "Search..."),
            "signature": ("input", ""),
        }
        for field_type, (widget, placeholder) in expected.items():
            with self.subTest(field_type=field_type):
                control = render_field(_field("serial_number", "Serial Number", field_type), "")
                self.assertEqual(control.widget, widget)
                self.assertEqual(control.placeholder, placeholder)

    def test_toggle_renders_a_switch_with_boolean_value(self):
        control = render_field(_field("explosion_proof", "Explosion Proof", "toggle"), "")
        self.assertEqual(control.widget, "switch")
        self.assertIs(control.value, False)

    def test_dropdown_carries_normalized_choices(self):
        control = render_field(_field("maker", "Maker", "dropdown", options=["ABB", "WEG"]), None)
        self.assertEqual(
            control.as_dict()["options"],
            [{"label": "ABB", "value": "ABB"}, {"label": "WEG", "value": "WEG"}],
        )

    def test_malformed_dropdown_options_render_empty(self):
        control = render_field(_field("maker", "Maker", "dropdown", options="ABB"), None)
        self.assertEqual(control.options, ())

    def test_custom_placeholder_wins(self):
        control = render_field(_field("rpm", "RPM", "number", placeholder="e.g. 1450"), "")
        self.assertEqual(control.placeholder, "e.g. 1450")

    def test_readonly_override_disables_control(self):
        item = _field("rpm", "RPM", "number")
        self.assertFalse(render_field(item, 1).disabled)
        self.assertTrue(render_field(item, 1, readonly=True).disabled)
        self.assertTrue(render_field(item.with_changes(is_readonly=True), 1).disabled)

    def test_change_forwards_value_without_touching_descriptor(self):
        item = _field("rpm", "RPM", "number")
        received = []
        control = render_field(item, 1, received.append)
        self.assertTrue(control.change(2))
        self.assertEqual(received, [2])
        self.assertEqual(control.value, 2)
        self.assertIsNone(item.default_value)

    def test_disabled_control_ignores_changes(self):
        received = []
        control = render_field(_field("rpm", "RPM", "number"), 1, received.append, readonly=True)
        self.assertFalse(control.change(2))
        self.assertEqual(received, [])


class CoerceDefaultTests(unittest.TestCase):
    def test_defaults_follow_field_type(self):
        self.assertIs(coerce_default(_field("t", "T", "toggle", default_value="true")), True)
        self.assertIs(coerce_default(_field("t", "T", "toggle")), False)
        self.assertEqual(coerce_default(_field("n", "N", "number", default_value="12")), 12)
        self.assertEqual(coerce_default(_field("n", "N", "number", default_value="1,5")), 1.5)
        self.assertEqual(coerce_default(_field("n", "N", "number", default_value="abc")), "")
        self.assertEqual(coerce_default(_field("s", "S")), "")
        self.assertEqual(coerce_default(_field("s", "S", default_value="x")), "x")

    def test_toggle_default_accepts_what_validation_accepts(self):
        for raw in ("on", "YES", "1"):
            field = _field("t", "T", "toggle", default_value=raw)
            self.assertIs(coerce_default(field), True)
            self.assertEqual(synthesize_validator([field]).validate({"t": raw}).values, {"t": True})


class FormStateTests(unittest.TestCase):
    def setUp(self):
        self.fields = [
            _field("serial_number", "Serial Number", is_required=True),
            _field("rpm", "RPM", "number", default_value="1450"),
            _field("explosion_proof", "Explosion Proof", "toggle"),
        ]

    def test_initial_values_then_defaults(self):
        state = FormState(self.fields, {"serial_number": "M-1"})
        self.assertEqual(state.snapshot(), {"serial_number": "M-1", "rpm": 1450, "explosion_proof": False})

    def test_controls_write_back_into_their_slot(self):
        state = FormState(self.fields)
        controls = {control.field_key: control for control in state.render()}
        controls["serial_number"].change("M-2")
        controls["explosion_proof"].change(1)
        self.assertEqual(state.values["serial_number"], "M-2")
        self.assertEqual(state.values["explosion_proof"], 1)
        self.assertIs(controls["explosion_proof"].value, True)

    def test_readonly_render_leaves_state_alone(self):
        state = FormState(self.fields, {"serial_number": "M-1"})
        for control in state.render(readonly=True):
            control.change("changed")
        self.assertEqual(state.values["serial_number"], "M-1")

    def test_bind_unknown_key(self):
        with self.assertRaises(KeyError):
            FormState(self.fields).bind("missing")
