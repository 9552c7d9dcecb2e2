import unittest

from app.services.forms.wizard import (
    EditWizardStep,
    WizardContext,
    WizardStep,
    plan_edit_steps,
    plan_steps,
    split_payload,
)

S = WizardStep


class PlanStepsTests(unittest.TestCase):
    def test_no_core_fields_and_no_forms(self):
        self.assertEqual(plan_steps(False, 0), [S.ASSET_TYPE, S.REVIEW])

    def test_core_fields_and_two_forms(self):
        self.assertEqual(
            plan_steps(True, 2),
            [S.ASSET_TYPE, S.CORE_FIELDS, S.FORM_SELECT, S.FORM_FILL, S.REVIEW],
        )

    def test_single_form_skips_selection(self):
        self.assertEqual(plan_steps(True, 1), [S.ASSET_TYPE, S.CORE_FIELDS, S.FORM_FILL, S.REVIEW])

    def test_form_without_custom_fields_skips_fill(self):
        self.assertEqual(plan_steps(False, 2, False), [S.ASSET_TYPE, S.FORM_SELECT, S.REVIEW])

    def test_edit_steps(self):
        self.assertEqual(
            plan_edit_steps(True, True),
            [EditWizardStep.BASIC_INFO, EditWizardStep.CORE_FIELDS, EditWizardStep.FORM_FILL],
        )
        self.assertEqual(plan_edit_steps(False, False), [EditWizardStep.BASIC_INFO])


class WizardContextTests(unittest.TestCase):
    def test_single_form_is_auto_selected(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=["f1"])
        self.assertEqual(context.selected_form_id, "f1")
        self.assertNotIn(S.FORM_SELECT, context.steps)

    def test_forward_then_back_retraces_skips(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=False, available_form_ids=["f1"])
        visited = [context.step]
        while not context.is_last:
            visited.append(context.advance())
        self.assertEqual(visited, [S.ASSET_TYPE, S.FORM_FILL, S.REVIEW])
        backwards = [context.step]
        while context.step is not S.ASSET_TYPE:
            backwards.append(context.back())
        self.assertEqual(backwards, list(reversed(visited)))

    def test_form_select_requires_a_choice(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=False, available_form_ids=["f1", "f2"])
        context.advance()
        self.assertIs(context.step, S.FORM_SELECT)
        with self.assertRaises(ValueError):
            context.advance()
        context.select_form("f2", has_custom_fields=False)
        self.assertIs(context.advance(), S.REVIEW)

    def test_changing_form_clears_its_values(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=["f1", "f2"])
        context.select_form("f1", has_custom_fields=True)
        context.record(S.CORE_FIELDS, {"serial_number": "M-1"})
        context.record(S.FORM_FILL, {"rpm": 1450})
        context.select_form("f2", has_custom_fields=True)
        self.assertEqual(context.stage_values, {"core-fields": {"serial_number": "M-1"}})
        with self.assertRaises(ValueError):
            context.select_form("nope", has_custom_fields=True)

    def test_selecting_asset_type_resets_state(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=["f1"])
        context.record(S.CORE_FIELDS, {"a": 1})
        context.select_asset_type("t2", has_core_fields=False, available_form_ids=[])
        self.assertIsNone(context.selected_form_id)
        self.assertEqual(context.stage_values, {})
        self.assertEqual(context.steps, [S.ASSET_TYPE, S.REVIEW])

    def test_selecting_asset_type_with_a_bare_single_form(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=["f1", "f2"])
        context.select_asset_type("t2", has_core_fields=False, available_form_ids=["f9"], form_has_custom_fields=False)
        self.assertEqual(context.selected_form_id, "f9")
        self.assertEqual(context.steps, [S.ASSET_TYPE, S.REVIEW])

    def test_selecting_asset_type_restarts_from_first_step(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=[], step=S.CORE_FIELDS)
        context.select_asset_type("t2", has_core_fields=False, available_form_ids=[])
        self.assertIs(context.step, S.ASSET_TYPE)
        self.assertIs(context.advance(), S.REVIEW)

    def test_discard(self):
        context = WizardContext(asset_type_id="t1", has_core_fields=True, available_form_ids=["f1"], step=S.CORE_FIELDS)
        context.discard()
        self.assertIsNone(context.asset_type_id)
        self.assertIs(context.step, S.ASSET_TYPE)
        self.assertEqual(context.step_index, 0)


class SplitPayloadTests(unittest.TestCase):
    def test_split_by_key_ownership(self):
        core, custom = split_payload({"a": 1, "b": 2, "legacy": 3}, ["a"], ["b"])
        self.assertEqual(core, {"a": 1})
        self.assertEqual(custom, {"b": 2})
        self.assertEqual(split_payload(None, ["a"], ["b"]), ({}, {}))
