from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from tests.api.base import *  # noqa: F401,F403
from app.models.asset import Asset


class AssetWizardPlanTests(CatalogApiBase):
    def _plan(self, **payload):
        return self.client.post("/api/assets/wizard/plan", json=payload)

    def test_plan_without_asset_type(self):
        response = self._plan()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["steps"], ["asset-type", "review"])
        self.assertEqual(body["current_step"], "asset-type")
        self.assertEqual(self._plan(direction="next").status_code, 400)

    def test_single_form_is_auto_selected_and_selection_is_skipped(self):
        catalog = self._motor_catalog()
        asset_type_id = catalog["asset_type"]["id"]

        first = self._plan(asset_type_id=asset_type_id, direction="next").json()
        self.assertEqual(first["steps"], ["asset-type", "core-fields", "form-fill", "review"])
        self.assertEqual(first["current_step"], "core-fields")
        self.assertEqual(first["step_index"], 1)
        self.assertEqual(first["selected_form_id"], catalog["form"]["id"])
        self.assertEqual(list(first["stages"]), ["core-fields", "form-fill"])

        second = self._plan(asset_type_id=asset_type_id, current_step="core-fields", direction="next").json()
        self.assertEqual(second["current_step"], "form-fill")

        back = self._plan(asset_type_id=asset_type_id, current_step="form-fill", direction="back").json()
        self.assertEqual(back["current_step"], "core-fields")

        skipped = self._plan(asset_type_id=asset_type_id, current_step="form-select", direction="next")
        self.assertEqual(skipped.status_code, 400)

    def test_two_forms_require_a_choice(self):
        catalog = self._motor_catalog()
        asset_type_id = catalog["asset_type"]["id"]
        other = self._create_form("Motor Commissioning", asset_type_id, publish=True)

        at_select = self._plan(asset_type_id=asset_type_id, current_step="core-fields", direction="next").json()
        self.assertEqual(at_select["steps"], ["asset-type", "core-fields", "form-select", "form-fill", "review"])
        self.assertEqual(at_select["current_step"], "form-select")
        self.assertIsNone(at_select["selected_form_id"])
        self.assertEqual(len(at_select["available_forms"]), 2)

        blocked = self._plan(asset_type_id=asset_type_id, current_step="form-select", direction="next")
        self.assertEqual(blocked.status_code, 400)

        # the chosen form has no custom fields, so the fill step disappears
        chosen = self._plan(
            asset_type_id=asset_type_id,
            selected_form_id=other["id"],
            current_step="form-select",
            direction="next",
        ).json()
        self.assertEqual(chosen["steps"], ["asset-type", "core-fields", "form-select", "review"])
        self.assertEqual(chosen["current_step"], "review")

    def test_unpublished_form_cannot_be_selected(self):
        catalog = self._motor_catalog()
        draft = self._create_form("Draft", catalog["asset_type"]["id"])
        response = self._plan(asset_type_id=catalog["asset_type"]["id"], selected_form_id=draft["id"])
        self.assertEqual(response.status_code, 400)


class AssetWizardSubmitTests(CatalogApiBase):
    def setUp(self):
        super().setUp()
        self.catalog = self._motor_catalog()
        self.asset_type_id = self.catalog["asset_type"]["id"]

    def test_stage_validation_reports_field_errors(self):
        response = self.client.post(
            "/api/assets/wizard/validate",
            json={"asset_type_id": self.asset_type_id, "stage": "core-fields", "values": {"rated_power": "lots"}},
        )
        self.assertEqual(response.status_code, 400)
        detail = response.json()["detail"]
        self.assertEqual(detail["message"], "Validation failed")
        self.assertEqual(
            detail["errors"],
            {"core-fields": {"serial_number": "Serial Number is required", "rated_power": "Rated Power must be a number"}},
        )

        ok = self.client.post(
            "/api/assets/wizard/validate",
            json={"asset_type_id": self.asset_type_id, "stage": "core-fields", "values": {"serial_number": "M-1"}},
        )
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()["values"], {"serial_number": "M-1", "rated_power": None})

    def test_review_is_not_a_validatable_stage(self):
        response = self.client.post(
            "/api/assets/wizard/validate",
            json={"asset_type_id": self.asset_type_id, "stage": "review", "values": {}},
        )
        self.assertEqual(response.status_code, 422)

    def test_submit_merges_core_and_custom_values(self):
        response = self.client.post(
            "/api/assets/wizard/submit",
            json={
                "asset": {"name": "Motor M-1", "asset_type_id": self.asset_type_id, "criticality": "high"},
                "core_values": {"serial_number": "M-1", "rated_power": "7,5"},
                "custom_values": {"rpm": "1450", "explosion_proof": "true", "operating_hours": 99},
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual(
            body["data"],
            {"serial_number": "M-1", "rated_power": 7.5, "rpm": 1450, "explosion_proof": True},
        )
        self.assertEqual(body["form_id"], self.catalog["form"]["id"])
        self.assertEqual(body["criticality"], "High")
        self.assertEqual(body["hierarchy_level"], "Unit")
        self.assertEqual(body["warnings"], [])

        fetched = self.client.get(f"/api/assets/{body['id']}")
        self.assertEqual(fetched.json()["data"], body["data"])

    def test_failed_validation_creates_nothing(self):
        response = self.client.post(
            "/api/assets/wizard/submit",
            json={
                "asset": {"name": "Motor M-1", "asset_type_id": self.asset_type_id},
                "core_values": {"serial_number": ""},
                "custom_values": {},
            },
        )
        self.assertEqual(response.status_code, 400)
        errors = response.json()["detail"]["errors"]
        self.assertEqual(errors["core-fields"], {"serial_number": "Serial Number is required"})
        self.assertEqual(errors["form-fill"], {"rpm": "RPM is required"})
        self.assertEqual(self.client.get("/api/assets").json(), [])

    def test_asset_type_and_form_choice_are_required(self):
        missing_type = self.client.post("/api/assets/wizard/submit", json={"asset": {"name": "Loose"}})
        self.assertEqual(missing_type.status_code, 400)

        self._create_form("Motor Commissioning", self.asset_type_id, publish=True)
        no_choice = self.client.post(
            "/api/assets/wizard/submit",
            json={"asset": {"name": "M-2", "asset_type_id": self.asset_type_id}, "core_values": {"serial_number": "M-2"}},
        )
        self.assertEqual(no_choice.status_code, 400)

    def test_unknown_parent_is_rejected(self):
        response = self.client.post(
            "/api/assets/wizard/submit",
            json={
                "asset": {"name": "M-3", "asset_type_id": self.asset_type_id, "parent_id": str(uuid4())},
                "core_values": {"serial_number": "M-3"},
                "custom_values": {"rpm": 1},
            },
        )
        self.assertEqual(response.status_code, 404)

    def test_storage_failure_returns_502(self):
        payload = {
            "asset": {"name": "M-4", "asset_type_id": self.asset_type_id},
            "core_values": {"serial_number": "M-4"},
            "custom_values": {"rpm": 1},
        }
        with patch("sqlalchemy.orm.Session.commit", side_effect=SQLAlchemyError("database unavailable")):
            with self.assertLogs("app.api.assets.wizard", level="ERROR"):
                response = self.client.post("/api/assets/wizard/submit", json=payload)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Failed to save asset")
        self.assertEqual(self.client.get("/api/assets").json(), [])


class AssetEditWizardTests(CatalogApiBase):
    def setUp(self):
        super().setUp()
        self.catalog = self._motor_catalog()
        created = self.client.post(
            "/api/assets/wizard/submit",
            json={
                "asset": {"name": "Motor M-1", "asset_type_id": self.catalog["asset_type"]["id"]},
                "core_values": {"serial_number": "M-1"},
                "custom_values": {"rpm": 1450},
            },
        )
        self.assertEqual(created.status_code, 201, created.text)
        self.asset = created.json()
        with self.SessionLocal() as db:
            row = db.get(Asset, UUID(self.asset["id"]))
            row.data = {**row.data, "legacy_code": "L-17"}
            db.commit()

    def test_edit_wizard_splits_payload_into_stages(self):
        response = self.client.get(f"/api/assets/{self.asset['id']}/edit-wizard")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["steps"], ["basic-info", "core-fields", "form-fill"])
        self.assertEqual(body["form_id"], self.catalog["form"]["id"])
        self.assertEqual(body["stages"]["core-fields"]["values"]["serial_number"], "M-1")
        self.assertEqual(body["stages"]["form-fill"]["values"]["rpm"], 1450)
        self.assertNotIn("legacy_code", body["stages"]["form-fill"]["values"])

    def test_edit_submit_updates_values_and_keeps_unowned_keys(self):
        response = self.client.post(
            f"/api/assets/{self.asset['id']}/edit-wizard/submit",
            json={
                "asset": {"name": "Motor M-1 (rewound)", "status": "maintenance"},
                "core_values": {"serial_number": "M-1", "rated_power": 11},
                "custom_values": {"rpm": "1500"},
            },
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["name"], "Motor M-1 (rewound)")
        self.assertEqual(body["status"], "Maintenance")
        self.assertEqual(body["data"]["rpm"], 1500)
        self.assertEqual(body["data"]["rated_power"], 11)
        self.assertEqual(body["data"]["legacy_code"], "L-17")

    def test_edit_submit_validates_stages(self):
        response = self.client.post(
            f"/api/assets/{self.asset['id']}/edit-wizard/submit",
            json={"core_values": {"serial_number": ""}, "custom_values": {"rpm": 1}},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("core-fields", response.json()["detail"]["errors"])

    def test_asset_cannot_become_its_own_parent(self):
        response = self.client.post(
            f"/api/assets/{self.asset['id']}/edit-wizard/submit",
            json={"asset": {"parent_id": self.asset["id"]}, "core_values": {"serial_number": "M-1"}, "custom_values": {"rpm": 1}},
        )
        self.assertEqual(response.status_code, 400)
