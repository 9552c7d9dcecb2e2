"""Step planning for the asset creation and edit wizards.

The step sequence is recomputed from the current context on every move, so
moving back always retraces the same skips as moving forward.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


class WizardStep(str, Enum):
    ASSET_TYPE = "asset-type"
    CORE_FIELDS = "core-fields"
    FORM_SELECT = "form-select"
    FORM_FILL = "form-fill"
    REVIEW = "review"


class EditWizardStep(str, Enum):
    BASIC_INFO = "basic-info"
    CORE_FIELDS = "core-fields"
    FORM_FILL = "form-fill"


def plan_steps(
    has_core_fields: bool,
    available_forms_count: int,
    chosen_form_has_custom_fields: bool = True,
) -> list[WizardStep]:
    steps = [WizardStep.ASSET_TYPE]
    if has_core_fields:
        steps.append(WizardStep.CORE_FIELDS)
    if available_forms_count > 1:
        steps.append(WizardStep.FORM_SELECT)
    if available_forms_count >= 1 and chosen_form_has_custom_fields:
        steps.append(WizardStep.FORM_FILL)
    steps.append(WizardStep.REVIEW)
    return steps


def plan_edit_steps(has_core_fields: bool, form_has_custom_fields: bool) -> list[EditWizardStep]:
    steps = [EditWizardStep.BASIC_INFO]
    if has_core_fields:
        steps.append(EditWizardStep.CORE_FIELDS)
    if form_has_custom_fields:
        steps.append(EditWizardStep.FORM_FILL)
    return steps


def _position(steps: Sequence[Enum], current: Enum) -> int:
    try:
        return list(steps).index(current)
    except ValueError:
        raise ValueError(f"step {current.value!r} is not part of this wizard") from None


def next_step(steps: Sequence[Enum], current: Enum) -> Enum | None:
    index = _position(steps, current)
    return steps[index + 1] if index + 1 < len(steps) else None


def previous_step(steps: Sequence[Enum], current: Enum) -> Enum | None:
    index = _position(steps, current)
    return steps[index - 1] if index > 0 else None


@dataclass
class WizardContext:
    """In-progress state of one creation wizard, discarded when it closes."""

    asset_type_id: str | None = None
    has_core_fields: bool = False
    available_form_ids: list[str] = field(default_factory=list)
    selected_form_id: str | None = None
    chosen_form_has_custom_fields: bool = True
    step: WizardStep = WizardStep.ASSET_TYPE
    stage_values: dict[str, dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.step = WizardStep(self.step)
        self._auto_select_form()

    def _auto_select_form(self) -> None:
        if len(self.available_form_ids) == 1:
            self.selected_form_id = self.available_form_ids[0]
        elif self.selected_form_id not in self.available_form_ids:
            self.selected_form_id = None

    @property
    def steps(self) -> list[WizardStep]:
        return plan_steps(
            self.has_core_fields,
            len(self.available_form_ids),
            self.chosen_form_has_custom_fields,
        )

    @property
    def step_index(self) -> int:
        return self.steps.index(self.step)

    @property
    def is_last(self) -> bool:
        return self.step is WizardStep.REVIEW

    def select_asset_type(
        self,
        asset_type_id: str,
        *,
        has_core_fields: bool,
        available_form_ids: Sequence[str],
        form_has_custom_fields: bool = True,
    ) -> None:
        """Switch to another asset type and restart from the first step.

        ``form_has_custom_fields`` describes the form that is auto-selected when
        exactly one is available.
        """
        self.asset_type_id = asset_type_id
        self.has_core_fields = has_core_fields
        self.available_form_ids = list(available_form_ids)
        self.selected_form_id = None
        self.stage_values.clear()
        self._auto_select_form()
        self.chosen_form_has_custom_fields = form_has_custom_fields if self.selected_form_id else True
        self.step = WizardStep.ASSET_TYPE

    def select_form(self, form_id: str, *, has_custom_fields: bool) -> None:
        if form_id not in self.available_form_ids:
            raise ValueError(f"form {form_id!r} is not available for this asset type")
        if form_id != self.selected_form_id:
            self.stage_values.pop(WizardStep.FORM_FILL.value, None)
        self.selected_form_id = form_id
        self.chosen_form_has_custom_fields = has_custom_fields

    def record(self, step: WizardStep, values: dict[str, Any]) -> None:
        self.stage_values[WizardStep(step).value] = dict(values)

    def advance(self) -> WizardStep:
        if self.step is WizardStep.FORM_SELECT and self.selected_form_id is None:
            raise ValueError("a form must be selected before continuing")
        following = next_step(self.steps, self.step)
        if following is not None:
            self.step = following
        return self.step

    def back(self) -> WizardStep:
        preceding = previous_step(self.steps, self.step)
        if preceding is not None:
            self.step = preceding
        return self.step

    def discard(self) -> None:
        self.asset_type_id = None
        self.has_core_fields = False
        self.available_form_ids = []
        self.selected_form_id = None
        self.chosen_form_has_custom_fields = True
        self.step = WizardStep.ASSET_TYPE
        self.stage_values.clear()


def split_payload(
    data: dict[str, Any] | None,
    core_keys: Sequence[str],
    custom_keys: Sequence[str],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate a stored payload into core and custom stage values by key."""
    core_lookup, custom_lookup = set(core_keys), set(custom_keys)
    core: dict[str, Any] = {}
    custom: dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key in core_lookup:
            core[key] = value
        elif key in custom_lookup:
            custom[key] = value
    return core, custom
