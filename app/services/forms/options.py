from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Choice:
    label: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class StringListOptions:
    values: tuple[str, ...]

    @property
    def choices(self) -> tuple[Choice, ...]:
        return tuple(Choice(label=value, value=value) for value in self.values)


@dataclass(frozen=True)
class LabeledPairOptions:
    pairs: tuple[Choice, ...]

    @property
    def choices(self) -> tuple[Choice, ...]:
        return self.pairs


@dataclass(frozen=True)
class MalformedOptions:
    raw: Any = None

    @property
    def choices(self) -> tuple[Choice, ...]:
        return ()


OptionSet = Union[StringListOptions, LabeledPairOptions, MalformedOptions]

NO_OPTIONS = MalformedOptions()


def _as_choice(item: Any) -> Choice | None:
    if isinstance(item, str):
        return Choice(label=item, value=item)
    if isinstance(item, dict) and "label" in item and "value" in item:
        label, value = item["label"], item["value"]
        if isinstance(label, str) and isinstance(value, str):
            return Choice(label=label, value=value)
    return None


def normalize_options(raw: Any) -> OptionSet:
    """Resolve a stored ``options`` blob into one of the option variants.

    Plain string lists become ``StringListOptions``; lists of ``{label, value}``
    pairs (strings allowed in between) become ``LabeledPairOptions``. Anything
    else, including ``None``, a dict or a list with unusable items, is
    ``MalformedOptions`` and renders zero choices.
    """
    if isinstance(raw, (StringListOptions, LabeledPairOptions, MalformedOptions)):
        return raw
    if not isinstance(raw, (list, tuple)):
        return NO_OPTIONS if raw is None else MalformedOptions(raw=raw)
    if all(isinstance(item, str) for item in raw):
        return StringListOptions(values=tuple(raw))
    choices: list[Choice] = []
    for item in raw:
        choice = _as_choice(item)
        if choice is None:
            return MalformedOptions(raw=raw)
        choices.append(choice)
    return LabeledPairOptions(pairs=tuple(choices))


def options_as_dicts(options: OptionSet) -> list[dict[str, str]]:
    return [choice.as_dict() for choice in options.choices]
