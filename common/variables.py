from copy import deepcopy
from typing import Iterable, List, Optional

ALL_VARIABLE_VALUE = "$__all"


def _pair(option: dict) -> dict:
    return {"text": deepcopy(option.get("text")), "value": deepcopy(option.get("value"))}


class VariableResolver:
    """Resolves the selected values of dashboard template variables.

    The ``options`` list is authoritative: selection order is definition
    order, and the ``current`` summary is ignored.
    """

    def __init__(self, templating_list: Optional[List[dict]]):
        self._variables = {}
        for variable in templating_list or []:
            # first definition wins, like a lookup by name would
            self._variables.setdefault(variable.get("name"), variable)

    @classmethod
    def from_dashboard(cls, dashboard: dict) -> "VariableResolver":
        return cls(dashboard.get("templating", {}).get("list", []))

    def __contains__(self, name):
        return name in self._variables

    def selected_options(self, name: str) -> List[dict]:
        variable = self._variables.get(name)
        if variable is None:
            return []
        options = variable.get("options") or []
        selected = [option for option in options if option.get("selected") is True]
        if len(selected) == 1 and selected[0].get("value") == ALL_VARIABLE_VALUE:
            selected = [
                option for option in options if option.get("value") != ALL_VARIABLE_VALUE
            ]
        return [_pair(option) for option in selected]


def apply_selection(templating_list: List[dict], name: str, values: Iterable) -> None:
    """Selects ``values`` of variable ``name`` and refreshes its ``current`` summary."""
    for variable in templating_list:
        if variable.get("name") == name:
            break
    else:
        raise KeyError(name)

    wanted = {str(value) for value in values}
    selected = []
    for option in variable.get("options") or []:
        option["selected"] = str(option.get("value")) in wanted
        if option["selected"]:
            selected.append(option)

    variable["current"] = {
        "text": " + ".join(str(option.get("text")) for option in selected),
        "value": [option.get("value") for option in selected],
    }
