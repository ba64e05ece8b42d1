"""
solaudit — Report Rendering

Turns an AnalysisResult into either a human-readable text report or a JSON
document. Rendering returns strings; the CLI decides where they go.
"""

from __future__ import annotations

import json
from typing import Any

from solaudit.analysis.types import AnalysisResult

_HEADER = "––––––– Retry Safety Report –––––––"

# (diff flag, label, snapshot attribute)
_FIELD_LINES: tuple[tuple[str, str, str], ...] = (
    ("lamports_changed", "Lamports", "lamports"),
    ("owner_changed", "Owner", "owner"),
    ("executable_changed", "Executable", "executable"),
    ("data_len_changed", "Data Size", "data_len"),
)


def render_text(result: AnalysisResult) -> str:
    lines = [
        _HEADER,
        f"Account: {result.before.pubkey}",
    ]
    if result.cluster:
        lines.append(f"Cluster: {result.cluster}")
    lines.append(f"Safety: {result.safety.value.upper()}")

    if result.simulation_error is not None:
        lines.append(f"Simulation error: {result.simulation_error}")
    if result.units_consumed is not None:
        lines.append(f"Compute units consumed: {result.units_consumed}")

    if not result.classification.reasons:
        lines.append("No state changes detected")
    else:
        lines.append("")
        lines.append("State Changes:")
        for flag, label, attr in _FIELD_LINES:
            if getattr(result.diff, flag):
                before = getattr(result.before, attr)
                after = getattr(result.after, attr)
                lines.append(f"- {label}: {before} -> {after}")
        if result.diff.data_changed:
            lines.append("- Data: content differs")

        lines.append("")
        lines.append("Reasons:")
        lines.extend(f"- {reason}" for reason in result.classification.reasons)

    if result.simulation_logs:
        lines.append("")
        lines.append("Simulation Logs:")
        lines.extend(f"  {log}" for log in result.simulation_logs)

    return "\n".join(lines)


def render_json(result: AnalysisResult) -> str:
    """Pretty JSON. Empty logs and unset optional fields are left out."""
    payload: dict[str, Any] = result.model_dump(mode="json")
    if not payload.get("simulation_logs"):
        payload.pop("simulation_logs", None)
    for key in ("simulation_error", "units_consumed", "cluster"):
        if payload.get(key) is None:
            payload.pop(key, None)
    return json.dumps(payload, indent=2)


def render(result: AnalysisResult, output: str) -> str:
    """Dispatch on an output selector: ``"json"`` or ``"text"``."""
    if output == "json":
        return render_json(result)
    return render_text(result)
