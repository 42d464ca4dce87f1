"""Streamlit demo UI for focus-planner."""

from __future__ import annotations

import tempfile
from datetime import datetime, time
from pathlib import Path
from typing import Any

from focus_planner.adapters import csv_adapter, json_adapter
from focus_planner.diagnosis import diagnose_task
from focus_planner.explain import explain_plan
from focus_planner.metrics import compute_plan_metrics
from focus_planner.normalize import prepare_inputs
from focus_planner.planner import frozen_clock, generate_plan
from focus_planner.resolved import resolve_zone
from focus_planner.timeutils import in_zone

DEMO_INPUT = "examples/sample_plan.json"
DEMO_EVENTS = "examples/sample_events.csv"


def _save_uploaded(uploaded_file) -> str:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        return handle.name


def _block_rows(plan, tasks, zone) -> list[dict[str, Any]]:
    titles = {task.id: task.title for task in tasks}
    rows = []
    for block in sorted(plan.blocks, key=lambda b: in_zone(b.start, zone)):
        rows.append(
            {
                "task": titles.get(block.task_id, block.task_id),
                "start": in_zone(block.start, zone).strftime("%a %Y-%m-%d %H:%M"),
                "end": in_zone(block.end, zone).strftime("%H:%M"),
                "confidence": f"{block.confidence:.2f}",
                "reasons": ", ".join(code.value for code in block.reason_codes),
                "locked": block.locked,
            }
        )
    return rows


def run_planner(plan_input, extra_events: list, now: datetime, prepare: bool, respect_dependencies: bool) -> dict[str, Any]:
    """Run the planner and return a UI-friendly result payload."""

    tasks, settings = plan_input.tasks, plan_input.settings
    if prepare:
        tasks, settings = prepare_inputs(tasks, settings, now)

    plan = generate_plan(
        tasks,
        plan_input.events + extra_events,
        settings,
        plan_input.locked_blocks,
        clock=frozen_clock(now),
        respect_dependencies=respect_dependencies,
    )
    placed = {block.task_id for block in plan.blocks}
    unplaced = {
        task.title: diagnose_task(task, settings, plan.warnings, now).message
        for task in tasks
        if task.id not in placed
    }
    return {
        "plan": plan,
        "tasks": tasks,
        "settings": settings,
        "rows": _block_rows(plan, tasks, resolve_zone(settings.timezone)),
        "metrics": compute_plan_metrics(plan, tasks, settings),
        "explanation": explain_plan(plan, tasks, settings),
        "unplaced": unplaced,
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Focus Planner Demo", layout="wide")
    st.title("Focus Planner: Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload planner input", type=["json"])
        uploaded_events = st.file_uploader("Upload extra events", type=["csv"])
        use_demo = st.checkbox("Load demo input", value=True)
        plan_date = st.date_input("Plan from date", value=datetime(2025, 3, 3).date())
        plan_time = st.time_input("Plan from time", value=time(8, 0))
        prepare = st.checkbox("Normalise tasks and size settings", value=False)
        respect_dependencies = st.checkbox("Order dependencies first", value=False)
        run = st.button("Generate plan", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Generate plan**.")
        return

    try:
        if use_demo:
            plan_input = json_adapter.parse(DEMO_INPUT)
            extra_events = csv_adapter.parse(DEMO_EVENTS)
            data_source = f"demo input ({DEMO_INPUT})"
        elif uploaded is not None:
            plan_input = json_adapter.parse(_save_uploaded(uploaded))
            extra_events = csv_adapter.parse(_save_uploaded(uploaded_events)) if uploaded_events else []
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a JSON input or enable 'Load demo input'.")
            return

        if not plan_input.tasks:
            st.error("No tasks were found in the selected input.")
            return

        zone = resolve_zone(plan_input.settings.timezone)
        now = datetime.combine(plan_date, plan_time, tzinfo=zone)
        result = run_planner(plan_input, extra_events, now, prepare, respect_dependencies)

        st.success(f"Loaded {len(plan_input.tasks)} tasks from {data_source}.")

        st.subheader("A) Summary")
        metrics = result["metrics"]
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Blocks", metrics["total_blocks"])
        c2.metric("Scheduled minutes", metrics["scheduled_minutes"])
        c3.metric("Unscheduled minutes", metrics["unscheduled_minutes"])
        c4.metric("Avg confidence", f"{metrics['avg_confidence']:.2f}")

        st.subheader("B) Blocks")
        st.table(result["rows"])

        st.subheader("C) Warnings")
        warnings = result["plan"].warnings
        if warnings:
            st.table([{"code": w.code.value, "message": w.message} for w in warnings])
        else:
            st.write("No warnings.")

        if result["unplaced"]:
            st.subheader("D) Not placed")
            st.table([{"task": title, "reason": reason} for title, reason in result["unplaced"].items()])

        st.subheader("E) Explanation")
        st.text(result["explanation"])

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except Exception:
        st.error("Something went wrong while planning. Please verify the input format.")


if __name__ == "__main__":
    main()
