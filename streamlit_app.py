#!/usr/bin/env python3
from __future__ import annotations

import streamlit as st

from cep_race.config import LookupConfig
from cep_race.logging_config import configure_logging
from cep_race.pipeline import LookupReport, run_lookup

# Same lookup path as the CLI; the page only renders the report.
configure_logging()


def _render_report(report: LookupReport) -> None:
    if report.error is not None:
        st.error(f"{report.error.message} Got: {report.candidate!r}")
        return

    outcome = report.outcome
    if outcome.ok:
        st.success(f"{outcome.winner.name} answered first")
        st.metric("Elapsed (ms)", outcome.elapsed_ms)
        st.json(outcome.result)
    else:
        st.error(str(outcome.error))

    if outcome.failures:
        st.subheader("Sources that failed")
        for name, exc in outcome.failures.items():
            st.caption(f"{name}: {exc.message}")


def main() -> None:
    st.set_page_config(page_title="CEP lookup", layout="centered")
    st.title("CEP lookup")
    st.caption("ApiCep and ViaCep are queried at the same time; the first answer wins.")

    defaults = LookupConfig()
    with st.form("lookup"):
        cep = st.text_input("CEP", placeholder="00000-000").strip()
        timeout = st.number_input(
            "Deadline (seconds)",
            min_value=0.1,
            max_value=10.0,
            value=float(defaults.timeout_seconds),
            step=0.1,
        )
        fail_fast = st.checkbox("Stop at the first failing source", value=defaults.fail_fast)
        submitted = st.form_submit_button("Look up")

    if not submitted:
        return
    config = defaults.with_overrides(timeout_seconds=float(timeout), fail_fast=fail_fast)
    with st.spinner("Racing sources..."):
        report = run_lookup(candidate=cep, config=config)
    _render_report(report)


if __name__ == "__main__":
    main()
