"""
Lab Risk Draft: risk-assessment table drafter (Streamlit + LLM extraction + PubChem)
"""

from typing import Callable, List

import streamlit as st
import structlog

from labrisk import workflow
from labrisk.config import load_settings
from labrisk.errors import LabRiskError
from labrisk.extraction import ProcedureExtractor
from labrisk.logging import setup_logging
from labrisk.models import AppState, CandidateMatch, ResolutionStatus
from labrisk.operations import operation_hazards
from labrisk.pictograms import PICTO_TITLE, pictogram_svg
from labrisk.pubchem import PubChemClient
from labrisk.table import DISCLAIMER, draft_csv, draft_markdown, draft_rows, escape_markdown
from labrisk.units import PLACEHOLDER, display_temperature

# ---------- Setup ----------
settings = load_settings()
setup_logging(settings)
log = structlog.get_logger("labrisk.app")

st.set_page_config(page_title="Lab Risk Draft", page_icon="🧪", layout="wide")

extractor = ProcedureExtractor(settings)
pubchem = PubChemClient(settings)

if "app_state" not in st.session_state:
    st.session_state["app_state"] = AppState()
if "messages" not in st.session_state:
    st.session_state["messages"] = []


def get_state() -> AppState:
    return st.session_state["app_state"]


def put_state(state: AppState) -> None:
    st.session_state["app_state"] = state


def flash(level: str, text: str) -> None:
    st.session_state["messages"].append((level, text))


def run_action(label: str, fn: Callable[[AppState], AppState]) -> None:
    """Apply one user action; on failure the previous state is kept."""
    try:
        put_state(fn(get_state()))
    except LabRiskError as e:
        log.warning("app.action_failed", action=label, error=str(e))
        flash("error", str(e))


def pick_key(name: str) -> str:
    return f"pick::{name}"


# ---------- Callbacks ----------
def on_analyze() -> None:
    procedure = st.session_state.get("procedure_field", "")
    with st.spinner("Extracting chemicals and operations…"):
        run_action("analyze", lambda s: workflow.analyze(s, procedure, extractor, settings.min_procedure_length))
    for name in get_state().chemicals:
        st.session_state.pop(pick_key(name), None)


def on_search(name: str) -> None:
    run_action("search", lambda s: workflow.search(s, name, pubchem))
    # let the match selector re-initialise from the new tentative pick
    st.session_state.pop(pick_key(name), None)


def on_pick(name: str) -> None:
    cid = st.session_state.get(pick_key(name))
    if cid is not None:
        run_action("select", lambda s: workflow.select_candidate(s, name, int(cid)))


def on_confirm(name: str) -> None:
    run_action("confirm", lambda s: workflow.confirm(s, name))


def on_fetch_properties(name: str) -> None:
    run_action("properties", lambda s: workflow.fetch_properties(s, name, pubchem))


def on_fetch_hazards(name: str) -> None:
    run_action("hazards", lambda s: workflow.fetch_hazards(s, name, pubchem))


def on_fetch_all() -> None:
    try:
        report = workflow.fetch_all_confirmed(get_state(), pubchem, delay_s=st.session_state.get("delay_s", 0.0))
    except LabRiskError as e:
        flash("error", str(e))
        return
    put_state(report.state)
    if report.fetched:
        flash("success", "Fetched data for: " + ", ".join(report.fetched))
    for name, msg in report.failures.items():
        flash("warning", f"{escape_markdown(name)}: {msg}")


def on_units() -> None:
    put_state(workflow.set_unit_system(get_state(), st.session_state["unit_field"]))


# ---------- Rendering helpers ----------
def candidate_label(options: List[CandidateMatch]) -> Callable[[int], str]:
    titles = {c.identifier: c.title for c in options}
    return lambda cid: f"{titles.get(cid, 'CID')} (CID {cid})"


def render_pictograms(names: List[str]) -> None:
    if not names:
        st.write(f"Pictograms: {PLACEHOLDER}")
        return
    badges = "".join(
        f'<span title="{PICTO_TITLE.get(n, n)}" style="margin-right:6px">{pictogram_svg(n, size=48)}</span>'
        for n in names
    )
    st.markdown(badges, unsafe_allow_html=True)


def render_chemical(name: str, state: AppState) -> None:
    chem = state.chemicals[name]
    st.markdown(f"**{escape_markdown(name)}** · _{chem.status.value}_")
    if chem.last_error:
        st.error(f"Search failed: {chem.last_error}")

    c1, c2, c3, c4, c5 = st.columns([1, 3, 1, 1, 1])
    with c1:
        st.button("Find matches", key=f"search::{name}", on_click=on_search, args=(name,),
                  use_container_width=True)
    with c2:
        options = [c.identifier for c in chem.candidates]
        if options:
            index = options.index(chem.tentative_identifier) if chem.tentative_identifier in options else 0
            st.selectbox("PubChem match", options, index=index, key=pick_key(name),
                         format_func=candidate_label(chem.candidates), on_change=on_pick, args=(name,),
                         label_visibility="collapsed")
        elif chem.status != ResolutionStatus.UNRESOLVED:
            st.caption("No PubChem matches for this name. Try editing the spelling in your procedure.")
        else:
            st.caption("Not searched yet.")
    with c3:
        st.button("Confirm", key=f"confirm::{name}", on_click=on_confirm, args=(name,),
                  disabled=chem.tentative_identifier is None, use_container_width=True)
    with c4:
        st.button("Get properties", key=f"props::{name}", on_click=on_fetch_properties, args=(name,),
                  use_container_width=True)
    with c5:
        st.button("Get GHS", key=f"ghs::{name}", on_click=on_fetch_hazards, args=(name,),
                  use_container_width=True)

    if chem.confirmed_identifier is not None:
        title = chem.title_for(chem.confirmed_identifier) or "CID"
        st.caption(f"Confirmed: {escape_markdown(title)} (CID {chem.confirmed_identifier})")

    props = state.properties.get(name)
    if props:
        st.markdown(
            f"- Boiling: {display_temperature(props.boiling_point, state.unit_system)}\n"
            f"- Flash: {display_temperature(props.flash_point, state.unit_system)}\n"
            f"- Melting/freezing: {display_temperature(props.melting_or_freezing_point, state.unit_system)}"
        )
        st.caption(f"Source: {props.source}")

    ghs = state.hazards.get(name)
    if ghs:
        st.write(f"Signal word: {ghs.signal_word or PLACEHOLDER}")
        render_pictograms(ghs.pictograms)
        for h in ghs.hazard_statements[:6]:
            st.markdown(f"- {escape_markdown(h)}")
        if len(ghs.hazard_statements) > 6:
            st.caption(f"+{len(ghs.hazard_statements) - 6} more hazard statements in the source record.")
        st.caption(f"Source: {ghs.source}")
    st.markdown("---")


# ---------- UI ----------
st.title("🧪 Lab Risk Draft")
st.caption("Paste a procedure → confirm PubChem matches → draft a risk-assessment table")

with st.expander("How it works & disclaimer", expanded=False):
    st.markdown("""An LLM lists the chemicals and operations in your procedure; you match each chemical to a
PubChem compound and confirm it; properties and GHS classification are then fetched for confirmed compounds only.
""" + DISCLAIMER)

with st.sidebar:
    st.subheader("Display")
    st.radio("Units", ["metric", "imperial"], key="unit_field", on_change=on_units,
             index=0 if get_state().unit_system == "metric" else 1,
             format_func=lambda u: "Metric (°C)" if u == "metric" else "Imperial (°F)")
    st.subheader("PubChem")
    st.slider("Delay between requests (s)", 0.0, 1.0, settings.request_delay_s, 0.1, key="delay_s")
    st.subheader("Diagnostics")
    st.markdown(f"- **LLM key detected?** {'✅' if settings.llm_api_key else '❌'}")
    st.markdown(f"- **Model:** `{settings.llm_model}`")

st.subheader("1. Paste procedure")
proc_text = st.text_area("Procedure (free text)", height=220, key="procedure_field",
                         placeholder="e.g., Dissolve benzaldehyde (1.0 g) in ethanol, add NaOH dropwise, "
                                     "reflux 2 h, quench with HCl, extract with ethyl acetate, dry, filter, rotavap…")
too_short = len((proc_text or "").strip()) < settings.min_procedure_length
st.button("✨ Analyse procedure", type="primary", on_click=on_analyze, disabled=too_short)
if too_short:
    st.caption(f"Enter at least {settings.min_procedure_length} characters to analyse.")

messages = st.session_state["messages"]
for level, text in messages:
    {"error": st.error, "warning": st.warning, "success": st.success}.get(level, st.info)(text)
st.session_state["messages"] = []

state = get_state()
if state.extraction is not None:
    st.subheader("2. Chemicals")
    if not state.chemicals:
        st.info("No chemicals were found in the procedure.")
    for chem_name in state.chemicals:
        render_chemical(chem_name, state)

    confirmed = workflow.confirmed_chemicals(state)
    st.button(f"⬇️ Fetch all confirmed ({len(confirmed)})", on_click=on_fetch_all)

    st.subheader("3. Operation hazards")
    op_hazards = operation_hazards(state.extraction.operations)
    if state.extraction.operations:
        with st.expander("Operations found", expanded=False):
            for op in state.extraction.operations:
                st.markdown(f"- {escape_markdown(op)}")
    if op_hazards:
        for h in op_hazards:
            st.markdown(f"- {escape_markdown(h)}")
    else:
        st.caption("No generic operation hazards matched.")

    st.subheader("4. Draft table")
    st.dataframe(draft_rows(state), use_container_width=True, hide_index=True)
    st.caption(DISCLAIMER)
    d1, d2 = st.columns(2)
    with d1:
        st.download_button("💾 Download Markdown", data=draft_markdown(state).encode("utf-8"),
                           file_name="risk_assessment_draft.md")
    with d2:
        st.download_button("💾 Download CSV", data=draft_csv(state).encode("utf-8"),
                           file_name="risk_assessment_draft.csv", mime="text/csv")
else:
    st.info("Paste your procedure and click ‘Analyse procedure’ to list its chemicals and operations.")
