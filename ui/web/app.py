import sys
from pathlib import Path

import streamlit as st

# Make project root importable (so namefinder/ works)
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from namefinder.config import load_config
from namefinder.models import STATUS_LOAD_FAILURE, DecodeRequest
from namefinder.segment import segment
from namefinder.service import NameFinderService


@st.cache_resource
def get_service(config_path: str) -> NameFinderService:
    # one service per config: keeps a single decode in flight and the model cached
    return NameFinderService(load_config(config_path))


def parse_verified(text: str, lines: str, default_label: str):
    """
    Each line is a verified name as it appears in the text, optionally
    followed by "|LABEL". Every occurrence of the name is marked.
    """
    verified = []
    missing = []
    for line in lines.splitlines():
        line = line.strip()
        if not line:
            continue
        surface, _, label = line.partition("|")
        surface = surface.strip()
        label = label.strip() or default_label
        pos = text.find(surface)
        if pos < 0:
            missing.append(surface)
        while pos >= 0:
            verified.append((pos, pos + len(surface), label))
            pos = text.find(surface, pos + len(surface))
    return verified, missing


st.set_page_config(
    page_title="Name Finder",
    layout="wide",
)

st.title("Name Finder – assisted entity annotation")
st.caption("spaCy tagger • verified names are never overridden")

# --------------------------------------------------------------------
# Sidebar configuration
# --------------------------------------------------------------------
st.sidebar.header("Settings")

config_path = st.sidebar.text_input(
    "Config file path",
    value="configs/namefinder.yaml",
    help="Path to the YAML name finder config.",
)

service = None
try:
    service = get_service(config_path)
except (OSError, ValueError) as e:
    st.sidebar.error(f"Failed to load config: {e}")

model_path = st.sidebar.text_input(
    "Model",
    value=service.config.model if service else "",
    help="spaCy package name or pipeline directory.",
)

show_issues = st.sidebar.checkbox("Show rejected input", value=True)

# --------------------------------------------------------------------
# Document
# --------------------------------------------------------------------
default_text = (
    "Barack Obama met Xi Jinping in Beijing.\n"
    "Later, Obama flew back to Washington with Michelle Obama."
)

input_mode = st.radio("Input source", options=["Text box", "Text file"], index=0)

if input_mode == "Text box":
    user_text = st.text_area("Document", value=default_text, height=200)
else:
    uploaded = st.file_uploader("Upload a .txt file", type=["txt"])
    user_text = uploaded.read().decode("utf-8", errors="ignore") if uploaded else ""
    if not user_text:
        st.info("Upload a .txt file to get started.")

verified_lines = st.text_area(
    "Verified names (one per line, optional |LABEL)",
    value="Barack Obama",
    height=100,
)

col_btn, _ = st.columns([1, 5])
with col_btn:
    run_btn = st.button("Find names", type="primary", use_container_width=True)

if run_btn:
    if service is None:
        st.error("Cannot run because the config failed to load. Check sidebar.")
    elif not user_text.strip():
        st.warning("Please enter or upload some text first.")
    else:
        verified, missing = parse_verified(
            user_text, verified_lines, service.config.default_label
        )
        for surface in missing:
            st.warning(f"Verified name not found in text: {surface!r}")

        with st.spinner("Finding names..."):
            sentences, tokens = segment(user_text)
            result = service.run(
                DecodeRequest(
                    text=user_text,
                    sentences=sentences,
                    tokens=tokens,
                    verified=verified,
                    model_path=model_path or None,
                )
            )

        if result.status == STATUS_LOAD_FAILURE:
            st.error("Model could not be loaded: " + "; ".join(i.message for i in result.issues))
        else:
            verified_count = sum(1 for e in result.entities if e.verified)
            st.success(
                f"Found {len(result.entities)} entities "
                f"({verified_count} verified, {len(result.entities) - verified_count} proposed)."
            )

            rows = [
                {
                    "start": e.start,
                    "end": e.end,
                    "text": e.text,
                    "label": e.label,
                    "probability": round(e.probability, 3),
                    "verified": e.verified,
                }
                for e in result.entities
            ]
            if rows:
                st.dataframe(rows, use_container_width=True)

        if show_issues and result.issues:
            st.markdown("### Rejected input")
            st.dataframe(
                [
                    {"kind": i.kind, "message": i.message, "start": i.start, "end": i.end}
                    for i in result.issues
                ],
                use_container_width=True,
            )
