from __future__ import annotations

"""
dashboard.py — Sunboard World Exchange Board
Two rails of exchange cards ordered by sunrise (or longitude), each with a
live open/closed badge, trading phase and countdown to the next transition.

  streamlit run dashboard.py
"""

import time
from datetime import datetime, timezone

import streamlit as st

from sunboard_app.board import BoardRow, board_frame, build_board, rail_titles, rails
from sunboard_app.catalogue import load_catalogue
from sunboard_app.config import load_config
from sunboard_app.errors import CatalogueError, ConfigError
from sunboard_app.logs import setup_logger
from sunboard_app.templates import minutes_to_hhmm

# ── Page Config ───────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Sunboard",
    layout="wide",
    page_icon="🌅",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
.card { border-radius: 10px; padding: 10px 14px; margin-bottom: 8px;
        background: #0f172a; border: 1px solid #1e293b; }
.card .name { font-weight: 700; color: #e2e8f0; }
.card .meta { font-size: 0.75rem; color: #64748b; }
.badge { padding: 2px 7px; border-radius: 4px; font-size: 0.72rem; color: #f1f5f9; }
</style>
""", unsafe_allow_html=True)

# ── Load config & catalogue ───────────────────────────────────────────────────
try:
    cfg = load_config()
except ConfigError as exc:
    st.error(f"Configuration error: {exc}")
    st.stop()
setup_logger(cfg.log_dir, cfg.log_level)


@st.cache_resource
def _catalogue(path: str):
    # Loaded once per process and never mutated afterwards
    return load_catalogue(path, strict=cfg.strict_catalogue)


try:
    catalogue = _catalogue(str(cfg.catalogue_path))
except CatalogueError as exc:
    st.error(f"Catalogue failed to load: {exc}")
    st.stop()

# ── Sidebar ───────────────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown("## ⚙️ Board")
    mode = st.radio(
        "Order by",
        options=["sunrise", "longitude"],
        index=0 if cfg.order_mode == "sunrise" else 1,
        horizontal=True,
    )
    ref = st.slider("Reference longitude", -180.0, 180.0, float(cfg.reference_longitude), step=0.5)
    st.caption(f"Catalogue: `{cfg.catalogue_path}`")
    st.caption(f"{len(catalogue.exchanges)} exchanges · {len(catalogue.rejected)} rejected")
    for r in catalogue.rejected:
        st.warning(f"#{r.index} {r.exchange_id or '?'}: {r.reason}")

    st.divider()
    auto = st.checkbox(f"⏱ Auto-refresh ({cfg.refresh_seconds}s)", value=False)
    if st.button("🔄 Refresh now", use_container_width=True):
        st.rerun()

now = datetime.now(timezone.utc)
rows = build_board(catalogue.exchanges, now, mode=mode, reference_longitude=ref)
left, right = rails(rows)


def _card(row: BoardRow) -> None:
    s = row.status
    if s.is_open:
        badge, color = f"🟢 OPEN · {s.phase.value}", "#14532d"
    else:
        badge, color = "⚫ CLOSED", "#1e293b"

    if isinstance(row.sort_key, datetime):
        key = f"sunrise {row.sort_key.strftime('%H:%M')} UTC"
    elif row.sort_key is None:
        key = "no sunrise today"
    else:
        key = f"{row.sort_key:+.1f}°"

    sessions = "  ".join(
        f"{minutes_to_hhmm(x.start_minute)}–{minutes_to_hhmm(x.end_minute)}" for x in s.sessions_today
    ) or "no session today"

    st.markdown(
        f"<div class='card'>"
        f"<span class='name'>#{row.rank + 1} {row.name}</span>&nbsp;"
        f"<span class='badge' style='background:{color}'>{badge}</span><br>"
        f"<span class='meta'>local {row.local_time} · {row.countdown} · {key}</span><br>"
        f"<span class='meta'>{sessions}</span>"
        f"</div>",
        unsafe_allow_html=True,
    )
    if s.is_open:
        st.progress(s.progress / 100)


# ── Header ────────────────────────────────────────────────────────────────────
st.markdown("# 🌅 World Exchange Board")
n_open = sum(1 for r in rows if r.status.is_open)
k1, k2, k3 = st.columns(3)
k1.metric("Exchanges", len(rows))
k2.metric("Open now", n_open)
k3.metric("As of (UTC)", now.strftime("%H:%M:%S"))

st.divider()

# ── Rails ─────────────────────────────────────────────────────────────────────
left_title, right_title = rail_titles(mode)
col_left, col_right = st.columns(2)
with col_left:
    st.markdown(f"### {left_title}")
    for row in left:
        _card(row)
    if not left:
        st.caption("No exchanges in the catalogue.")
with col_right:
    st.markdown(f"### {right_title}")
    for row in right:
        _card(row)

with st.expander("Board table"):
    st.dataframe(board_frame(rows), use_container_width=True)

# ── Footer / auto-refresh ─────────────────────────────────────────────────────
if auto:
    time.sleep(cfg.refresh_seconds)
    st.rerun()
