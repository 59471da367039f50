"""WeatherVerse: Streamlit app for current weather with an AI summary."""

import asyncio
import html
from collections.abc import Coroutine
from datetime import datetime, timedelta, timezone
from typing import Any

import streamlit as st
from streamlit_js_eval import get_geolocation, streamlit_js_eval

from weatherverse.config import Settings
from weatherverse.location import BrowserGeolocator
from weatherverse.logging_config import setup_logging
from weatherverse.messages import t
from weatherverse.models import Notice, ViewState
from weatherverse.session import WeatherSession
from weatherverse.summary import AnthropicSummarizer, SummaryRequester
from weatherverse.theme import GRADIENTS, WeatherTheme, classify
from weatherverse.weather import WeatherClient

st.set_page_config(
    page_title=t("page_title"),
    page_icon="🌦",
    layout="centered",
    initial_sidebar_state="collapsed",
)

# --- Session state initialization ---
if "session" not in st.session_state:
    _settings = Settings.from_env()
    setup_logging(_settings.log_level)
    st.session_state.notices = []
    st.session_state.session = WeatherSession(
        client=WeatherClient(_settings),
        summaries=SummaryRequester(AnthropicSummarizer(_settings)),
        notify=st.session_state.notices.append,
    )
if "started" not in st.session_state:
    st.session_state.started = False

session: WeatherSession = st.session_state.session
state: ViewState = session.state


def _inject_css(theme: WeatherTheme) -> None:
    """Page CSS. The background follows the theme passed in."""
    st.markdown(
        f"""
        <style>
        .stApp {{
            background: {GRADIENTS[theme]} !important;
            transition: background 0.5s ease;
        }}
        [data-testid="stHeader"], [data-testid="stToolbar"] {{
            display: none !important;
        }}
        /* Hide streamlit_js_eval invisible iframe */
        iframe[src*="streamlit_js_eval"] {{ display: none !important; }}
        .app-title {{
            text-align: center;
            font-size: 3rem;
            font-weight: 800;
            color: #ffffff;
            margin-bottom: 0;
        }}
        .app-tagline {{
            text-align: center;
            color: rgba(255,255,255,0.7);
            margin-top: 0.2rem;
        }}
        .glass-card {{
            background: rgba(255, 255, 255, 0.10);
            backdrop-filter: blur(20px);
            -webkit-backdrop-filter: blur(20px);
            border-radius: 16px;
            border: 1px solid rgba(255, 255, 255, 0.15);
            padding: 1.2rem 1.6rem;
            margin-bottom: 1rem;
            color: #ffffff;
        }}
        .card-city {{ font-size: 1.8rem; font-weight: 700; margin: 0; }}
        .card-conditions {{ color: rgba(255,255,255,0.75); margin: 0; }}
        .card-temp {{ font-size: 4rem; font-weight: 200; text-align: center; margin: 0; }}
        .card-icon {{ display: block; margin: 0 auto; width: 96px; }}
        .card-grid {{
            display: grid;
            grid-template-columns: repeat(2, 1fr);
            gap: 0.6rem 1.2rem;
            margin-top: 1rem;
        }}
        .card-label {{
            font-size: 0.75rem;
            text-transform: uppercase;
            color: rgba(255,255,255,0.6);
        }}
        .card-value {{ font-size: 1.1rem; }}
        .summary-text {{ line-height: 1.7; font-style: italic; }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def _format_clock(ts: int, offset: int | None) -> str:
    """Unix seconds → local HH:MM at the location (UTC when the offset is unknown)."""
    tz = timezone(timedelta(seconds=offset or 0))
    return datetime.fromtimestamp(ts, tz=tz).strftime("%H:%M")


def _render_card(slot: Any, view: ViewState) -> None:
    snap = view.snapshot
    if snap is None:
        if not view.loading:
            slot.markdown(
                f"<div class='glass-card' style='text-align:center;'>{t('placeholder')}</div>",
                unsafe_allow_html=True,
            )
        return

    place = html.escape(snap.city + (f", {snap.country}" if snap.country else ""))
    conditions = html.escape(snap.description or snap.conditions)
    icon = (
        f"<img class='card-icon' src='{html.escape(snap.icon_url)}' alt='{conditions}'/>"
        if snap.icon_url
        else ""
    )
    visibility = f"{snap.visibility / 1000:.1f} km" if snap.visibility is not None else "—"
    cells = [
        (t("label_feels_like"), f"{snap.feels_like}°C"),
        (t("label_min_max"), f"{snap.temp_min}° / {snap.temp_max}°"),
        (t("label_humidity"), f"{snap.humidity:g}%"),
        (t("label_wind"), f"{snap.wind_speed} km/h"),
        (t("label_pressure"), f"{snap.pressure:g} hPa"),
        (t("label_visibility"), visibility),
        (t("label_sunrise"), _format_clock(snap.sunrise, snap.timezone_offset)),
        (t("label_sunset"), _format_clock(snap.sunset, snap.timezone_offset)),
    ]
    grid = "".join(
        f"<div><div class='card-label'>{label}</div><div class='card-value'>{value}</div></div>"
        for label, value in cells
    )
    slot.markdown(
        f"<div class='glass-card'>"
        f"<p class='card-city'>📍 {place}</p>"
        f"<p class='card-conditions'>{conditions}</p>"
        f"{icon}"
        f"<p class='card-temp'>{snap.temperature}°C</p>"
        f"<div class='card-grid'>{grid}</div>"
        f"</div>",
        unsafe_allow_html=True,
    )


def _render_summary(slot: Any, view: ViewState) -> None:
    if view.snapshot is None or not view.summary:
        return
    slot.markdown(
        f"<div class='glass-card'><div class='card-label'>🧠 {t('summary_heading')}</div>"
        f"<p class='summary-text'>{html.escape(view.summary)}</p></div>",
        unsafe_allow_html=True,
    )


def _flush_notices(notices: list[Notice]) -> None:
    for notice in notices:
        icon = "⚠️" if notice.level == "error" else "ℹ️"
        st.toast(f"**{notice.title}**  \n{notice.description}", icon=icon)
    notices.clear()


def _run(action: Coroutine[Any, Any, None], card_slot: Any, summary_slot: Any) -> None:
    """Run a session action, then wait for the summary it triggered."""

    async def drive() -> None:
        with st.spinner(t("loading_weather")):
            await action
        _render_card(card_slot, state)
        if state.loading_ai_summary:
            with summary_slot.container(), st.spinner(t("loading_summary")):
                await session.settle()

    asyncio.run(drive())


# --- Header ---
st.markdown(
    f"<p class='app-title'>{t('page_title')}</p><p class='app-tagline'>{t('tagline')}</p>",
    unsafe_allow_html=True,
)

# --- Search bar ---
with st.form("search", border=False):
    col1, col2 = st.columns([5, 1])
    with col1:
        city = st.text_input(
            t("search_placeholder"),
            value=state.search_text,
            placeholder=t("search_placeholder"),
            label_visibility="collapsed",
        )
    with col2:
        submitted = st.form_submit_button(t("btn_search"), use_container_width=True)

card_slot = st.empty()
summary_slot = st.empty()

# --- Actions ---
# Search always wins over the startup location lookup.
if submitted:
    st.session_state.started = True
    _run(session.search(city), card_slot, summary_slot)
elif not st.session_state.started:
    # On the first run the JS calls return None; the rerun triggered by
    # streamlit_js_eval fills them in.
    if "geo_supported" not in st.session_state:
        _supported = streamlit_js_eval(
            js_expressions="'geolocation' in navigator", key="_geo_support", height=0
        )
        if _supported is not None:
            st.session_state.geo_supported = bool(_supported)
    if "geo_supported" in st.session_state:
        _position = get_geolocation() if st.session_state.geo_supported else None
        if not st.session_state.geo_supported or _position is not None:
            st.session_state.started = True
            geolocator = BrowserGeolocator(st.session_state.geo_supported, _position)
            _run(session.start(geolocator), card_slot, summary_slot)

# --- Render ---
_flush_notices(st.session_state.notices)
_inject_css(classify(state.snapshot))
_render_card(card_slot, state)
_render_summary(summary_slot, state)
