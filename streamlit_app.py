import os
import pandas as pd
import requests
import streamlit as st
import altair as alt

# Local imports
from activity_tracker.config import (
    DEFAULT_CACHE_DIR,
    DEFAULT_LEAGUES_FILE,
    DEFAULT_RESULTS_PATH,
    DISPLAY_LIMIT,
    load_league_ids,
    parse_league_input,
)
from activity_tracker.errors import DirectoryUnavailable
from activity_tracker.player_cache import FileSnapshotStore, PlayerDirectoryCache
from activity_tracker.sleeper_api import SleeperAPIError, SleeperClient, resolve_max_week
from activity_tracker.summary import build_summaries, load_results

DEFAULT_LEAGUES = os.environ.get("AT_LEAGUES", "")

st.set_page_config(page_title="Most Active Players", page_icon="🔁", layout="wide")
st.markdown(
    """
    <style>
    .stDataFrame table { font-size: 0.92rem; }
    .block-container { padding-top: 1.2rem; }
    </style>
    """,
    unsafe_allow_html=True,
)
st.title("Most Active Players")
status = st.empty()

with st.sidebar:
    st.header("Inputs")
    leagues_raw = st.text_input("League ids (comma separated)", value=DEFAULT_LEAGUES,
                                help=f"Leave empty to use {DEFAULT_LEAGUES_FILE}")
    cache_dir = st.text_input("Cache dir", value=DEFAULT_CACHE_DIR)
    allow_raw_ids = st.checkbox("Show raw ids if player names are unavailable", value=False)
    st.divider()
    go = st.button("Fetch & Compare", type="primary")
    use_saved = st.button("Load saved results")
    if st.button("Refresh player cache"):
        PlayerDirectoryCache(SleeperClient().get_players, FileSnapshotStore(cache_dir)).invalidate()
        st.caption("Player cache cleared; next fetch reloads it.")


def _leagues_to_fetch() -> list[str] | None:
    if leagues_raw.strip():
        return parse_league_input(leagues_raw)
    status.info(f"No league ids in the input. Trying {DEFAULT_LEAGUES_FILE}...")
    try:
        return load_league_ids(DEFAULT_LEAGUES_FILE)
    except (OSError, ValueError):
        status.warning(f"Paste league ids into the sidebar or create {DEFAULT_LEAGUES_FILE}.")
        return None


def fetch_live():
    leagues = _leagues_to_fetch()
    if not leagues:
        return None
    client = SleeperClient()
    status.info("Fetching current NFL state to determine week...")
    max_week = resolve_max_week(client.get_state())
    status.info(f"Pulling transactions for weeks 1 → {max_week}. This may take a bit.")
    players = PlayerDirectoryCache(client.get_players, FileSnapshotStore(cache_dir) if cache_dir else None)
    with st.spinner("Loading transactions..."):
        return build_summaries(client, leagues, max_week, players, allow_raw_ids=allow_raw_ids)


def render(results):
    for league_id, res in results.items():
        st.subheader(f"League {league_id}")
        if not res.ok:
            st.error(f"Could not build this league: {res.reason}")
            continue
        if res.computed_at:
            st.caption(f"Computed at {res.computed_at}")
        if res.failed_weeks:
            st.warning(f"Weeks skipped after fetch errors: {', '.join(str(w) for w in res.failed_weeks)}")
        df = pd.DataFrame(
            [{"Player": e.name, "Score": e.score, "Adds": e.adds, "Trades": e.trades, "Drops": e.drops}
             for e in res.entries[:DISPLAY_LIMIT]],
            columns=["Player", "Score", "Adds", "Trades", "Drops"],
        )
        if df.empty:
            st.caption("No player transactions yet.")
            continue
        top = df.head(15)
        chart = (
            alt.Chart(top)
            .mark_bar()
            .encode(
                x=alt.X("Score:Q", title="Score"),
                y=alt.Y("Player:N", sort="-x", title=None),
                tooltip=["Player:N", "Score:Q", "Adds:Q", "Trades:Q", "Drops:Q"],
            )
            .properties(height=22 * len(top))
        )
        st.altair_chart(chart, use_container_width=True)
        st.dataframe(df, use_container_width=True, hide_index=True)


results = None
if use_saved:
    status.info(f"Trying to load {DEFAULT_RESULTS_PATH}...")
    try:
        results = load_results(DEFAULT_RESULTS_PATH)
        status.success(f"Loaded {DEFAULT_RESULTS_PATH}.")
    except (OSError, ValueError):
        status.warning(f"No usable {DEFAULT_RESULTS_PATH} found. Try Fetch & Compare or run `activity-tracker update`.")
elif go:
    try:
        results = fetch_live()
        if results is not None:
            status.success("Done. Scores are adds × 1 + trades × 3; drops are shown but not scored.")
    except DirectoryUnavailable as e:
        status.error(f"Player names unavailable: {e}")
    except SleeperAPIError as e:
        status.error(f"Sleeper API error: {e}")
    except requests.RequestException as e:
        status.error(f"Network error while talking to the Sleeper API: {e}")

if results:
    render(results)
