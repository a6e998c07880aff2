"""
Streamlit Dashboard for the tick aggregator.

Polls the query API and visualizes per-symbol statistics and recent prices.

    streamlit run tick_aggregator/dashboard.py
"""

import asyncio
import time
from typing import Dict, List, Tuple

import aiohttp
import pandas as pd
import plotly.express as px
import streamlit as st

AGGREGATE_COLUMNS = ["Symbol", "Ticks", "Average", "Latest", "Total"]
HISTORY_COLUMNS = ["Symbol", "Time", "Price"]


def aggregates_frame(payload: Dict[str, dict]) -> pd.DataFrame:
    """One row per symbol, busiest symbols first."""
    rows = [
        {
            "Symbol": symbol,
            "Ticks": stats["count"],
            "Average": stats["average"],
            "Latest": stats["latest"],
            "Total": stats["total"],
        }
        for symbol, stats in payload.items()
    ]
    if not rows:
        return pd.DataFrame(columns=AGGREGATE_COLUMNS)
    
    df = pd.DataFrame(rows, columns=AGGREGATE_COLUMNS)
    return df.sort_values(["Ticks", "Symbol"], ascending=[False, True]).reset_index(drop=True)


def history_frame(payload: Dict[str, List[dict]], last_n: int = 100) -> pd.DataFrame:
    """Long-format price history, keeping the last `last_n` ticks per symbol."""
    rows = [
        {"Symbol": symbol, "Time": tick["timestamp"], "Price": tick["price"]}
        for symbol, history in payload.items()
        for tick in history[-last_n:]
    ]
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    
    df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)
    df["Time"] = pd.to_datetime(df["Time"], utc=True, format="ISO8601", errors="coerce")
    # Timestamps are free text on the wire; unparseable ones are not charted
    return df.dropna(subset=["Time"]).reset_index(drop=True)


async def fetch_state(base_url: str, timeout_s: float = 5.0) -> Tuple[dict, dict, dict]:
    """Fetch aggregates, raw history and health from the query API."""
    timeout = aiohttp.ClientTimeout(total=timeout_s)
    async with aiohttp.ClientSession(base_url=base_url, timeout=timeout) as session:
        async with session.get("/aggregate") as resp:
            resp.raise_for_status()
            aggregates = await resp.json()
        async with session.get("/raw") as resp:
            resp.raise_for_status()
            raw = await resp.json()
        async with session.get("/health") as resp:
            # 503 still carries the ingestion status
            health = await resp.json()
    return aggregates, raw, health


def main():
    st.set_page_config(
        page_title="Tick Aggregator",
        page_icon="📈",
        layout="wide",
    )
    
    st.title("📈 Tick Aggregator Dashboard")
    
    with st.sidebar:
        st.header("🎛️ Settings")
        base_url = st.text_input("Query API", value="http://127.0.0.1:3002")
        last_n = st.slider("Ticks per symbol in chart", min_value=10, max_value=500, value=100)
        refresh_s = st.slider("Refresh interval (s)", min_value=1, max_value=10, value=2)
    
    try:
        aggregates, raw, health = asyncio.run(fetch_state(base_url))
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        st.error(f"Cannot reach query API at {base_url}: {e}")
        time.sleep(refresh_s)
        st.rerun()
        return
    
    ingestion = health.get("ingestion", {})
    stats_df = aggregates_frame(aggregates)
    
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Ingestion", ingestion.get("state", "unknown"))
    with col2:
        st.metric("Symbols", len(health.get("symbols", aggregates)))
    with col3:
        st.metric("Recorded Ticks", f"{ingestion.get('recorded', int(stats_df['Ticks'].sum())):,}")
    with col4:
        st.metric("Dropped Payloads", f"{ingestion.get('dropped', 0):,}")
    
    if ingestion.get("last_error"):
        st.warning(f"Ingestion stopped: {ingestion['last_error']}")
    
    col1, col2 = st.columns(2)
    
    with col1:
        st.subheader("📊 Symbol Statistics")
        if not stats_df.empty:
            st.dataframe(stats_df, width='stretch', hide_index=True)
            fig = px.bar(
                stats_df,
                x="Symbol",
                y="Ticks",
                color="Average",
                title="Ticks per Symbol",
                color_continuous_scale="Viridis",
            )
            st.plotly_chart(fig, width='stretch')
        else:
            st.info("No ticks aggregated yet. Start the producer.")
    
    with col2:
        st.subheader("💹 Price Trends")
        history_df = history_frame(raw, last_n)
        if not history_df.empty:
            fig = px.line(
                history_df,
                x="Time",
                y="Price",
                color="Symbol",
                title=f"Last {last_n} Prices per Symbol",
            )
            fig.update_layout(height=400)
            st.plotly_chart(fig, width='stretch')
        else:
            st.info("No price data yet.")
    
    st.markdown("---")
    st.caption(f"Dashboard auto-refreshes every {refresh_s}s")
    
    time.sleep(refresh_s)
    st.rerun()


if __name__ == "__main__":
    main()
