"""BYD catalog Streamlit UI. Separate from byd_catalog; talks to the backend APIs."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow importing ui.lib when running as: streamlit run ui/app.py
if str(Path(__file__).resolve().parent) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parent))

import streamlit as st

from lib.api import (
    ApiError,
    add_model,
    add_tech,
    get_base_url,
    get_graph,
    get_graph_image,
    get_model,
    list_models,
    list_series,
    list_techs,
    ready,
    search_models,
    stats,
)

ENERGY_LABELS = {"EV": "Battery electric", "PHEV": "Plug-in hybrid"}


def render_models_table(models: list[dict]) -> None:
    if not models:
        st.info("No models.")
        return
    st.dataframe(
        [
            {
                "ID": m["model_id"],
                "Model": m["model_name"],
                "Series": m["series_name"],
                "Price (10k CNY)": m["price"],
                "Range (km)": m["range_km"],
                "Energy": m["energy_type"],
                "Body": m["body_type"],
                "Seats": m["seats"],
                "Technologies": ", ".join(m["techs"]),
            }
            for m in models
        ],
        use_container_width=True,
        hide_index=True,
    )


# Page config
st.set_page_config(
    page_title="BYD Catalog",
    page_icon="🚗",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Sidebar navigation
st.sidebar.title("BYD Catalog")
st.sidebar.caption("Series · models · technologies")
nav = st.sidebar.radio(
    "Section",
    ["Models", "Search", "Series & techs", "Stats", "Graph", "Add"],
    label_visibility="collapsed",
)

api_url = st.sidebar.text_input(
    "API base URL",
    value=get_base_url(),
    help="Backend API root, e.g. http://localhost:8000",
)
if api_url:
    import os
    os.environ["BYD_CATALOG_API_URL"] = api_url.rstrip("/")

try:
    series_list = list_series()
except Exception as e:
    st.error(f"Backend unavailable: {e}")
    st.stop()
series_names = {s["series_id"]: s["series_name"] for s in series_list}

# ----- Models tab -----
if nav == "Models":
    st.header("Models")
    col1, col2 = st.columns(2)
    with col1:
        series_choice = st.selectbox(
            "Series",
            options=[None, *series_names],
            format_func=lambda sid: "All" if sid is None else series_names[sid],
        )
    with col2:
        energy_choice = st.selectbox("Energy type", options=["", "EV", "PHEV"],
                                     format_func=lambda e: e or "All")

    models = list_models(series_id=series_choice, energy_type=energy_choice or None)
    render_models_table(models)
    st.caption(f"{len(models)} models, cheapest first")

    model_id = st.number_input("Model ID for details", min_value=0, step=1, value=0)
    if model_id:
        try:
            detail = get_model(int(model_id))
        except ApiError as e:
            st.warning(str(e))
        else:
            st.subheader(detail["model_name"])
            st.markdown(
                f"**Series:** {detail['series_name']}  \n"
                f"**Price:** {detail['price']:.2f} (10k CNY)  \n"
                f"**Range:** {int(detail['range_km'])} km  \n"
                f"**Energy:** {ENERGY_LABELS.get(detail['energy_type'], detail['energy_type'])}  \n"
                f"**Body:** {detail['body_type']} · {detail['seats']} seats · {detail['launch_year']}"
            )
            st.markdown("**Technologies:** " + (", ".join(detail["techs"]) or "none"))

# ----- Search tab -----
elif nav == "Search":
    st.header("Search")
    keyword = st.text_input("Keyword", placeholder="Model, series or technology name")
    if keyword:
        render_models_table(search_models(keyword))

# ----- Series & techs tab -----
elif nav == "Series & techs":
    st.header("Series")
    st.dataframe(series_list, use_container_width=True, hide_index=True)
    st.header("Technologies")
    st.dataframe(list_techs(), use_container_width=True, hide_index=True)

# ----- Stats tab -----
elif nav == "Stats":
    st.header("Stats")
    s = stats()
    c1, c2, c3 = st.columns(3)
    c1.metric("Series", s["series_count"])
    c2.metric("Models", s["model_count"])
    c3.metric("Technologies", s["tech_count"])
    c1.metric("EV models", s["ev_count"])
    c2.metric("Hybrid models", s["phev_count"])
    if s["min_price"] is not None:
        c3.metric("Price range (10k)", f"{s['min_price']:.2f} – {s['max_price']:.2f}")
    st.subheader("Models per series")
    st.bar_chart(s["models_per_series"])
    st.caption(f"Graph: {s['node_count']} nodes · {s['edge_count']} edges")
    with st.expander("Readiness"):
        st.json(ready())

# ----- Graph tab -----
elif nav == "Graph":
    st.header("Knowledge graph")
    try:
        graph_data = get_graph()
        st.caption(
            f"Nodes: **{graph_data['node_count']}** · Edges: **{graph_data['edge_count']}**"
        )
        with st.spinner("Rendering graph…"):
            image_bytes = get_graph_image(format="png")
        st.image(image_bytes, use_container_width=True)
    except Exception as e:
        st.error(f"Failed to load graph: {e}")

# ----- Add tab -----
elif nav == "Add":
    st.header("Add model")
    techs = list_techs()
    tech_names = {t["tech_id"]: t["tech_name"] for t in techs}

    with st.form("model_form"):
        model_name = st.text_input("Model name")
        series_id = st.selectbox("Series", options=list(series_names),
                                 format_func=lambda sid: series_names[sid])
        price = st.number_input("Guide price (10k CNY)", min_value=0.0, step=0.1)
        range_km = st.number_input("Range (km)", min_value=0.0, step=10.0)
        energy_type = st.selectbox("Energy type", options=["EV", "PHEV"])
        body_type = st.text_input("Body type", value="SUV")
        seats = st.number_input("Seats", min_value=1, max_value=9, value=5)
        launch_year = st.text_input("Launch year", value="2024")
        tech_ids = st.multiselect("Technologies", options=list(tech_names),
                                  format_func=lambda tid: tech_names[tid])
        submitted = st.form_submit_button("Add model")

    if submitted:
        try:
            created = add_model({
                "model_name": model_name.strip(),
                "series_id": series_id,
                "price": price,
                "range_km": range_km,
                "energy_type": energy_type,
                "body_type": body_type.strip(),
                "seats": int(seats),
                "launch_year": launch_year.strip(),
                "tech_ids": tech_ids,
            })
        except ApiError as e:
            st.error(f"{e.kind or 'Error'}: {e}")
        else:
            st.success(f"Added {created['model_name']} (ID {created['model_id']})")

    st.header("Add technology")
    with st.form("tech_form"):
        tech_name = st.text_input("Technology name")
        intro = st.text_area("Introduction")
        tech_submitted = st.form_submit_button("Add technology")

    if tech_submitted:
        try:
            created = add_tech(tech_name.strip(), intro.strip())
        except ApiError as e:
            st.error(f"{e.kind or 'Error'}: {e}")
        else:
            st.success(f"Added {created['tech_name']} (ID {created['tech_id']})")
