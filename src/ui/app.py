import streamlit as st

from config import settings
from log_config import setup_logging

setup_logging()

st.set_page_config(
    page_title=settings.app_name,
    page_icon="🏷️",
    layout="wide",
)

PAGES = ["Brands", "New Brand"]

if st.session_state.pop("return_to_list", False):
    st.session_state["page"] = "Brands"

page = st.sidebar.radio("Navigate", PAGES, key="page")

if page == "Brands":
    from ui.pages import brands
    brands.show()
elif page == "New Brand":
    from ui.pages import new_brand
    new_brand.show()
