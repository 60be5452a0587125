import asyncio

import streamlit as st

from services.async_utils import run_async
from services.brands_view import BrandsViewController
from services.creation_wizard import CreationWizard

CONTROLLER_KEY = "brands_controller"
WIZARD_KEY = "creation_wizard"
LOOP_KEY = "event_loop"


def get_loop() -> asyncio.AbstractEventLoop:
    """Event loop owned by this browser session; its timers and tasks outlive reruns."""
    loop = st.session_state.get(LOOP_KEY)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        st.session_state[LOOP_KEY] = loop
    return loop


def run(coro):
    return run_async(coro, get_loop())


def get_controller() -> BrandsViewController:
    if CONTROLLER_KEY not in st.session_state:
        st.session_state[CONTROLLER_KEY] = BrandsViewController()
    return st.session_state[CONTROLLER_KEY]


def get_wizard() -> CreationWizard:
    if WIZARD_KEY not in st.session_state:
        st.session_state[WIZARD_KEY] = get_controller().new_wizard()
    return st.session_state[WIZARD_KEY]


def drop_wizard() -> None:
    st.session_state.pop(WIZARD_KEY, None)
