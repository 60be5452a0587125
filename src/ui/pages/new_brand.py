import time

import streamlit as st

from config import settings
from services.creation_wizard import STEPS, CreationWizard, WizardStep
from ui.state import drop_wizard, get_wizard, run

RETURN_TO_LIST_KEY = "return_to_list"


def show():
    wizard = get_wizard()

    st.title("➕ New Brand")
    st.write("Register a new brand following the guided process")

    _show_progress(wizard)

    st.markdown("---")
    st.header(wizard.info.title)
    st.write(wizard.info.description)

    if wizard.step == WizardStep.BRAND:
        value = st.text_input(
            "Brand to register",
            value=wizard.form["brand_name"],
            placeholder="Enter the brand name",
        )
        wizard.set_field("brand_name", value)
    elif wizard.step == WizardStep.OWNER:
        value = st.text_input(
            "Brand owner",
            value=wizard.form["owner_name"],
            placeholder="Enter the owner's name",
        )
        wizard.set_field("owner_name", value)
    else:
        with st.container(border=True):
            st.markdown("**Information to register**")
            st.markdown(f"Brand to register: **{wizard.form['brand_name']}**")
            st.markdown(f"Brand owner: **{wizard.form['owner_name']}**")

    if wizard.error_message:
        st.error(f"❌ {wizard.error_message}")

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Back", disabled=wizard.step == WizardStep.BRAND):
            wizard.prev_step()
            st.rerun()
    with col2:
        if wizard.step < WizardStep.SUMMARY:
            if st.button("Continue", type="primary", disabled=not wizard.can_continue()):
                wizard.next_step()
                st.rerun()
        elif st.button(
            "Creating..." if wizard.is_submitting else "Create brand",
            type="primary",
            disabled=wizard.is_submitting or not wizard.can_continue(),
        ):
            with st.spinner("Creating brand..."):
                result = run(wizard.submit())
            if result is not None and result.ok:
                st.success("✅ Brand created successfully!")
                time.sleep(settings.create_redirect_delay_seconds)
                drop_wizard()
                st.session_state[RETURN_TO_LIST_KEY] = True
            st.rerun()


def _show_progress(wizard: CreationWizard):
    cols = st.columns(len(STEPS))
    for col, info in zip(cols, STEPS):
        with col:
            if wizard.step > info.step:
                marker = "✅"
            elif wizard.step == info.step:
                marker = "🔵"
            else:
                marker = "⚪"
            st.markdown(f"{marker} **{info.step.value}. {info.title}**")
