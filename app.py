import logging
import streamlit as st

from pages.ui_elements import init_session, render_sidebar

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')

st.set_page_config(
    page_title='Parent/child integrity',
    page_icon=':link:',
    layout='wide',
)

# Initialise the session if required
init_session(st.session_state)

render_sidebar()
