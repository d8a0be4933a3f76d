from typing import List
import polars as pl
import streamlit as st
from parentchild.settings import Settings
from parentchild.sql_child import Child
from parentchild.sql_interface import DataInterface
from parentchild.sql_parent import Parent
from parentchild.walkthrough import WalkthroughStep

def init_session(session_state: 'st.session_state', settings: Settings=None):
    """ Test the current session and add keys as required, initialising to expected
        default values.

        Arguments:
        session_state -- the current st.session_state object for the streamlit instance.
        settings      -- (optional) the Settings to use, read from the environment by default
    """

    # Assume that if one key is missing, all will be.
    if not 'db_connection' in session_state:
        session_state.settings = settings or Settings()
        session_state.db_connection = DataInterface.open_connection(
            session_state.settings.db_path,
            enforce_integrity=session_state.settings.enforce_integrity,
            echo=session_state.settings.echo,
            create=True,
        )
        DataInterface.create_blank_database(session_state.db_connection)

        # Initialise values for the walkthrough views
        session_state.enforcement_steps = None
        session_state.cascade_steps = None

#region Reusable display elements

def render_sidebar():
    """ Draw the sidebar for the dashboard, and customise the naming of each page.

        Arguments:
        None
    """

    with st.sidebar:
        st.markdown('---')
        st.markdown('## Select a walkthrough')
        st.page_link('pages/enforcement_walkthrough.py', label='Foreign key enforcement')
        st.page_link('pages/cascade_walkthrough.py', label='Cascading deletes')

def render_steps(steps: List[WalkthroughStep]) -> None:
    """ Draw the outcome of each walkthrough step as a table, with the row counts observed in
        the store after the step completed.

        Arguments:
        steps -- the steps returned by one of the walkthrough functions
    """

    steps_df = pl.DataFrame([
        {
            'Step': step.description,
            'Outcome': 'Succeeded' if step.succeeded else 'Failed',
            'Parent rows': step.parent_count,
            'Child rows': step.child_count,
            'Error': step.error or '',
        }
        for step in steps
    ])

    st.dataframe(steps_df, hide_index=True, use_container_width=True)

def render_tables(session_state: 'st.session_state') -> None:
    """ Draw the current content of the parent and child tables side by side, flagging any child
        records which no longer reference a parent.

        Arguments:
        session_state -- the current st.session_state object for the streamlit instance.
    """

    engine = session_state.db_connection

    parents_df = pl.DataFrame(
        [{'uid': p.uid, 'parent_name': p.parent_name} for p in Parent.select_all(engine)],
        schema={'uid': pl.Int64, 'parent_name': pl.Utf8},
    )

    col1, col2 = st.columns(2)

    with col1:
        st.markdown('**parent**')
        st.dataframe(parents_df, hide_index=True, use_container_width=True)

    with col2:
        st.markdown('**child**')
        st.dataframe(Child.select_all(engine), hide_index=True, use_container_width=True)

    dangling_df = Child.select_dangling(engine)
    if dangling_df.height:
        st.warning(f"{dangling_df.height} child record(s) reference a parent that does not exist.")

#endregion
