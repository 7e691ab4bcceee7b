from __future__ import annotations

from typing import Any

import streamlit as st

from .auth_service import AuthService, AuthUser


SESSION_KEY = "auth_session"



def bootstrap_auth_session_from_query(svc: AuthService) -> str | None:
    query = dict(st.query_params)

    # Values can be list-like in some Streamlit versions
    qp: dict[str, Any] = {}
    for k, v in query.items():
        if isinstance(v, (list, tuple)) and v:
            qp[k] = v[0]
        else:
            qp[k] = v

    if "code" not in qp and ("token_hash" not in qp or "type" not in qp):
        return None

    try:
        session = svc.consume_magic_link(qp)
        if session:
            st.session_state[SESSION_KEY] = session
            for key in ("code", "token_hash", "type", "next"):
                if key in st.query_params:
                    del st.query_params[key]
            return "Signed in successfully."
    except Exception as exc:
        return f"Sign-in verification failed: {exc}"
    return None



def restore_auth_session(svc: AuthService) -> None:
    session = st.session_state.get(SESSION_KEY) or {}
    access = session.get("access_token")
    refresh = session.get("refresh_token")
    if access and refresh:
        try:
            svc.set_session_tokens(access, refresh)
        except Exception:
            st.session_state.pop(SESSION_KEY, None)



def get_authenticated_user(svc: AuthService) -> AuthUser | None:
    restore_auth_session(svc)
    try:
        return svc.current_user()
    except Exception:
        return None



def sign_out_user(svc: AuthService) -> None:
    try:
        svc.sign_out()
    finally:
        st.session_state.pop(SESSION_KEY, None)
