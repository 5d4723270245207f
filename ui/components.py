import streamlit as st

from core.i18n import t
from core.utils import format_currency

NOTICE_ICONS = {"error": "❌", "warning": "⚠️", "success": "✅", "info": "ℹ️"}


def render_notices(controller):
    """Show and clear the notices the controller accumulated since the last run."""
    for notice in controller.drain_notices():
        text = notice.message
        if notice.description:
            text = f"{text}: {notice.description}"
        show = getattr(st, notice.level, st.info)
        show(text, icon=NOTICE_ICONS.get(notice.level))


def money_metric(col, label_key: str, amount, lang: str, help=None):
    col.metric(t(label_key, lang), format_currency(amount), help=help)


def option_index(options, current) -> int:
    try:
        return options.index(current)
    except ValueError:
        return 0
