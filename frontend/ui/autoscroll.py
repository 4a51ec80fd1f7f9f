import streamlit.components.v1 as components

NEAR_BOTTOM_THRESHOLD_PX = 100


def is_near_bottom(scroll_top: float, scroll_height: float, client_height: float,
                   threshold: int = NEAR_BOTTOM_THRESHOLD_PX) -> bool:
    return scroll_height - scroll_top - client_height < threshold


def should_autoscroll(newest_role: str, was_near_bottom: bool) -> bool:
    """A new user message always scrolls; assistant text only if the reader was at the bottom."""
    if newest_role == "user":
        return True
    return was_near_bottom


def scroll_script(force: bool, threshold: int = NEAR_BOTTOM_THRESHOLD_PX) -> str:
    """Browser-side version of ``should_autoscroll``; the viewport is only known there."""
    return f"""
    <script>
    const doc = window.parent.document;
    const app = doc.querySelector('[data-testid="stAppViewContainer"]') || doc.scrollingElement;
    if (app) {{
      const nearBottom = app.scrollHeight - app.scrollTop - app.clientHeight < {int(threshold)};
      if ({"true" if force else "false"} || nearBottom) {{
        app.scrollTo({{ top: app.scrollHeight, behavior: "smooth" }});
      }}
    }}
    </script>
    """


def autoscroll(newest_role: str) -> None:
    components.html(scroll_script(force=newest_role == "user"), height=0)
