from typing import Dict, Iterator, List, Optional
from urllib.parse import quote

import requests

from config import API_BASE_URL, USER_AGENT

API_PREFIX = f"{API_BASE_URL}/api/v1"
HEADERS = {"User-Agent": USER_AGENT}


class ChatRequestError(RuntimeError):
    pass


def _get(path: str, params: Optional[dict] = None, timeout: int = 10):
    response = requests.get(
        f"{API_PREFIX}{path}",
        params=params,
        headers=HEADERS,
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()


def search_papers(
    query: Optional[str] = None,
    decade: Optional[int] = None,
    entity: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
):
    params = {
        "q": query,
        "decade": decade,
        "entity": entity,
        "limit": limit,
        "offset": offset,
    }
    return _get("/papers", params={k: v for k, v in params.items() if v is not None})


def get_paper(paper_id: str):
    return _get(f"/papers/{quote(str(paper_id), safe='')}")


def get_recent_papers(limit: int = 4):
    return _get("/papers/recent", params={"limit": limit})


def get_overview():
    return _get("/analytics/overview")


def get_papers_per_year():
    return _get("/analytics/years")["years"]


def get_papers_per_decade():
    return _get("/analytics/decades")["decades"]


def get_topics(limit: int = 20):
    return _get("/analytics/topics", params={"limit": limit})


def get_topic_papers(entity: str, limit: int = 10):
    return _get(f"/analytics/topics/{quote(entity, safe='')}/papers", params={"limit": limit})


def stream_chat(messages: List[Dict[str, str]], timeout: int = 120) -> Iterator[bytes]:
    """POST the conversation and yield the raw event-stream bytes as they arrive."""
    with requests.post(
        f"{API_PREFIX}/chat",
        json={"messages": messages},
        headers={**HEADERS, "Accept": "text/event-stream"},
        stream=True,
        timeout=timeout,
    ) as response:
        if not response.ok:
            try:
                detail = response.json().get("error", response.text)
            except ValueError:
                detail = response.text
            raise ChatRequestError(f"{response.status_code}: {detail}")

        for chunk in response.iter_content(chunk_size=None):
            if chunk:
                yield chunk
