import logging
import re
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)

AUTOMATED_AGENT_PATTERN = re.compile(
    r"bot|crawl|spider|scrape|wget|curl|python|headless|phantom|selenium",
    re.IGNORECASE,
)


def log_request(method: str, path: str) -> None:
    """Simple request logging"""
    logger.info(f"{method} {path}")


def log_error(error: str, method: str, path: str) -> None:
    """Simple error logging"""
    logger.error(f"Error in {method} {path}: {error}")


def is_automated_client(user_agent: Optional[str]) -> bool:
    return bool(user_agent) and AUTOMATED_AGENT_PATTERN.search(user_agent) is not None


def client_ip(request: Request) -> str:
    """Best guess at the caller's address behind proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"
