import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Optional

import aiohttp
from yarl import URL

logger = logging.getLogger(__name__)

DEFAULT_METADATA_URL = "http://rancher-metadata.rancher.internal/latest/self/host/name"
DEFAULT_METADATA_TIMEOUT = 5.0


@dataclass(frozen=True)
class ProcessIdentity:
    hostname: str = ""


def local_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError as e:
        logger.warning("unable to get local hostname: %s", e)
        return ""


async def fetch_metadata_hostname(
    session: aiohttp.ClientSession, url: URL, timeout: float
) -> str:
    try:
        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as resp:
            if resp.status != 200:
                logger.warning("metadata endpoint %s returned %d", url, resp.status)
                return ""
            return (await resp.text()).strip()
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning("unable to query metadata endpoint %s: %r", url, e)
        return ""


async def resolve_identity(
    metadata_url: str = DEFAULT_METADATA_URL,
    timeout: float = DEFAULT_METADATA_TIMEOUT,
    session: Optional[aiohttp.ClientSession] = None,
) -> ProcessIdentity:
    """
    Resolve the name messages are tagged with when a container carries no
    name of its own. The platform metadata endpoint wins, then the OS
    hostname, then the empty string. Never raises.
    """
    url = URL(metadata_url)

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            hostname = await fetch_metadata_hostname(own_session, url, timeout)
    else:
        hostname = await fetch_metadata_hostname(session, url, timeout)

    if hostname:
        logger.info("resolved hostname %r from metadata endpoint", hostname)
        return ProcessIdentity(hostname=hostname)

    hostname = local_hostname()
    logger.info("resolved hostname %r from local system", hostname)
    return ProcessIdentity(hostname=hostname)
