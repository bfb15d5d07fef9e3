"""Token-challenge resolver for gated download hosts.

Gated hosts hide the landing-page URL behind a two-form handshake and a
script-set cookie:

    GET  url                      -> form #landing (_wp_http, action)
    POST action  _wp_http         -> form #landing (_wp_http2, token, action)
    POST action  _wp_http2+token  -> inline script: s_343('name', 'value')
                                     and c.setAttribute("href", "/path")
    GET  origin + /path  (cookie) -> <meta http-equiv="refresh" url=...>

Any missing piece aborts the chain with ``None``.  The inline-script
patterns are inherently brittle; no alternate patterns are guessed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import httpx
import structlog
from bs4 import BeautifulSoup

from modstream.infrastructure.common.html_selectors import attr, parse_html
from modstream.infrastructure.common.http import safe_fetch

log = structlog.get_logger(__name__)

_HOP = "token_challenge"
_FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}

_COOKIE_RE = re.compile(r"s_343\('([^']+)',\s*'([^']+)'")
_LINK_RE = re.compile(r'c\.setAttribute\("href",\s*"([^"]+)"\)')
_REFRESH_URL_RE = re.compile(r"url=(.*)", re.IGNORECASE)


@dataclass(frozen=True)
class LandingForm:
    """Fields of a ``#landing`` form (missing inputs are empty strings)."""

    action: str
    fields: dict[str, str]


def parse_landing_form(soup: BeautifulSoup, *names: str) -> LandingForm | None:
    form = soup.select_one("#landing")
    if form is None:
        return None
    fields = {}
    for name in names:
        field = form.select_one(f'input[name="{name}"]')
        fields[name] = attr(field, "value") if field is not None else ""
    return LandingForm(action=attr(form, "action"), fields=fields)


def extract_script_cookie(html: str) -> tuple[str, str] | None:
    m = _COOKIE_RE.search(html)
    if not m:
        return None
    name, value = m.group(1).strip(), m.group(2).strip()
    return (name, value) if name and value else None


def extract_script_link(html: str) -> str | None:
    m = _LINK_RE.search(html)
    if not m:
        return None
    return m.group(1).strip() or None


def extract_meta_refresh(soup: BeautifulSoup) -> str | None:
    """Target of a ``<meta http-equiv="refresh">`` tag, quotes stripped."""
    meta = soup.select_one('meta[http-equiv="refresh"]')
    if meta is None:
        return None
    m = _REFRESH_URL_RE.search(attr(meta, "content"))
    if not m:
        return None
    target = m.group(1).replace('"', "").replace("'", "").strip()
    return target or None


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class TokenChallengeResolver:
    """Runs the gated-host handshake and returns the revealed URL."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def resolve(self, url: str) -> str | None:
        """Return the landing-page URL behind *url*, or None."""
        log.debug("token_challenge_started", url=url)

        # Step 1: landing form
        resp = await safe_fetch(self._http, url, hop=_HOP)
        if resp is None:
            return None
        first = parse_landing_form(parse_html(resp.text), "_wp_http")
        if first is None or not first.action or not first.fields["_wp_http"]:
            log.warning("token_challenge_landing_form_missing", url=url)
            return None

        # Step 2: submit first token
        step1 = await safe_fetch(
            self._http,
            first.action,
            hop=_HOP,
            method="POST",
            headers={**_FORM_HEADERS, "Referer": url},
            data=first.fields,
        )
        if step1 is None:
            return None

        # Step 3: verification form
        second = parse_landing_form(parse_html(step1.text), "_wp_http2", "token")
        if second is None or not second.action:
            log.warning("token_challenge_verification_form_missing", url=url)
            return None

        # Step 4: submit verification
        step2 = await safe_fetch(
            self._http,
            second.action,
            hop=_HOP,
            method="POST",
            headers={**_FORM_HEADERS, "Referer": str(step1.url)},
            data=second.fields,
        )
        if step2 is None:
            return None

        # Step 5: script-embedded cookie and link
        cookie = extract_script_cookie(step2.text)
        link_path = extract_script_link(step2.text)
        if cookie is None or link_path is None:
            log.warning(
                "token_challenge_script_missing",
                url=url,
                cookie_found=cookie is not None,
                link_found=link_path is not None,
            )
            return None

        # Step 6: follow the script link with the cookie
        final_url = urljoin(_origin(url), link_path)
        cookie_name, cookie_value = cookie
        step3 = await safe_fetch(
            self._http,
            final_url,
            hop=_HOP,
            headers={
                "Referer": str(step2.url),
                "Cookie": f"{cookie_name}={cookie_value}",
            },
        )
        if step3 is None:
            return None

        # Step 7: meta refresh
        target = extract_meta_refresh(parse_html(step3.text))
        if target is None:
            log.warning("token_challenge_meta_refresh_missing", url=final_url)
            return None

        log.info("token_challenge_resolved", url=url, target=target)
        return target
