# redirector/useragent.py

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from user_agents import parse as parse_ua

# First parenthesised section, e.g. "(iPhone; CPU iPhone OS 8_0 like Mac OS X)"
COMMENT_PATTERN = re.compile(r"\(([^)]*)\)")

# product/version pairs outside the comments
PRODUCT_PATTERN = re.compile(r"([A-Za-z][\w.\-]*)/([\w.\-]+)")

GECKO_RV_PATTERN = re.compile(r"rv:([\w.]+)")

IOS_DEVICES = ("iPhone", "iPad", "iPod", "iPod touch")


@dataclass(frozen=True)
class UserAgentFacts:
    """Read-only view over a parsed user agent"""

    raw_ua: str
    platform: str
    os: str
    mobile_flag: bool

    # Diagnostic only, never used for classification
    bot: bool = False
    engine: Tuple[str, str] = ("", "")
    browser: Tuple[str, str] = ("", "")


def parse_user_agent(user_agent: Optional[str]) -> UserAgentFacts:
    """
    Parse a raw User-Agent header into UserAgentFacts.

    Platform and OS tokens are read from the first comment section of the
    header. Mobile/bot flags and the browser come from the user-agents
    library. Unknown or empty input gives empty tokens.
    """
    raw = (user_agent or "").strip()
    tokens = comment_tokens(raw)
    platform, os_name = read_platform_and_os(tokens)

    ua = parse_ua(raw)

    return UserAgentFacts(
        raw_ua=raw,
        platform=platform,
        os=os_name,
        mobile_flag=bool(ua.is_mobile),
        bot=bool(ua.is_bot),
        engine=read_engine(raw, tokens),
        browser=(ua.browser.family or "", ua.browser.version_string or ""),
    )


def comment_tokens(raw: str) -> List[str]:
    match = COMMENT_PATTERN.search(raw)
    if not match:
        return []
    return [token.strip() for token in match.group(1).split(";") if token.strip()]


def read_platform_and_os(tokens: List[str]) -> Tuple[str, str]:
    """Map comment tokens to (platform, os)"""
    if not tokens:
        return "", ""

    platform = tokens[0]
    rest = [token for token in tokens[1:] if token != "U"]

    # iOS: the OS token carries the version, e.g. "CPU iPhone OS 8_0 like Mac OS X"
    if platform in IOS_DEVICES:
        for token in rest:
            if " OS " in f" {token} " or "like Mac OS X" in token:
                return platform, token
        return platform, rest[0] if rest else ""

    # Chrome/WebView on Android: "(Linux; Android 5.0; Nexus 5 Build/LRX21O)"
    if platform == "Linux" or platform.startswith("X11"):
        for token in rest:
            if token.startswith("Android"):
                return platform, token
        for token in rest:
            if token.startswith("Linux"):
                return platform, token
        return platform, "Linux"

    # Firefox for Android: "(Android 9; Mobile; rv:68.0)" reports the device class as OS
    if platform.startswith("Android"):
        return platform, rest[0] if rest and not rest[0].startswith("rv:") else ""

    if platform.startswith("Windows"):
        return "Windows", platform

    if platform == "Macintosh":
        for token in rest:
            if "Mac OS X" in token:
                return platform, token
        return platform, ""

    return platform, rest[0] if rest else ""


def read_engine(raw: str, tokens: List[str]) -> Tuple[str, str]:
    products = dict(PRODUCT_PATTERN.findall(COMMENT_PATTERN.sub("", raw)))

    if "AppleWebKit" in products:
        return "AppleWebKit", products["AppleWebKit"]
    if "Gecko" in products:
        for token in tokens:
            rv = GECKO_RV_PATTERN.match(token)
            if rv:
                return "Gecko", rv.group(1)
        return "Gecko", products["Gecko"]
    if "Presto" in products:
        return "Presto", products["Presto"]

    for token in tokens:
        if token.startswith("Trident/"):
            return "Trident", token.split("/", 1)[1]

    return "", ""
