# redirector/classifier.py

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from redirector.useragent import UserAgentFacts, parse_user_agent

# Generic OS value some parsers report for Firefox on Android
MOBILE_OS_MARKER = "Mobile"

ANDROID_PREFIX = "Android"

IOS_VERSION_PATTERN = r"OS (\d+(?:_\d+){1,2})_?\s"
ANDROID_VERSION_PATTERN = r"Android (\d+.\d+)"
MOBILE_BROWSER_PATTERN = r"Mobile Safari/{1}((\d+.){2,3})"

# Real OS tokens are short; longer input is cut before matching
MAX_OS_TOKEN_LENGTH = 128


class Outcome(str, Enum):
    SHOW_FALLBACK = "show_fallback"
    REDIRECT_TO_APP_STORE = "redirect_to_app_store"
    REDIRECT_TO_PLAY_STORE = "redirect_to_play_store"


class Platform(str, Enum):
    IPHONE = "iphone"
    IPAD = "ipad"
    ANDROID = "android"
    OTHER = "other"

    @classmethod
    def from_facts(cls, facts: UserAgentFacts) -> "Platform":
        """Single place where raw parser strings become a platform"""
        if facts.platform == "iPhone":
            return cls.IPHONE
        if facts.platform == "iPad":
            return cls.IPAD
        if effective_os(facts).startswith(ANDROID_PREFIX):
            return cls.ANDROID
        return cls.OTHER


@dataclass(frozen=True)
class Thresholds:
    min_ios_version: float = 8.0
    min_android_version: float = 5.0
    android_strict_mode: bool = True


@dataclass(frozen=True)
class VersionPatterns:
    """Compiled once at startup, shared by every request"""

    ios: re.Pattern
    android: re.Pattern
    mobile_browser: re.Pattern

    @classmethod
    def compile(
        cls,
        ios: str = IOS_VERSION_PATTERN,
        android: str = ANDROID_VERSION_PATTERN,
        mobile_browser: str = MOBILE_BROWSER_PATTERN,
    ) -> "VersionPatterns":
        # re.error propagates: a broken pattern must stop the process at startup
        return cls(
            ios=re.compile(ios),
            android=re.compile(android),
            mobile_browser=re.compile(mobile_browser),
        )


DEFAULT_PATTERNS = VersionPatterns.compile()


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    platform: Platform
    version: float
    reason: str


def is_mobile(facts: UserAgentFacts) -> bool:
    # Firefox on Android leaves the mobile flag unset but reports OS "Mobile"
    return facts.mobile_flag or facts.os == MOBILE_OS_MARKER


def effective_os(facts: UserAgentFacts) -> str:
    # With OS "Mobile" the real OS (e.g. "Android 9") sits in the platform field
    if facts.os == MOBILE_OS_MARKER:
        return facts.platform
    return facts.os


def extract_version(os_token: str, pattern: re.Pattern, replace_underscore_with_dot: bool) -> float:
    """
    Extract a numeric version from an OS token.

    Uses the first capture group of the first match. Only the major.minor
    part is converted, so "8_0_0" gives 8.0. Returns 0.0 when nothing
    matches or the captured text is not a number.
    """
    if not os_token:
        return 0.0

    match = pattern.search(os_token[:MAX_OS_TOKEN_LENGTH])
    if not match or match.group(1) is None:
        return 0.0

    version = match.group(1)
    if replace_underscore_with_dot:
        version = version.replace("_", ".")

    major_minor = ".".join(version.strip(".").split(".")[:2])
    try:
        return float(major_minor)
    except ValueError:
        return 0.0


class Classifier:
    """
    Decides between the fallback page and a store redirect.

    Pure and stateless after construction, safe to share across requests.
    """

    def __init__(self, thresholds: Thresholds, patterns: Optional[VersionPatterns] = None):
        self.thresholds = thresholds
        self.patterns = patterns or DEFAULT_PATTERNS

    def classify(self, facts: UserAgentFacts) -> Decision:
        if not is_mobile(facts):
            return Decision(Outcome.SHOW_FALLBACK, Platform.OTHER, 0.0, "Result: not a mobile device")

        platform = Platform.from_facts(facts)

        if platform is Platform.IPHONE:
            return self._classify_iphone(facts)

        if platform is Platform.IPAD:
            return Decision(Outcome.SHOW_FALLBACK, platform, 0.0, "Result: iPad is not supported")

        if platform is Platform.ANDROID:
            return self._classify_android(facts)

        return Decision(Outcome.SHOW_FALLBACK, platform, 0.0, "Result: platform not supported")

    def _classify_iphone(self, facts: UserAgentFacts) -> Decision:
        minimum = self.thresholds.min_ios_version
        version = extract_version(effective_os(facts), self.patterns.ios, True)

        if version >= minimum:
            return Decision(
                Outcome.REDIRECT_TO_APP_STORE,
                Platform.IPHONE,
                version,
                f"Result: IOS version is supported. Minimum version: {minimum:f}. Your version: {version:f}",
            )
        return Decision(
            Outcome.SHOW_FALLBACK,
            Platform.IPHONE,
            version,
            f"Result: IOS version not supported. Needs to be at least {minimum:f}. Your version is: {version:f}",
        )

    def _classify_android(self, facts: UserAgentFacts) -> Decision:
        minimum = self.thresholds.min_android_version
        version = self.android_version(facts)

        if version >= minimum:
            return Decision(
                Outcome.REDIRECT_TO_PLAY_STORE,
                Platform.ANDROID,
                version,
                f"Result: Android version is supported. Minimum version: {minimum:f}. Your version: {version:f}",
            )
        return Decision(
            Outcome.SHOW_FALLBACK,
            Platform.ANDROID,
            version,
            "Result: Android version or device not supported. "
            f"Needs to be a mobile device with at least version {minimum:f}. Your version is: {version:f}",
        )

    def android_version(self, facts: UserAgentFacts) -> float:
        """Android version, or 0.0 when strict mode finds no mobile browser signature"""
        if self.thresholds.android_strict_mode and not self.has_mobile_browser(facts):
            return 0.0
        return extract_version(effective_os(facts), self.patterns.android, False)

    def has_mobile_browser(self, facts: UserAgentFacts) -> bool:
        return bool(self.patterns.mobile_browser.search(facts.raw_ua)) or facts.os == MOBILE_OS_MARKER


def classify(
    facts: UserAgentFacts,
    thresholds: Thresholds,
    patterns: Optional[VersionPatterns] = None,
) -> Outcome:
    """Classify parsed facts into one of the three outcomes"""
    return Classifier(thresholds, patterns).classify(facts).outcome


def classify_user_agent(
    user_agent: str,
    thresholds: Thresholds,
    patterns: Optional[VersionPatterns] = None,
) -> Outcome:
    """Parse a raw User-Agent header and classify it"""
    return classify(parse_user_agent(user_agent), thresholds, patterns)
