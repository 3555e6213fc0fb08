# redirector/schemas.py

from pydantic import BaseModel
from typing import Optional

from redirector.classifier import Outcome, Platform


class DebugReport(BaseModel):
    """User agent details echoed by the debug route"""

    full_ua: str
    is_mobile: bool
    is_bot: bool
    platform: str
    os: str
    engine_name: str = ""
    engine_version: str = ""
    browser_name: str = ""
    browser_version: str = ""

    def render(self) -> str:
        return (
            "----------------- DEBUG INFO ---------------\n\n"
            f"Full UA?: {self.full_ua}\n"
            f"Is mobile?: {str(self.is_mobile).lower()}\n"
            f"Is bot?: {str(self.is_bot).lower()}\n"
            f"Platform: {self.platform}\n"
            f"OS: {self.os}\n"
            f"Engine name: {self.engine_name}\n"
            f"Engine version: {self.engine_version}\n"
            f"Browser name: {self.browser_name}\n"
            f"Browser version: {self.browser_version}\n"
        )


class ClassificationResult(BaseModel):
    outcome: Outcome
    platform: Platform
    version: float
    redirect_url: Optional[str] = None
