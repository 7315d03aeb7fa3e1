from __future__ import annotations

from typing import Optional

UNKNOWN_DEVICE = "Unknown Device"


def _operating_system(ua: str) -> str:
    if "windows" in ua:
        return "Windows"
    if "mac os" in ua and "iphone" not in ua and "ipad" not in ua:
        return "macOS"
    if "android" in ua:
        return "Android"
    if "iphone" in ua or "ipad" in ua:
        return "iOS"
    if "linux" in ua:
        return "Linux"
    return "Unknown OS"


def _browser(ua: str) -> str:
    if "edg/" in ua:
        return "Edge"
    if "chrome" in ua and "opr/" not in ua:
        return "Chrome"
    if "firefox" in ua:
        return "Firefox"
    if "safari" in ua and "chrome" not in ua:
        return "Safari"
    if "opr/" in ua or "opera" in ua:
        return "Opera"
    return "Unknown Browser"


# PUBLIC_INTERFACE
def parse_device_name(user_agent: Optional[str]) -> str:
    """Human readable "<browser> on <os>" label for a login session."""
    if not user_agent or not user_agent.strip():
        return UNKNOWN_DEVICE
    ua = user_agent.lower()
    return f"{_browser(ua)} on {_operating_system(ua)}"
