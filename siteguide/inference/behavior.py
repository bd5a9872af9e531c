"""Heuristic visitor classification from section dwell telemetry.

Dwell times are the values reported by the client (last report wins); they are
never re-derived from entry timestamps.
"""
from __future__ import annotations
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from siteguide.core.content import SECTION_ORDER, section_name
from siteguide.core.session_store import Session

# Interest rules: (interest, [(section, threshold), ...], pair-sum threshold)
INTEREST_RULES: list[tuple[str, list[tuple[str, int]], int]] = [
    ("real-examples", [("showcase", 8), ("featured-demo", 10)], 15),
    ("implementation", [("how-it-works", 8), ("capabilities", 8)], 15),
    ("business-value", [("economics", 8), ("implications", 10)], 15),
]

DECISION_MIN_VISITS = 5
DECISION_VALUE_DWELL = 5
ANALYST_MECHANISM_DWELL = 10
SKEPTIC_MAX_SECONDS = 60
SKEPTIC_MAX_VISITS = 4

HIGH_ENGAGEMENT_RATIO = 1.3
LOW_ENGAGEMENT_RATIO = 0.7

PROFILE_INSIGHTS = {
    "decision-maker": "Focused on business case and ROI. Likely senior role with budget authority. "
                      "Needs executive summary and concrete value props.",
    "analyst": "Technical evaluation mode. Wants to understand mechanisms and feasibility. "
               "Needs implementation details and capability specs.",
    "skeptic": "Seeking proof points and validation. May have previous negative experiences. "
               "Needs multiple examples and risk mitigation info.",
    "explorer": "Open-minded discovery. Building mental model of possibilities. "
                "Appreciates comprehensive information and use case variety.",
}


@dataclass
class Engagement:
    most_engaged_section: str
    most_engaged_time: int
    least_engaged_section: str
    least_engaged_time: int
    avg_dwell_time: float
    high_engagement: List[str]
    low_engagement: List[str]
    quality: str


@dataclass
class BehaviorSummary:
    time_on_site: int
    visited_count: int
    visited_sections: List[str]
    dwell_times: Dict[str, int]
    current_section: Optional[str]
    interests: List[str]
    profile: str
    navigation_pattern: str
    skipped: List[str] = field(default_factory=list)
    motivations: List[str] = field(default_factory=list)
    engagement: Optional[Engagement] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_payload(self) -> Dict[str, Any]:
        """camelCase view used on the wire."""
        payload: Dict[str, Any] = {
            "timeOnSite": self.time_on_site,
            "visitedCount": self.visited_count,
            "visitedSections": list(self.visited_sections),
            "dwellTimes": dict(self.dwell_times),
            "currentSection": self.current_section,
            "interests": list(self.interests),
            "profile": self.profile,
            "navigationPattern": self.navigation_pattern,
            "skipped": list(self.skipped),
            "motivations": list(self.motivations),
        }
        if self.engagement is not None:
            e = self.engagement
            payload.update({
                "mostEngagedSection": e.most_engaged_section,
                "leastEngagedSection": e.least_engaged_section,
                "avgDwellTime": round(e.avg_dwell_time, 1),
                "highEngagement": list(e.high_engagement),
                "lowEngagement": list(e.low_engagement),
                "engagementQuality": e.quality,
            })
        return payload


def infer_interests(dwell: Dict[str, int]) -> List[str]:
    interests: List[str] = []
    for interest, singles, pair_threshold in INTEREST_RULES:
        total = sum(dwell.get(section, 0) for section, _ in singles)
        if total > pair_threshold or any(dwell.get(s, 0) > t for s, t in singles):
            interests.append(interest)
    return interests


def infer_profile(dwell: Dict[str, int], visited_count: int, time_on_site: int) -> str:
    """Ordered decision table; the first matching rule wins."""
    if visited_count > DECISION_MIN_VISITS and dwell.get("economics", 0) > DECISION_VALUE_DWELL:
        return "decision-maker"
    if (dwell.get("how-it-works", 0) > ANALYST_MECHANISM_DWELL
            or dwell.get("capabilities", 0) > ANALYST_MECHANISM_DWELL):
        return "analyst"
    if time_on_site < SKEPTIC_MAX_SECONDS and visited_count < SKEPTIC_MAX_VISITS:
        return "skeptic"
    return "explorer"


def navigation_pattern(visited: List[str]) -> tuple[str, List[str]]:
    """Classify by the largest forward jump between consecutive visits."""
    positions = [SECTION_ORDER.index(s) for s in visited if s in SECTION_ORDER]
    largest = 0
    skipped: List[str] = []
    for cur, nxt in zip(positions, positions[1:]):
        gap = nxt - cur
        largest = max(largest, gap)
        for idx in range(cur + 1, nxt):
            name = SECTION_ORDER[idx]
            if name not in skipped:
                skipped.append(name)
    if largest > 2:
        return "jumping", skipped
    if largest > 1:
        return "selective", skipped
    return "linear", skipped


def engagement_breakdown(dwell: Dict[str, int]) -> Optional[Engagement]:
    if not dwell:
        return None
    ranked = sorted(dwell.items(), key=lambda kv: kv[1], reverse=True)
    avg = sum(dwell.values()) / len(dwell)
    if avg > 12:
        quality = "high"
    elif avg < 5:
        quality = "scanning"
    else:
        quality = "moderate"
    return Engagement(
        most_engaged_section=ranked[0][0],
        most_engaged_time=ranked[0][1],
        least_engaged_section=ranked[-1][0],
        least_engaged_time=ranked[-1][1],
        avg_dwell_time=avg,
        high_engagement=[s for s, t in ranked if t > avg * HIGH_ENGAGEMENT_RATIO],
        low_engagement=[s for s, t in ranked if t < avg * LOW_ENGAGEMENT_RATIO],
        quality=quality,
    )


def infer_motivations(dwell: Dict[str, int], interests: List[str]) -> List[str]:
    motivations: List[str] = []
    if "real-examples" in interests:
        if dwell.get("featured-demo", 0) > 12:
            motivations.append("Seeks proof through concrete case studies. Likely needs to justify "
                               "decisions with real ROI data.")
        else:
            motivations.append("Interested in variety of use cases. May be exploring applicability "
                               "to their context.")
    if "implementation" in interests:
        if dwell.get("how-it-works", 0) > dwell.get("capabilities", 0):
            motivations.append('Focused on process and methodology. Wants to understand the "how" '
                               "before committing.")
        else:
            motivations.append("Feature-driven evaluation. Assessing if capabilities match their needs.")
    if "business-value" in interests:
        if dwell.get("economics", 0) > 10:
            motivations.append("Cost-conscious decision maker. Needs clear ROI justification for stakeholders.")
        if dwell.get("implications", 0) > 10:
            motivations.append("Strategic thinker. Evaluating competitive advantage and organizational impact.")
    return motivations


def analyze_behavior(session: Session, now: Optional[float] = None) -> BehaviorSummary:
    now = time.time() if now is None else now
    dwell = dict(session.dwell_times)
    visited = list(session.visited_sections)
    time_on_site = max(0, int(now - session.session_start))
    interests = infer_interests(dwell)
    pattern, skipped = navigation_pattern(visited)
    return BehaviorSummary(
        time_on_site=time_on_site,
        visited_count=len(visited),
        visited_sections=visited,
        dwell_times=dwell,
        current_section=session.current_section,
        interests=interests,
        profile=infer_profile(dwell, len(visited), time_on_site),
        navigation_pattern=pattern,
        skipped=skipped,
        motivations=infer_motivations(dwell, interests),
        engagement=engagement_breakdown(dwell),
    )


def unvisited_sections(session: Session) -> List[str]:
    return [s for s in SECTION_ORDER if s not in session.visited_sections]


def predict_next(behavior: BehaviorSummary, unvisited: List[str]) -> str:
    if behavior.profile == "decision-maker" and "economics" in unvisited:
        return "You'll likely want to see the economics section next to understand ROI."
    if behavior.profile == "analyst" and "how-it-works" in unvisited:
        return "You'll probably want to understand how it works in detail."
    if behavior.profile == "skeptic" and "showcase" in unvisited:
        return "More proof points are waiting in the showcase section."
    if unvisited:
        return f"Consider checking out: {', '.join(unvisited[:2])}"
    return "Continue exploring the remaining sections."


def detailed_reasoning(session: Session, now: Optional[float] = None) -> str:
    behavior = analyze_behavior(session, now)
    eng = behavior.engagement
    if eng is None:
        return "Insufficient data for analysis."

    parts = [
        f'📊 ENGAGEMENT ANALYSIS: User shows "{eng.quality}" engagement '
        f"(avg {round(eng.avg_dwell_time)}s/section). "
        f"Peak interest: {section_name(eng.most_engaged_section)} ({eng.most_engaged_time}s). "
    ]
    if eng.least_engaged_time < eng.avg_dwell_time * 0.5:
        parts.append(f"Low interest: {section_name(eng.least_engaged_section)} "
                     f"({eng.least_engaged_time}s - possible mismatch). ")

    parts.append(f"\n\n🧭 NAVIGATION: {behavior.navigation_pattern} pattern. ")
    if behavior.navigation_pattern == "jumping":
        parts.append("User is goal-oriented, jumping to specific sections. ")
    elif behavior.navigation_pattern == "selective":
        parts.append("Deliberate selection of sections. User knows what they're looking for. ")
    else:
        parts.append("Following natural flow. Comprehensive evaluation mindset. ")
    if behavior.skipped:
        intent = "time pressure" if behavior.profile == "decision-maker" else "specific information seeking"
        parts.append(f"Skipped {len(behavior.skipped)} section(s) - may indicate {intent}. ")

    parts.append(f'\n\n👤 PROFILE: Detected as "{behavior.profile}". {PROFILE_INSIGHTS[behavior.profile]}')
    if behavior.motivations:
        parts.append(f"\n\n🎯 MOTIVATIONS: {' '.join(behavior.motivations)}")

    parts.append(f"\n\n💡 PREDICTION: {predict_next(behavior, unvisited_sections(session))} ")
    if behavior.time_on_site > 60:
        parts.append("High engagement suggests genuine interest - likely to take action.")
    else:
        parts.append("Early exploration phase - still building context.")
    return "".join(parts)
