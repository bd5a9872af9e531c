"""Static site content: section ids, canonical order, display names, demos."""
from __future__ import annotations
from typing import Dict, List

# Canonical top-to-bottom page order.
SECTION_ORDER: List[str] = [
    "hero",
    "intro-cursor",
    "featured-demo",
    "how-it-works",
    "implications",
    "capabilities",
    "showcase",
    "economics",
    "next-steps",
    "meta-reveal",
]

SECTION_NAMES: Dict[str, str] = {
    "hero": "Hero",
    "intro-cursor": "What is Cursor",
    "featured-demo": "Featured Demo ($70M Impact)",
    "how-it-works": "How It Works",
    "implications": "What This Means",
    "capabilities": "Core Capabilities",
    "showcase": "More Examples",
    "economics": "Economics (99% Cost Reduction)",
    "next-steps": "Getting Started",
    "meta-reveal": "The Reveal",
}

SUMMARIES: Dict[str, str] = {
    "hero": "Stop presenting ideas. Start showing them. AI development tools let you build working "
            "prototypes in hours, replacing static slides with interactive demos.",
    "intro-cursor": "Describe what you want in plain English and the AI writes the code. Senior leaders can "
                    "build solutions directly and account teams can create live demos faster than slides.",
    "featured-demo": "Real example: an MD built an AI & Data Deal Identification system for MMS in 2 hours. "
                     "It tags deals, generates emails, and added $70M+ to the pipeline.",
    "how-it-works": "Four steps: (1) describe the problem in plain English, (2) AI builds the solution, "
                    "(3) refine through conversation, (4) deploy and run. Total time: about 2 hours.",
    "implications": "When you can build solutions yourself you show working prototypes in client meetings, "
                    "validate ideas in hours instead of months, and stand out while competitors show slides.",
    "capabilities": "Three core capabilities: plain English to code, hours not weeks, and instant changes "
                    "based on feedback.",
    "showcase": "Three more real examples: VZT Circuit Decommissioning (1 hour), Training Discovery & "
                "Scheduling (30 mins), and VCG CES Next Gen Implementation (4 hours).",
    "economics": "Traditional development costs $12K-$18K and takes 2-3 weeks. AI-powered builds cost "
                 "$25-$70 and take 2-4 hours. That's a 99% cost reduction.",
    "next-steps": "Build something simple for an upcoming meeting, then make working prototypes your "
                  "standard approach instead of slides.",
    "meta-reveal": "This entire website, including the guide analyzing your behavior right now, was built "
                   "in about 30 minutes with the same tools.",
}

# Sections the guide will summarize or highlight on request.
GUIDE_SECTIONS: List[str] = [
    "hero",
    "featured-demo",
    "how-it-works",
    "implications",
    "capabilities",
    "showcase",
    "economics",
    "next-steps",
]

DEMOS: Dict[str, Dict[str, str]] = {
    "mms": {
        "url": "#mms",
        "title": "MMS AI & Data Deal Tagging",
        "description": "Auto-identifies Data & AI opportunities, $70M+ pipeline impact, 2 hours",
    },
    "vzt": {
        "url": "#vzt",
        "title": "VZT Circuit Decommissioning",
        "description": "Identifies circuits for decom, 1 hour build time",
    },
    "training": {
        "url": "#training",
        "title": "Training Discovery",
        "description": "Training scheduling system, 30 minutes build time",
    },
    "vcg": {
        "url": "#vcg",
        "title": "VCG CES Next Gen",
        "description": "CES implementation, 4 hours build time",
    },
}

DEFAULT_SHOWCASE_ORDER: List[str] = ["mms", "vzt", "training", "vcg"]

MODES = ("executive", "detailed")


def section_name(section: str) -> str:
    return SECTION_NAMES.get(section, section)
