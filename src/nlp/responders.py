# src/nlp/responders.py
"""Reply strategies for the conversation session.

None of these understand language. They stand in for an inference backend
behind the same ``respond(history) -> Reply`` contract.
"""
import itertools
import random
from typing import Optional, Sequence, Tuple

from data.models import Catalog, parameter_info
from explorer.filters import FilterCriteria, apply_filters, available_regions, summarize
from nlp.messages import Attachment, AttachmentKind, Reply, Role

DEFAULT_CANDIDATES: Tuple[Reply, ...] = (
    Reply(
        "I'm analyzing the ARGO data for your query. Here are the results I found:",
        (Attachment(AttachmentKind.CHART, "Data Visualization", "Interactive chart showing your requested data"),),
    ),
    Reply(
        "Based on the ARGO float network data, here's what I discovered about your query:",
        (Attachment(AttachmentKind.TABLE, "Data Summary", "Tabular view of the relevant measurements"),),
    ),
    Reply(
        "I found several interesting patterns in the ocean data. "
        "Let me break this down for you with some visualizations:"
    ),
)

QUICK_PROMPTS: Tuple[str, ...] = (
    "Show me global temperature anomalies",
    "Find floats near the Gulf Stream",
    "Compare salinity in Pacific vs Atlantic",
)


def latest_user_text(history: Sequence) -> str:
    for message in reversed(history):
        if message.role is Role.USER:
            return message.content
    return ""


class Responder:
    """Produces a reply from the conversation so far.

    ``respond`` may also be a coroutine function; the session awaits it on the
    running event loop.
    """

    def respond(self, history: Sequence) -> Reply:
        raise NotImplementedError


class RandomResponder(Responder):
    """Picks uniformly among a fixed candidate set"""

    def __init__(self, candidates: Sequence[Reply] = DEFAULT_CANDIDATES, rng: Optional[random.Random] = None):
        if not candidates:
            raise ValueError("RandomResponder needs at least one candidate reply")
        self.candidates = tuple(candidates)
        self.rng = rng or random.Random()

    def respond(self, history):
        return self.rng.choice(self.candidates)


class ScriptedResponder(Responder):
    """Cycles through fixed replies in order"""

    def __init__(self, replies: Sequence[Reply]):
        if not replies:
            raise ValueError("ScriptedResponder needs at least one reply")
        self._replies = itertools.cycle(tuple(replies))

    def respond(self, history):
        return next(self._replies)


class KeywordResponder(Responder):
    """Rule-based replies computed from the catalog"""

    def __init__(self, catalog: Catalog, fallback: Optional[Responder] = None):
        self.catalog = catalog
        self.fallback = fallback

    def respond(self, history):
        prompt = latest_user_text(history).lower()

        region = next((r for r in available_regions(self.catalog) if r.lower() in prompt), None)
        floats = apply_filters(self.catalog, FilterCriteria(region=region or "all"))
        summary = summarize(floats)
        scope = f"in the {region}" if region else "across the catalog"

        parameter = next((p for p in self.catalog.parameters() if p in prompt), None)
        if parameter:
            info = parameter_info(parameter)
            surface = []
            for record in floats:
                values = self.catalog.get_profile(record.id).values(parameter)
                if values:
                    surface.append(values[0][1])
            if surface:
                average = sum(surface) / len(surface)
                return Reply(
                    f"The average surface {info.label.lower()} {scope} is {average:.1f} {info.unit}, "
                    f"from {len(surface)} of {summary.total} floats.",
                    (Attachment(AttachmentKind.CHART, f"{info.label} vs Depth Profile",
                                f"{info.label} profiles {scope}"),),
                )

        if "active" in prompt or "float" in prompt or region:
            return Reply(
                f"There are {summary.active} active floats out of {summary.total} {scope}, "
                f"spread over {summary.regions} region(s).",
                (Attachment(AttachmentKind.MAP, "Float Locations", f"{summary.total} floats {scope}"),),
            )

        if self.fallback is not None:
            return self.fallback.respond(history)
        return Reply(
            "I can help you explore ARGO ocean data! Try asking about temperature, salinity or "
            "oxygen, or about floats in a particular region."
        )
