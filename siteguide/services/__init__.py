"""Service layer modules for the site guide."""

from .actions import dispatch_action
from .agent import respond_to_message
from .handler import GuideHandler, InvalidRequest
from .narrative import Narrative, narrate

__all__ = ["GuideHandler", "InvalidRequest", "Narrative", "dispatch_action", "narrate", "respond_to_message"]
