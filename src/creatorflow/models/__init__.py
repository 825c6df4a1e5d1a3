from .profile import Profile
from .channel import Channel
from .status import Status
from .idea import Idea, Priority

__all__ = ["Profile", "Channel", "Status", "Idea", "Priority"]
