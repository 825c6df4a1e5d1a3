# Re-export primary service layer entry points for convenience.
from .idea import (
    create_idea,
    get_idea_or_404,
    list_ideas,
    update_idea,
    soft_delete_idea,
    restore_idea,
    permanently_delete_idea,
    empty_bin,
    IdeaNotFoundError,
    MissingPipelineError,
)
from .channel import (
    create_channel,
    get_channel_or_404,
    list_channels,
    update_channel,
    delete_channel,
    ChannelDeletePolicy,
    ChannelNotFoundError,
)
from .status import (
    create_status,
    get_status_or_404,
    list_statuses,
    update_status,
    delete_status,
    StatusNotFoundError,
)
from .profile import (
    get_profile_or_404,
    provision_profile,
    update_profile,
    ProfileNotFoundError,
)
from .seed import ensure_defaults

__all__ = [
    # idea
    "create_idea",
    "get_idea_or_404",
    "list_ideas",
    "update_idea",
    "soft_delete_idea",
    "restore_idea",
    "permanently_delete_idea",
    "empty_bin",
    "IdeaNotFoundError",
    "MissingPipelineError",
    # channel
    "create_channel",
    "get_channel_or_404",
    "list_channels",
    "update_channel",
    "delete_channel",
    "ChannelDeletePolicy",
    "ChannelNotFoundError",
    # status
    "create_status",
    "get_status_or_404",
    "list_statuses",
    "update_status",
    "delete_status",
    "StatusNotFoundError",
    # profile
    "get_profile_or_404",
    "provision_profile",
    "update_profile",
    "ProfileNotFoundError",
    # seeding
    "ensure_defaults",
]
